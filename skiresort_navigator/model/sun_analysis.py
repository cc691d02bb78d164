"""Sun analysis results for a route."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class SunDistributionBucket:
    """Sun exposure within one time slice of the journey.

    Attributes:
        start_minutes: Bucket start, minutes after departure
        end_minutes: Bucket end, minutes after departure
        time_of_day: Resort-local clock time of the bucket start ("HH:MM", UTC when the resort timezone is unknown)
        sun_percentage: Time-weighted sun exposure within the bucket (0-100)
    """

    start_minutes: int
    end_minutes: int
    time_of_day: str
    sun_percentage: float


@dataclass(frozen=True)
class SunAnalysis:
    """Sun exposure of a route.

    Attributes:
        sun_percentage: Time-weighted share of the route spent in sun (0-100)
        sun_distribution: Exposure per time bucket, for charting
        is_reliable: False when weather data is missing or the route is too short
        is_bad_weather: True when clouds or visibility make sun routing pointless
        sample_count: Number of sampled route pieces
    """

    sun_percentage: float
    sun_distribution: tuple[SunDistributionBucket, ...] = ()
    is_reliable: bool = False
    is_bad_weather: bool = False
    sample_count: int = 0

    def __post_init__(self) -> None:
        if not 0.0 <= self.sun_percentage <= 100.0:
            raise ValueError(f"sun_percentage must be within 0-100, got {self.sun_percentage}")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["sun_distribution"] = [asdict(b) for b in self.sun_distribution]
        return data
