"""Sun position lookup for sun exposure analysis.

Wraps astral's solar calculations behind a small callable interface so the
analyzer can be fed a deterministic provider in tests:
- SunPosition: azimuth (clockwise from North) and altitude above the horizon
- AstralSunPositionProvider: astral-backed provider with a rounded-time cache

Any callable (when, lat, lng) -> SunPosition can stand in for the provider.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from astral import Observer
from astral.sun import azimuth, elevation

from skiresort_navigator.constants import SunConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SunPosition:
    """Sun position as seen from a point on the ground.

    Attributes:
        azimuth_deg: Compass direction of the sun (0 = North, clockwise)
        altitude_deg: Angle above the horizon (negative = below)
    """

    azimuth_deg: float
    altitude_deg: float

    @property
    def is_up(self) -> bool:
        return self.altitude_deg > 0


SunPositionFn = Callable[[datetime, float, float], SunPosition]


class AstralSunPositionProvider:
    """Sun positions from astral, cached per rounded time and location.

    Times are rounded to SunConfig.POSITION_CACHE_ROUNDING_MIN minutes and
    coordinates to 3 decimals (~100 m), which keeps repeated lookups along a
    route cheap without visible loss of accuracy.
    """

    def __init__(self, rounding_minutes: int = SunConfig.POSITION_CACHE_ROUNDING_MIN) -> None:
        if rounding_minutes <= 0:
            raise ValueError(f"rounding_minutes must be positive, got {rounding_minutes}")
        self.rounding_minutes = rounding_minutes
        self._cache: dict[tuple[datetime, float, float], SunPosition] = {}

    def __call__(self, when: datetime, lat: float, lng: float) -> SunPosition:
        key = (self._round_time(when=when), round(lat, 3), round(lng, 3))
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        observer = Observer(latitude=lat, longitude=lng)
        position = SunPosition(
            azimuth_deg=azimuth(observer, key[0]),
            altitude_deg=elevation(observer, key[0]),
        )
        self._cache[key] = position
        return position

    def _round_time(self, when: datetime) -> datetime:
        """Round to the cache granularity; naive datetimes are treated as UTC."""
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        when = when.astimezone(timezone.utc)
        step_s = self.rounding_minutes * 60
        epoch_s = when.timestamp()
        rounded = round(epoch_s / step_s) * step_s
        return datetime.fromtimestamp(rounded, tz=timezone.utc)

    def clear(self) -> None:
        logger.debug(f"Clearing {len(self._cache)} cached sun positions")
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)
