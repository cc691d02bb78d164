"""Live operating status of lifts and runs.

Supplied by the resort status feed; used to route around closed features
and to warn about lifts that close before the skier gets there.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class FeatureStatus:
    """Operating status of one lift or run.

    Attributes:
        feature_id: Lift or run ID
        is_open: Currently operating
        closing_time: When the feature closes today (None = no known closing)
    """

    feature_id: str
    is_open: bool = True
    closing_time: Optional[datetime] = None

    def minutes_until_closing(self, now: datetime) -> Optional[float]:
        if self.closing_time is None:
            return None
        return (self.closing_time - now).total_seconds() / 60

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeatureStatus":
        closing = data.get("closingTime")
        return cls(
            feature_id=str(data["id"]),
            is_open=data.get("status", "open") == "open",
            closing_time=datetime.fromisoformat(closing) if closing else None,
        )


@dataclass
class ResortStatus:
    """Status snapshot of a whole ski area."""

    lifts: dict[str, FeatureStatus] = field(default_factory=dict)
    runs: dict[str, FeatureStatus] = field(default_factory=dict)

    def status_for(self, feature_type: str, feature_id: str) -> Optional[FeatureStatus]:
        table = self.lifts if feature_type == "lift" else self.runs
        return table.get(feature_id)

    @property
    def closed_lift_ids(self) -> set[str]:
        return {s.feature_id for s in self.lifts.values() if not s.is_open}

    @property
    def closed_run_ids(self) -> set[str]:
        return {s.feature_id for s in self.runs.values() if not s.is_open}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResortStatus":
        lifts = [FeatureStatus.from_dict(item) for item in data.get("lifts", [])]
        runs = [FeatureStatus.from_dict(item) for item in data.get("runs", [])]
        return cls(
            lifts={s.feature_id: s for s in lifts},
            runs={s.feature_id: s for s in runs},
        )
