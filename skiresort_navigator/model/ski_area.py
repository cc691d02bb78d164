"""Ski area input data - runs, lifts, sub-regions, POIs and hourly weather.

These records are supplied by external collaborators (database, weather
service) and consumed read-only by the navigation core:
- SkiAreaDetails: A resort with its runs, lifts and named sub-regions
- RunData / LiftData: Features with GeoJSON LineString or Polygon geometry
- SubRegion / RegionBounds: Named areas of large linked resorts
- POIData: Points of interest (toilets, restaurants, viewpoints)
- HourlyWeather: One hour of cloud cover and visibility

from_dict() accepts the camelCase JSON the web frontend and API exchange.
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

from shapely.geometry import Point, box


def as_utc(when: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as UTC."""
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


@dataclass(frozen=True)
class RegionBounds:
    """Axis-aligned bounding box of a sub-region in degrees."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        """Check whether a point lies inside (or on the edge of) the bounds."""
        return box(self.min_lng, self.min_lat, self.max_lng, self.max_lat).covers(Point(lng, lat))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegionBounds":
        return cls(
            min_lat=float(data["minLat"]),
            max_lat=float(data["maxLat"]),
            min_lng=float(data["minLng"]),
            max_lng=float(data["maxLng"]),
        )


@dataclass(frozen=True)
class SubRegion:
    """A named part of a linked ski area (e.g. one valley of a ski circus)."""

    id: str
    name: str
    bounds: Optional[RegionBounds] = None
    centroid: Optional[tuple[float, float]] = None  # (lat, lng)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubRegion":
        bounds = data.get("bounds")
        centroid = data.get("centroid")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            bounds=RegionBounds.from_dict(bounds) if bounds else None,
            centroid=(float(centroid["lat"]), float(centroid["lng"])) if centroid else None,
        )


@dataclass(frozen=True)
class RunData:
    """A marked ski run.

    Attributes:
        id: Source feature ID
        name: Display name (None for unnamed connecting pistes)
        difficulty: novice/easy/intermediate/advanced/expert/freeride or None
        geometry: GeoJSON LineString or Polygon (positions as [lng, lat, elevation?])
        sub_region_id: Optional sub-region the run belongs to
        sub_region_name: Optional sub-region display name
    """

    id: str
    name: Optional[str]
    difficulty: Optional[str]
    geometry: dict[str, Any]
    sub_region_id: Optional[str] = None
    sub_region_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunData":
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            difficulty=data.get("difficulty"),
            geometry=data["geometry"],
            sub_region_id=data.get("subRegionId"),
            sub_region_name=data.get("subRegionName"),
        )


@dataclass(frozen=True)
class LiftData:
    """A lift (aerialway or surface lift), drawn from bottom to top station."""

    id: str
    name: Optional[str]
    lift_type: Optional[str]
    geometry: dict[str, Any]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LiftData":
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            lift_type=data.get("liftType"),
            geometry=data["geometry"],
        )


@dataclass(frozen=True)
class POIData:
    """A point of interest on the mountain."""

    id: str
    type: str
    name: Optional[str]
    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "POIData":
        return cls(
            id=str(data["id"]),
            type=data["type"],
            name=data.get("name"),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
        )


@dataclass(frozen=True)
class HourlyWeather:
    """Weather for one hour at the resort.

    Cloud cover values are percentages (0-100), visibility in meters,
    precipitation and snowfall in mm/cm for the hour.
    """

    time: datetime
    cloud_cover: float
    cloud_cover_low: float = 0.0
    cloud_cover_mid: float = 0.0
    cloud_cover_high: float = 0.0
    visibility: Optional[float] = None
    precipitation: float = 0.0
    snowfall: float = 0.0

    @property
    def time_utc(self) -> datetime:
        return as_utc(self.time)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HourlyWeather":
        time = data["time"]
        if isinstance(time, str):
            time = datetime.fromisoformat(time)
        return cls(
            time=time,
            cloud_cover=float(data.get("cloudCover", 0.0)),
            cloud_cover_low=float(data.get("cloudCoverLow", 0.0)),
            cloud_cover_mid=float(data.get("cloudCoverMid", 0.0)),
            cloud_cover_high=float(data.get("cloudCoverHigh", 0.0)),
            visibility=data.get("visibility"),
            precipitation=float(data.get("precipitation") or 0.0),
            snowfall=float(data.get("snowfall") or 0.0),
        )


@dataclass
class SkiAreaDetails:
    """A ski area with everything the navigation graph is built from."""

    id: str
    name: str
    latitude: float
    longitude: float
    runs: list[RunData] = field(default_factory=list)
    lifts: list[LiftData] = field(default_factory=list)
    sub_regions: list[SubRegion] = field(default_factory=list)
    timezone: Optional[str] = None  # IANA name, e.g. "Europe/Zurich"; UTC when unknown

    def local_time(self, when: datetime) -> datetime:
        """Wall-clock time at the resort (UTC when the timezone is unknown)."""
        return as_utc(when).astimezone(ZoneInfo(self.timezone) if self.timezone else timezone.utc)

    def run_by_id(self, run_id: str) -> Optional[RunData]:
        return next((run for run in self.runs if run.id == run_id), None)

    def lift_by_id(self, lift_id: str) -> Optional[LiftData]:
        return next((lift for lift in self.lifts if lift.id == lift_id), None)

    def feature_name(self, feature_id: Optional[str]) -> Optional[str]:
        """Display name of a run or lift, None if unknown or unnamed."""
        if feature_id is None:
            return None
        feature = self.run_by_id(run_id=feature_id) or self.lift_by_id(lift_id=feature_id)
        return feature.name if feature is not None else None

    def region_name_at(self, lat: float, lng: float, feature_id: Optional[str] = None) -> Optional[str]:
        """Name of the sub-region a point (or the run it belongs to) lies in.

        A run's own sub-region assignment wins over geographic bounds.
        """
        if feature_id is not None:
            run = self.run_by_id(run_id=feature_id)
            if run is not None and (run.sub_region_name or run.sub_region_id):
                if run.sub_region_name:
                    return run.sub_region_name
                region = next((r for r in self.sub_regions if r.id == run.sub_region_id), None)
                if region is not None:
                    return region.name

        for region in self.sub_regions:
            if region.bounds is not None and region.bounds.contains(lat=lat, lng=lng):
                return region.name
        return None

    def fingerprint(self) -> str:
        """Content hash of the routable features, used as a cache version key."""
        payload = {
            "runs": [[r.id, r.name, r.difficulty, r.geometry] for r in self.runs],
            "lifts": [[lift.id, lift.name, lift.lift_type, lift.geometry] for lift in self.lifts],
        }
        encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
        return hashlib.sha1(encoded).hexdigest()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkiAreaDetails":
        """Create SkiAreaDetails from API / database JSON."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            runs=[RunData.from_dict(r) for r in data.get("runs", [])],
            lifts=[LiftData.from_dict(lift) for lift in data.get("lifts", [])],
            sub_regions=[SubRegion.from_dict(s) for s in data.get("subRegions") or []],
            timezone=data.get("timezone"),
        )

    def __repr__(self) -> str:
        return f"SkiAreaDetails({self.id}, {self.name!r}, runs={len(self.runs)}, lifts={len(self.lifts)})"
