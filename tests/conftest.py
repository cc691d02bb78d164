"""Shared pytest fixtures for skiresort_navigator tests.

Provides small synthetic ski areas and a deterministic sun provider.

COORDINATE SYSTEM:
    Test resorts sit around lat 46.0, lng 7.0 (Valais). There 0.001 degrees
    of latitude is ~111 m and 0.001 degrees of longitude is ~77 m.
    Positions are GeoJSON order [lng, lat, elevation].
"""

from datetime import datetime, timezone
from typing import Optional

import pytest

from skiresort_navigator.core.sun_position import SunPosition
from skiresort_navigator.generators.graph_builder import build_navigation_graph
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.ski_area import HourlyWeather, LiftData, POIData, RunData, SkiAreaDetails

# =============================================================================
# BUILDERS
# =============================================================================


def make_run(
    run_id: str,
    coordinates: list[list[float]],
    name: Optional[str] = None,
    difficulty: Optional[str] = "intermediate",
    sub_region_name: Optional[str] = None,
) -> RunData:
    return RunData(
        id=run_id,
        name=name,
        difficulty=difficulty,
        geometry={"type": "LineString", "coordinates": coordinates},
        sub_region_name=sub_region_name,
    )


def make_lift(
    lift_id: str,
    coordinates: list[list[float]],
    name: Optional[str] = None,
    lift_type: Optional[str] = "chair_lift",
) -> LiftData:
    return LiftData(
        id=lift_id,
        name=name,
        lift_type=lift_type,
        geometry={"type": "LineString", "coordinates": coordinates},
    )


def make_area(runs: list[RunData], lifts: list[LiftData], area_id: str = "area-1", **kwargs) -> SkiAreaDetails:
    return SkiAreaDetails(
        id=area_id, name="Test Resort", latitude=46.01, longitude=7.0, runs=runs, lifts=lifts, **kwargs
    )


# =============================================================================
# FAKE SUN
# =============================================================================


class FixedSun:
    """Sun provider returning one fixed position and counting lookups."""

    def __init__(self, azimuth_deg: float, altitude_deg: float) -> None:
        self.position = SunPosition(azimuth_deg=azimuth_deg, altitude_deg=altitude_deg)
        self.calls = 0

    def __call__(self, when: datetime, lat: float, lng: float) -> SunPosition:
        self.calls += 1
        return self.position


@pytest.fixture
def sun_from_west() -> FixedSun:
    """Sun in the west at 30° altitude; shines on runs skied due south (aspect 270°)."""
    return FixedSun(azimuth_deg=270.0, altitude_deg=30.0)


@pytest.fixture
def sun_from_east() -> FixedSun:
    """Sun in the east; runs skied due south face away from it."""
    return FixedSun(azimuth_deg=90.0, altitude_deg=30.0)


@pytest.fixture
def start_time() -> datetime:
    return datetime(2025, 2, 15, 11, 0, tzinfo=timezone.utc)


def clear_sky(start: datetime, hours: int = 3, cloud_cover: float = 0.0) -> list[HourlyWeather]:
    return [
        HourlyWeather(time=start.replace(hour=start.hour + h), cloud_cover=cloud_cover, visibility=20000)
        for h in range(hours)
    ]


# =============================================================================
# SKI AREAS
# =============================================================================


@pytest.fixture
def loop_area() -> SkiAreaDetails:
    """One run down and one chairlift back up, sharing both endpoints.

    Panorama: 2200m (lat 46.010) -> 2000m (lat 46.000)
    Express: 2000m (lat 46.000) -> 2200m (lat 46.010)
    """
    return make_area(
        runs=[make_run("R1", [[7.0, 46.010, 2200.0], [7.0, 46.000, 2000.0]], name="Panorama")],
        lifts=[make_lift("L1", [[7.0, 46.000, 2000.0], [7.0, 46.010, 2200.0]], name="Express")],
    )


@pytest.fixture
def resort_area() -> SkiAreaDetails:
    """Gondola plus two runs back to the valley station.

    Valley Gondola: 1500m (lat 46.000) -> 2300m (lat 46.020)
    Panorama (easy): long zig-zag from the top station to the valley
    Black Wall (advanced): direct line, starting ~39 m east of the top station

    From the top station Black Wall is clearly faster; Panorama is the
    alternative within a 1.5x time budget.
    """
    return make_area(
        runs=[
            make_run(
                "R1",
                [[7.000, 46.020, 2300.0], [7.010, 46.010, 1900.0], [7.000, 46.000, 1500.0]],
                name="Panorama",
                difficulty="easy",
            ),
            make_run(
                "R2",
                [[7.0005, 46.020, 2295.0], [7.000, 46.000, 1500.0]],
                name="Black Wall",
                difficulty="advanced",
            ),
        ],
        lifts=[make_lift("L1", [[7.0, 46.000, 1500.0], [7.0, 46.020, 2300.0]], name="Valley Gondola", lift_type="gondola")],
    )


@pytest.fixture
def resort_graph(resort_area: SkiAreaDetails) -> NavigationGraph:
    return build_navigation_graph(ski_area=resort_area)


@pytest.fixture
def loop_graph(loop_area: SkiAreaDetails) -> NavigationGraph:
    return build_navigation_graph(ski_area=loop_area)


@pytest.fixture
def toilets() -> list[POIData]:
    """Toilet next to the valley station, one on the summit, one far off-piste."""
    return [
        POIData(id="T1", type="toilet", name="Valley WC", latitude=46.0003, longitude=7.0003),
        POIData(id="T2", type="toilet", name="Summit WC", latitude=46.0198, longitude=7.0002),
        POIData(id="T3", type="toilet", name="Hut WC", latitude=46.050, longitude=7.050),
        POIData(id="V1", type="viewpoint", name="Lookout", latitude=46.0199, longitude=7.0001),
    ]
