"""Sun Exposure Analyzer - How much of a route is spent in the sun.

Algorithm:
1. Walk the route's segments in order, accumulating elapsed time from the
   start time. Lift rides only add time (no sampling on lifts).
2. Cut each leg of runs and walks into equal pieces of at most
   SunConfig.SAMPLE_DISTANCE_M and evaluate each piece at its midpoint time
   and location.
3. A piece is in sun when the sun is up and shines onto the slope face
   (aspect = travel bearing + 90), with a stricter angle for low sun.
   The result is graded by the cloud cover of the closest hourly bucket.
4. sun_percentage is the time-weighted average; the distribution groups
   pieces into 10-minute buckets.

Short routes use a single sun position at the resort center. Bad weather
short-circuits the analysis and disables sun-based route choice.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from skiresort_navigator.constants import SunConfig, WeatherConfig
from skiresort_navigator.core.geo_calculator import GeoCalculator
from skiresort_navigator.core.sun_position import AstralSunPositionProvider, SunPosition, SunPositionFn
from skiresort_navigator.model.edge import EdgeType
from skiresort_navigator.model.route import Route
from skiresort_navigator.model.ski_area import HourlyWeather, SkiAreaDetails, as_utc
from skiresort_navigator.model.sun_analysis import SunAnalysis, SunDistributionBucket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SunSample:
    """One sampled piece of a route.

    Attributes:
        offset_s: Seconds after departure at the piece midpoint
        weight_s: Travel time the piece represents
        lat: Midpoint latitude
        lng: Midpoint longitude
        aspect_deg: Direction the slope surface faces
    """

    offset_s: float
    weight_s: float
    lat: float
    lng: float
    aspect_deg: float


@dataclass(frozen=True)
class SunnyRouteChoice:
    """Result of sunniest-route selection."""

    route: Route
    analysis: SunAnalysis
    is_base_route: bool = True


# =============================================================================
# Sampling and Sun Geometry
# =============================================================================


def sample_route(route: Route) -> list[SunSample]:
    """Cut non-lift segments into time-weighted pieces."""
    samples: list[SunSample] = []
    elapsed = 0.0
    for segment in route.segments:
        coords = segment.coordinates
        if segment.type == EdgeType.LIFT or len(coords) < 2:
            elapsed += segment.time_s
            continue

        steps = [
            GeoCalculator.haversine_distance_m(lat1=a[1], lon1=a[0], lat2=b[1], lon2=b[0])
            for a, b in zip(coords, coords[1:])
        ]
        horizontal_total = sum(steps)
        if horizontal_total <= 0:
            elapsed += segment.time_s
            continue
        seconds_per_m = segment.time_s / horizontal_total

        cursor = elapsed
        for (a, b), step in zip(zip(coords, coords[1:]), steps):
            if step <= 0:
                continue
            bearing = GeoCalculator.initial_bearing_deg(lon1=a[0], lat1=a[1], lon2=b[0], lat2=b[1])
            pieces = max(1, math.ceil(step / SunConfig.SAMPLE_DISTANCE_M))
            duration = step / pieces * seconds_per_m
            for k in range(pieces):
                t = (k + 0.5) / pieces
                samples.append(
                    SunSample(
                        offset_s=cursor + duration / 2,
                        weight_s=duration,
                        lat=a[1] + (b[1] - a[1]) * t,
                        lng=a[0] + (b[0] - a[0]) * t,
                        aspect_deg=(bearing + SunConfig.ASPECT_OFFSET_DEG) % 360,
                    )
                )
                cursor += duration
        elapsed += segment.time_s
    return samples


def is_in_sun(position: SunPosition, aspect_deg: float) -> bool:
    """Whether the sun shines onto a slope facing aspect_deg."""
    if not position.is_up:
        return False
    diff = GeoCalculator.angle_difference_deg(angle_a=position.azimuth_deg, angle_b=aspect_deg)
    if diff > SunConfig.MAX_ANGLE_DIFF_DEG:
        return False
    if position.altitude_deg < SunConfig.LOW_SUN_ALTITUDE_DEG and diff > SunConfig.LOW_SUN_MAX_ANGLE_DIFF_DEG:
        return False
    return True


def closest_weather(hourly_weather: Sequence[HourlyWeather], when: datetime) -> Optional[HourlyWeather]:
    """Hourly bucket closest to when, if within WeatherConfig.MATCH_WINDOW_S."""
    if not hourly_weather:
        return None
    target = as_utc(when)
    best = min(hourly_weather, key=lambda w: abs((w.time_utc - target).total_seconds()))
    if abs((best.time_utc - target).total_seconds()) > WeatherConfig.MATCH_WINDOW_S:
        return None
    return best


def is_bad_weather_for_sun_routing(
    hourly_weather: Optional[Sequence[HourlyWeather]],
    start_time: datetime,
    duration_s: float,
) -> bool:
    """Clouds, poor visibility or precipitation during the journey window."""
    if not hourly_weather:
        return False

    start = as_utc(start_time)
    end = start + timedelta(seconds=duration_s)
    window = [w for w in hourly_weather if start - timedelta(hours=1) < w.time_utc <= end]
    if not window:
        closest = closest_weather(hourly_weather=hourly_weather, when=start_time)
        window = [closest] if closest is not None else []
    if not window:
        return False

    average_cloud = sum(w.cloud_cover for w in window) / len(window)
    if average_cloud > WeatherConfig.MAX_AVERAGE_CLOUD_COVER_PCT:
        return True
    if any(w.visibility is not None and w.visibility < WeatherConfig.MIN_VISIBILITY_M for w in window):
        return True
    return any(w.precipitation > 0 or w.snowfall > 0 for w in window)


# =============================================================================
# Route Analysis
# =============================================================================


def analyze_route_sun_exposure(
    route: Route,
    start_time: datetime,
    ski_area: SkiAreaDetails,
    hourly_weather: Optional[Sequence[HourlyWeather]] = None,
    sun_position: Optional[SunPositionFn] = None,
) -> SunAnalysis:
    """Time-weighted sun exposure of a route.

    Args:
        route: Route to analyze
        start_time: Departure time (naive datetimes are treated as UTC)
        ski_area: Resort, used for the static sun position on short routes and
            for labeling distribution buckets in resort-local time
        hourly_weather: Optional hourly weather; without it the result is unreliable
        sun_position: Optional sun position function (defaults to astral)

    Returns:
        SunAnalysis; never raises for missing weather or degenerate routes.
    """
    if is_bad_weather_for_sun_routing(
        hourly_weather=hourly_weather, start_time=start_time, duration_s=route.total_time_s
    ):
        logger.info(f"Bad weather for sun routing at {start_time.isoformat()}")
        return SunAnalysis(sun_percentage=0.0, is_reliable=False, is_bad_weather=True)

    get_position = sun_position or AstralSunPositionProvider()
    samples = sample_route(route=route)
    static_position = None
    if route.total_time_s <= SunConfig.STATIC_SUN_MAX_DURATION_S:
        static_position = get_position(start_time, ski_area.latitude, ski_area.longitude)

    bucket_size_s = SunConfig.DISTRIBUTION_BUCKET_MIN * 60
    buckets: dict[int, list[float]] = {}
    weighted_sun = total_weight = 0.0
    for sample in samples:
        when = start_time + timedelta(seconds=sample.offset_s)
        position = static_position or get_position(when, sample.lat, sample.lng)
        exposure = 1.0 if is_in_sun(position=position, aspect_deg=sample.aspect_deg) else 0.0
        weather = closest_weather(hourly_weather=hourly_weather or [], when=when)
        if weather is not None:
            exposure *= min(1.0, max(0.0, 1 - weather.cloud_cover / 100))

        weighted_sun += exposure * sample.weight_s
        total_weight += sample.weight_s
        bucket = buckets.setdefault(int(sample.offset_s // bucket_size_s), [0.0, 0.0])
        bucket[0] += exposure * sample.weight_s
        bucket[1] += sample.weight_s

    distribution = []
    for index in sorted(buckets):
        sun, weight = buckets[index]
        start_minutes = index * SunConfig.DISTRIBUTION_BUCKET_MIN
        distribution.append(
            SunDistributionBucket(
                start_minutes=start_minutes,
                end_minutes=start_minutes + SunConfig.DISTRIBUTION_BUCKET_MIN,
                time_of_day=ski_area.local_time(start_time + timedelta(minutes=start_minutes)).strftime("%H:%M"),
                sun_percentage=_percentage(part=sun, total=weight),
            )
        )

    return SunAnalysis(
        sun_percentage=_percentage(part=weighted_sun, total=total_weight),
        sun_distribution=tuple(distribution),
        is_reliable=bool(hourly_weather) and len(samples) >= SunConfig.MIN_RELIABLE_SAMPLES,
        is_bad_weather=False,
        sample_count=len(samples),
    )


def _percentage(part: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, max(0.0, 100.0 * part / total))


def find_sunniest_route(
    base_route: Route,
    alternative_routes: Sequence[Route],
    tolerance_minutes: float,
    start_time: datetime,
    ski_area: SkiAreaDetails,
    hourly_weather: Optional[Sequence[HourlyWeather]],
    sun_position: Optional[SunPositionFn] = None,
) -> SunnyRouteChoice:
    """Sunniest route taking at most tolerance_minutes longer than the base route.

    Candidates that are over budget, in bad weather or unreliable are dropped.
    Ties go to the faster route. Without a validated candidate the base route
    is returned unchanged.
    """
    sun_position = sun_position or AstralSunPositionProvider()
    base_analysis = analyze_route_sun_exposure(
        route=base_route,
        start_time=start_time,
        ski_area=ski_area,
        hourly_weather=hourly_weather,
        sun_position=sun_position,
    )
    if base_analysis.is_bad_weather:
        return SunnyRouteChoice(route=base_route, analysis=base_analysis)

    max_time = base_route.total_time_s + tolerance_minutes * 60
    candidates = [(base_route, base_analysis)] if base_analysis.is_reliable else []
    for route in alternative_routes:
        if route is base_route or route.total_time_s > max_time:
            continue
        analysis = analyze_route_sun_exposure(
            route=route,
            start_time=start_time,
            ski_area=ski_area,
            hourly_weather=hourly_weather,
            sun_position=sun_position,
        )
        if analysis.is_reliable and not analysis.is_bad_weather:
            candidates.append((route, analysis))

    if not candidates:
        return SunnyRouteChoice(route=base_route, analysis=base_analysis)

    best_route, best_analysis = min(candidates, key=lambda c: (-c[1].sun_percentage, c[0].total_time_s))
    logger.debug(
        f"Sunniest of {len(candidates)} candidates: {best_analysis.sun_percentage:.0f}% sun, "
        f"{best_route.total_time_s:.0f}s"
    )
    return SunnyRouteChoice(route=best_route, analysis=best_analysis, is_base_route=best_route is base_route)
