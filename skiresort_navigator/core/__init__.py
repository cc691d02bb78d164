"""Core foundation classes for geodesic and solar calculations.

- GeoCalculator: Geodesic calculations (distances, bearings, segment projection)
- SunPosition / AstralSunPositionProvider: Sun azimuth and altitude lookup
- format_duration / format_distance: Presentation helpers
"""

from skiresort_navigator.core.formatting import format_distance, format_duration
from skiresort_navigator.core.geo_calculator import Coordinate, GeoCalculator
from skiresort_navigator.core.sun_position import (
    AstralSunPositionProvider,
    SunPosition,
    SunPositionFn,
)

__all__ = [
    # Geo calculator
    "Coordinate",
    "GeoCalculator",
    # Sun position
    "SunPosition",
    "SunPositionFn",
    "AstralSunPositionProvider",
    # Formatting
    "format_duration",
    "format_distance",
]
