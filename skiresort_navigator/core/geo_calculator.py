"""Geodesic calculations on Earth's surface.

Provides geographic helper functions for on-mountain navigation:
- Distance calculation (Haversine formula, scalar and vectorized)
- 3D path length of GeoJSON coordinate sequences
- Bearing calculation (initial heading between points)
- Closest point on a line segment (for snapping map clicks onto runs)
- Circular angle difference

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, degrees, radians, sin, sqrt
from typing import Optional, Sequence

import numpy as np

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000

# GeoJSON position: (lng, lat) or (lng, lat, elevation)
Coordinate = tuple[float, ...]


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    All methods use WGS84 spherical Earth model (R = 6,371 km).
    Coordinates are in decimal degrees (WGS84).
    Bearings are in degrees clockwise from North (0-360).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def haversine_distances_m(lat: float, lon: float, lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
        """Vectorized great-circle distance from one point to many.

        Args:
            lat: Latitude of the reference point
            lon: Longitude of the reference point
            lats: Array of latitudes
            lons: Array of longitudes

        Returns:
            Array of distances in meters (same shape as lats).
        """
        lat_rad = np.radians(lats)
        dlat = lat_rad - radians(lat)
        dlon = np.radians(lons) - radians(lon)
        a = np.sin(dlat / 2) ** 2 + cos(radians(lat)) * np.cos(lat_rad) * np.sin(dlon / 2) ** 2
        return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(np.clip(1 - a, 0.0, None)))

    @staticmethod
    def distance_3d_m(horizontal_m: float, elevation_diff_m: float) -> float:
        """Combine horizontal distance and elevation difference into a slope distance."""
        return sqrt(horizontal_m**2 + elevation_diff_m**2)

    @staticmethod
    def path_length_m(coordinates: Sequence[Coordinate]) -> float:
        """Cumulative 3D length of a GeoJSON coordinate sequence.

        Elevation is only included for consecutive positions that both carry it.

        Args:
            coordinates: Positions as (lng, lat) or (lng, lat, elevation)

        Returns:
            Total length in meters.
        """
        total = 0.0
        for prev, curr in zip(coordinates, coordinates[1:]):
            horizontal = GeoCalculator.haversine_distance_m(lat1=prev[1], lon1=prev[0], lat2=curr[1], lon2=curr[0])
            if len(prev) > 2 and len(curr) > 2:
                total += GeoCalculator.distance_3d_m(horizontal_m=horizontal, elevation_diff_m=curr[2] - prev[2])
            else:
                total += horizontal
        return total

    @staticmethod
    def initial_bearing_deg(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
        """Calculate initial bearing from point 1 to point 2.

        The bearing is the compass direction to travel from start to end,
        measured clockwise from true North.

        Args:
            lon1: Longitude of start point (decimal degrees)
            lat1: Latitude of start point (decimal degrees)
            lon2: Longitude of end point (decimal degrees)
            lat2: Latitude of end point (decimal degrees)

        Returns:
            Bearing in degrees (0-360, clockwise from North).
        """
        lon1_rad, lat1_rad = radians(lon1), radians(lat1)
        lon2_rad, lat2_rad = radians(lon2), radians(lat2)
        dlon = lon2_rad - lon1_rad
        y = sin(dlon) * cos(lat2_rad)
        x = cos(lat1_rad) * sin(lat2_rad) - sin(lat1_rad) * cos(lat2_rad) * cos(dlon)
        return (degrees(atan2(y, x)) + 360) % 360

    @staticmethod
    def closest_point_on_segment(
        lon: float,
        lat: float,
        start: Coordinate,
        end: Coordinate,
    ) -> tuple[float, float, Optional[float], float]:
        """Project a point onto a short line segment.

        Works in an equirectangular projection around the segment, which is
        accurate for the few hundred meters a run segment spans.

        Args:
            lon: Longitude of the query point
            lat: Latitude of the query point
            start: Segment start (lng, lat[, elevation])
            end: Segment end (lng, lat[, elevation])

        Returns:
            Tuple (lon, lat, elevation, t) where t in [0, 1] is the fraction along the
            segment and elevation is interpolated when both ends carry it.
        """
        scale = cos(radians((start[1] + end[1]) / 2))
        dx = (end[0] - start[0]) * scale
        dy = end[1] - start[1]
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            t = 0.0
        else:
            t = ((lon - start[0]) * scale * dx + (lat - start[1]) * dy) / length_sq
            t = max(0.0, min(1.0, t))

        snapped_lon = start[0] + t * (end[0] - start[0])
        snapped_lat = start[1] + t * (end[1] - start[1])
        elevation = None
        if len(start) > 2 and len(end) > 2:
            elevation = start[2] + t * (end[2] - start[2])
        return snapped_lon, snapped_lat, elevation, t

    @staticmethod
    def angle_difference_deg(angle_a: float, angle_b: float) -> float:
        """Smallest absolute difference between two compass angles (0-180)."""
        diff = abs(angle_a - angle_b) % 360
        return 360 - diff if diff > 180 else diff
