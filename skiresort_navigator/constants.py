"""Configuration constants for Ski Resort Navigator.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: Route viewer application settings
    SpeedConfig: Travel speeds per difficulty, lift type and walking gradient
    LiftConfig: Lift type normalization and queue time
    ConnectionConfig: Automatic walk connector thresholds
    PoiConfig: POI injection and map point snapping
    RoutingConfig: Path finder and alternative route parameters
    OptimizerConfig: Segment merging thresholds
    SunConfig: Sun exposure sampling and in-sun rules
    WeatherConfig: Bad weather thresholds
    StatusConfig: Live lift/run status routing
    CacheConfig: Graph cache parameters
    MapConfig: Default map view parameters
    StyleConfig: Visual colors and styling
    ChartConfig: Chart rendering dimensions
"""


class AppConfig:
    """Route viewer application settings."""

    TITLE = "Ski Resort Navigator - Find Your Way Down"
    ICON = "⛷️"
    LAYOUT = "wide"


class SpeedConfig:
    """Travel speeds in meters per second."""

    # Skiing speed by run difficulty (OpenSkiMap difficulty scale)
    SKIING_SPEEDS = {
        "novice": 4.0,
        "easy": 6.0,
        "intermediate": 8.0,
        "advanced": 10.0,
        "expert": 12.0,
        "freeride": 8.0,
    }
    DIFFICULTIES = list(SKIING_SPEEDS.keys())
    UNRATED_SKIING_SPEED = 6.0  # Runs without a difficulty rating

    # Lift ride speed by normalized lift type
    LIFT_SPEEDS = {
        "gondola": 6.0,
        "cable_car": 10.0,
        "chair_lift": 3.0,
        "t-bar": 3.0,
        "drag_lift": 2.5,
        "platter": 2.5,
        "rope_tow": 2.0,
        "magic_carpet": 0.8,
        "funicular": 5.0,
    }
    LIFT_TYPES = list(LIFT_SPEEDS.keys())
    UNKNOWN_LIFT_SPEED = 3.0

    # Walking speed by gradient
    WALK_FLAT = 1.2
    WALK_UPHILL = 0.5
    WALK_DOWNHILL = 2.0  # Gentle downhill, shuffling on skis
    FLAT_ELEVATION_DIFF_M = 5  # |dz| below this counts as flat


class LiftConfig:
    """Lift type normalization and boarding parameters."""

    # Average wait at the bottom station (seconds)
    QUEUE_TIME_S = 180

    # Raw OpenSkiMap / OSM aerialway values mapped to canonical lift types
    TYPE_ALIASES = {
        "chairlift": "chair_lift",
        "chair lift": "chair_lift",
        "mixed_lift": "chair_lift",
        "cable car": "cable_car",
        "cable-car": "cable_car",
        "aerial_tram": "cable_car",
        "t_bar": "t-bar",
        "tbar": "t-bar",
        "j-bar": "t-bar",
        "j_bar": "t-bar",
        "drag lift": "drag_lift",
        "draglift": "drag_lift",
        "surface_lift": "drag_lift",
        "rope tow": "rope_tow",
        "magic carpet": "magic_carpet",
        "zip_line": "cable_car",
    }
    assert set(TYPE_ALIASES.values()) <= set(SpeedConfig.LIFT_TYPES)


class ConnectionConfig:
    """Automatic walk connectors between nearby feature endpoints."""

    MAX_CONNECTION_DISTANCE_M = 150  # Regular connector radius
    MAX_WALK_ELEVATION_DIFF_M = 50  # Skip connectors with a larger climb/descent
    WALKING_TIME_PENALTY = 5.0  # Walking in ski boots is slow and tiring

    # Extended connectors bridge gaps in drawn networks
    EXTENDED_CONNECTION_DISTANCE_M = 500
    EXTENDED_MAX_ELEVATION_DIFF_M = 100
    EXTENDED_WALKING_TIME_PENALTY = 10.0


class PoiConfig:
    """POI injection and free map point snapping."""

    POI_CONNECTION_DISTANCE_M = 300
    POI_MAX_ELEVATION_DIFF_M = 80
    POI_WALKING_PENALTY = 1.2

    MAP_POINT_RUN_SNAP_M = 100  # Snap a clicked point onto a run within this distance
    MAP_POINT_CONNECTION_DISTANCE_M = 100
    MAP_POINT_FALLBACK_DISTANCE_M = 300  # Walk radius when no run is near
    MAP_POINT_WALKING_PENALTY = 1.5

    TOILET_MAX_GRAPH_DISTANCE_M = 300  # Toilet must be reachable from the network
    TYPES = ["toilet", "restaurant", "viewpoint"]


class RoutingConfig:
    """Path finder parameters."""

    MIN_EDGE_COST_S = 1e-3  # Sparse matrices cannot store zero-weight edges
    SNAP_DISTANCE_M = 500  # Maximum distance for snapping points onto the network
    TOO_FAR_TO_WALK_M = 500  # Diagnostics: gap beyond which walking is not suggested

    # Alternative routes
    ALTERNATIVE_COUNT = 5
    TIME_BUDGET_MULTIPLIER = 1.5
    MIN_BLOCKABLE_SEGMENT_M = 200  # Shorter features are not worth blocking
    MAX_EDGE_OVERLAP = 0.8  # Alternatives sharing more edges are duplicates
    MAX_SEARCHES_PER_ROUTE = 10


class OptimizerConfig:
    """Segment merging thresholds."""

    MIN_WALK_SEGMENT_M = 100  # Shorter walks fold into the neighbouring segment


class SunConfig:
    """Sun exposure sampling and in-sun rules."""

    SAMPLE_DISTANCE_M = 100
    ASPECT_OFFSET_DEG = 90  # Slope faces perpendicular to the direction of travel
    MAX_ANGLE_DIFF_DEG = 90  # Sun must be in front of the slope face
    LOW_SUN_ALTITUDE_DEG = 15
    LOW_SUN_MAX_ANGLE_DIFF_DEG = 60  # Low sun must hit the face more directly
    STATIC_SUN_MAX_DURATION_S = 15 * 60  # Short routes use a single sun position
    POSITION_CACHE_ROUNDING_MIN = 5
    DISTRIBUTION_BUCKET_MIN = 10
    MIN_RELIABLE_SAMPLES = 3


class WeatherConfig:
    """Thresholds beyond which sun routing is disabled."""

    MAX_AVERAGE_CLOUD_COVER_PCT = 80
    MIN_VISIBILITY_M = 2000
    MATCH_WINDOW_S = 3600  # Hourly bucket must lie within this distance of a sample


class StatusConfig:
    """Live lift and run status routing."""

    CLOSING_BUFFER_MIN = 10  # Avoid features closing within this many minutes
    CLOSING_WARNING_MIN = 30  # Warn about features closing within this many minutes


class CacheConfig:
    """Graph cache parameters."""

    DEFAULT_TTL_S = 24 * 3600


class MapConfig:
    """Default map view parameters."""

    DEFAULT_ZOOM = 13
    ROUTE_ZOOM = 14


class StyleConfig:
    """Visual colors and styling."""

    RUN_COLORS = {
        "novice": "#22C55E",  # green-500
        "easy": "#3B82F6",  # blue-500
        "intermediate": "#EF4444",  # red-500
        "advanced": "#1F2937",  # gray-800
        "expert": "#F97316",  # orange-500
        "freeride": "#EAB308",  # yellow-500
    }
    assert set(RUN_COLORS.keys()) == set(SpeedConfig.DIFFICULTIES)
    UNRATED_RUN_COLOR = "#9CA3AF"  # gray-400

    LIFT_COLOR = "#A855F7"  # purple-500
    WALK_COLOR = "#F59E0B"  # amber-500
    ROUTE_COLOR = "#FACC15"  # yellow-400
    SUN_COLOR = "#FBBF24"  # amber-400
    SHADE_COLOR = "#64748B"  # slate-500

    SEGMENT_ICONS = {
        "run": "⛷️",
        "lift": "🚡",
        "walk": "🚶",
    }


class ChartConfig:
    """Chart rendering dimensions and settings."""

    PROFILE_HEIGHT = 320
    SUN_HEIGHT = 250
    DEFAULT_WIDTH = 800

    ELEVATION_PADDING_FACTOR = 0.1  # 10% padding above/below
    ELEVATION_PADDING_MIN_M = 20
