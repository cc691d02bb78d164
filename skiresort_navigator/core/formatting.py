"""Human-readable formatting of route durations and distances."""


def format_duration(seconds: float) -> str:
    """Format a duration as "45s", "5m", "5m 30s" or "1h 5m"."""
    total = max(0, int(round(seconds)))
    if total < 60:
        return f"{total}s"

    minutes, secs = divmod(total, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"

    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def format_distance(meters: float) -> str:
    """Format a distance as "850m" or "1.2km"."""
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"
