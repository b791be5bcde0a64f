"""Time helpers for risk point timestamps."""

import math
from datetime import datetime, timezone

# Average Gregorian month: 400 years hold 146097 days and 4800 months.
DAYS_PER_MONTH = 146097 / 4800


def unix_now() -> int:
    """Current time as an integer Unix timestamp."""
    return int(datetime.now(timezone.utc).timestamp())


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _humanize_seconds(seconds: float) -> str:
    # Each unit is rounded before it is compared with its threshold.
    secs = _round_half_up(seconds)
    minutes = _round_half_up(seconds / 60)
    hours = _round_half_up(seconds / 3600)
    days = _round_half_up(seconds / 86400)
    months = _round_half_up(seconds / 86400 / DAYS_PER_MONTH)
    years = _round_half_up(seconds / 86400 / DAYS_PER_MONTH / 12)

    if secs <= 44:
        return "a few seconds"
    if minutes <= 1:
        return "a minute"
    if minutes < 45:
        return f"{minutes} minutes"
    if hours <= 1:
        return "an hour"
    if hours < 22:
        return f"{hours} hours"
    if days <= 1:
        return "a day"
    if days < 26:
        return f"{days} days"
    if months <= 1:
        return "a month"
    if months < 11:
        return f"{months} months"
    if years <= 1:
        return "a year"
    return f"{years} years"


def relative_time(timestamp: int | float, now: int | float | None = None) -> str:
    """Render a Unix timestamp relative to now, e.g. "3 hours ago".

    Future timestamps render as "in 2 days".

    Args:
        timestamp: Unix timestamp in seconds.
        now: Reference Unix timestamp; defaults to the current time.

    Returns:
        Human readable relative time.
    """
    if now is None:
        now = unix_now()
    elapsed = now - timestamp
    text = _humanize_seconds(abs(elapsed))
    return f"{text} ago" if elapsed >= 0 else f"in {text}"
