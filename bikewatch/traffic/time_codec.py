"""
Time-of-day helpers for trip filtering and slider labels.

Trip timestamps are reduced to minutes since midnight so that trips from
different days can be compared by time of day alone.
"""

from datetime import time
import pandas as pd

MINUTES_PER_DAY = 24 * 60


def minutes_since_midnight(timestamp) -> int:
    """
    Convert a timestamp to minutes since midnight.

    Date, seconds and sub-second precision are ignored.

    Args:
        timestamp: datetime or pandas Timestamp

    Returns:
        Integer minute of day in [0, 1439]
    """
    return timestamp.hour * 60 + timestamp.minute


def minutes_since_midnight_series(timestamps: pd.Series) -> pd.Series:
    """Vectorized minutes_since_midnight for a datetime64 Series."""
    return timestamps.dt.hour * 60 + timestamps.dt.minute


def format_time(minutes: int) -> str:
    """
    Format a minute-of-day value as a short 12-hour clock string.

    Args:
        minutes: Minute of day in [0, 1439]

    Returns:
        String such as '1:30 AM' or '12:00 AM'
    """
    minutes = int(minutes) % MINUTES_PER_DAY
    clock = time(hour=minutes // 60, minute=minutes % 60)
    text = clock.strftime("%I:%M %p")
    # %I is zero padded
    return text[1:] if text.startswith("0") else text
