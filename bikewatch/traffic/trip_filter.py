"""
Time-of-day filtering of trip records.

A trip qualifies when either its start or its end time falls within a fixed
window around the selected minute of day.
"""

import pandas as pd
import logging

from .time_codec import minutes_since_midnight_series

logger = logging.getLogger(__name__)

# Slider value meaning "any time"
TIME_FILTER_DISABLED = -1

DEFAULT_WINDOW_MINUTES = 60


def is_filter_active(filter_minutes: int) -> bool:
    """Return True when the slider value selects a time of day."""
    return filter_minutes is not None and filter_minutes != TIME_FILTER_DISABLED


def filter_trips_by_time(trips: pd.DataFrame, filter_minutes: int,
                         window_minutes: int = DEFAULT_WINDOW_MINUTES) -> pd.DataFrame:
    """
    Keep trips that start or end within window_minutes of filter_minutes.

    The window is inclusive and does not wrap around midnight: with a filter
    of 0, a trip ending at 23:50 is 1430 minutes away and does not match.

    Args:
        trips: DataFrame with datetime64 'started_at' and 'ended_at' columns
        filter_minutes: Minute of day, or TIME_FILTER_DISABLED
        window_minutes: Half width of the window in minutes

    Returns:
        The input frame itself when filtering is disabled, otherwise a new
        filtered DataFrame. The input is never modified.
    """
    if not is_filter_active(filter_minutes):
        return trips

    start_minutes = minutes_since_midnight_series(trips['started_at'])
    end_minutes = minutes_since_midnight_series(trips['ended_at'])

    mask = (
        ((start_minutes - filter_minutes).abs() <= window_minutes) |
        ((end_minutes - filter_minutes).abs() <= window_minutes)
    )
    filtered = trips.loc[mask].copy()

    logger.debug(f"Time filter {filter_minutes}±{window_minutes} min kept {len(filtered)} of {len(trips)} trips")
    return filtered
