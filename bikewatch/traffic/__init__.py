"""
Traffic Component - station traffic aggregation and time-of-day filtering.

This component turns raw trip records into per-station arrival, departure
and total traffic counts, optionally restricted to a window around a
selected time of day.
"""

from .time_codec import format_time, minutes_since_midnight, minutes_since_midnight_series
from .trip_filter import TIME_FILTER_DISABLED, filter_trips_by_time, is_filter_active
from .aggregator import compute_station_traffic, validate_station_join

__all__ = [
    'format_time',
    'minutes_since_midnight',
    'minutes_since_midnight_series',
    'TIME_FILTER_DISABLED',
    'filter_trips_by_time',
    'is_filter_active',
    'compute_station_traffic',
    'validate_station_join'
]
