"""
Interactive controls for the station traffic map.

The time slider selects a minute of day, or -1 for "any time".
"""

import streamlit as st
from typing import Optional
import logging

from bikewatch.traffic import TIME_FILTER_DISABLED, format_time, is_filter_active

logger = logging.getLogger(__name__)

ANY_TIME_LABEL = "(any time)"


def time_filter_label(value: int) -> str:
    """Text shown next to the slider for the selected value."""
    if not is_filter_active(value):
        return ANY_TIME_LABEL
    return format_time(value)


class TimeFilterControls:
    """Renders the time-of-day slider."""

    def __init__(self, key_prefix: str = "bikewatch"):
        self.key_prefix = key_prefix

    def render_time_slider(self, default: int = TIME_FILTER_DISABLED) -> int:
        """
        Render the time slider and its label.

        Returns:
            Selected minute of day, or TIME_FILTER_DISABLED
        """
        col1, col2 = st.columns([4, 1])

        with col1:
            value = st.slider(
                "Filter by time",
                min_value=TIME_FILTER_DISABLED,
                max_value=1439,
                value=default,
                step=1,
                key=f"{self.key_prefix}_time_filter"
            )

        with col2:
            label = time_filter_label(value)
            if is_filter_active(value):
                st.markdown(f"**{label}**")
            else:
                st.markdown(f"*{label}*")

        return int(value)


def render_traffic_summary(station_count: int, trip_count: int, visible: Optional[int] = None) -> None:
    """Show summary metrics under the map."""
    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("Stations", station_count)

    with col2:
        st.metric("Trips Counted", f"{trip_count:,}")

    with col3:
        st.metric("Stations In View", "-" if visible is None else visible)
