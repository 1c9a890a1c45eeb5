"""
Symbology module for station markers.

This module handles the traffic-to-radius scale, traffic-flow colors and the
marker styling used by the station traffic map.
"""

import numpy as np
import pandas as pd
from typing import Callable, List, Tuple, Dict, Any, Optional
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors
import logging

logger = logging.getLogger(__name__)

UNFILTERED_RADIUS_RANGE = (0.0, 25.0)
FILTERED_RADIUS_RANGE = (3.0, 50.0)


def build_radius_scale(max_traffic: float, range_low: float,
                       range_high: float) -> Callable[[Any], Any]:
    """
    Build a square-root scale from traffic to marker radius.

    Traffic 0 maps to range_low and max_traffic maps to range_high, so marker
    area rather than radius grows with traffic. When max_traffic is 0 every
    value maps to range_low.

    Args:
        max_traffic: Largest total traffic in the current aggregation
        range_low: Radius for zero traffic
        range_high: Radius for max_traffic

    Returns:
        Function accepting a scalar or an array of traffic values
    """
    if max_traffic is None or not np.isfinite(max_traffic) or max_traffic <= 0:
        def degenerate_scale(traffic):
            if np.ndim(traffic) == 0:
                return float(range_low)
            return np.full(np.shape(traffic), float(range_low))
        return degenerate_scale

    root_max = np.sqrt(max_traffic)
    span = range_high - range_low

    def scale(traffic):
        values = np.sqrt(np.maximum(np.asarray(traffic, dtype=float), 0.0))
        radii = range_low + span * values / root_max
        if np.ndim(radii) == 0:
            return float(radii)
        return radii

    return scale


def radius_range(filtered: bool) -> Tuple[float, float]:
    """Built-in radius presets: wide range unfiltered, higher floor when filtered."""
    return FILTERED_RADIUS_RANGE if filtered else UNFILTERED_RADIUS_RANGE


def build_station_radius_scale(stations: pd.DataFrame, filtered: bool,
                               range_override: Optional[Tuple[float, float]] = None) -> Callable[[Any], Any]:
    """
    Build the radius scale for an aggregated station table.

    Args:
        stations: Station DataFrame with a 'total_traffic' column
        filtered: Whether the time filter is active
        range_override: Optional (low, high) range from configuration

    Returns:
        Radius scale function
    """
    low, high = range_override if range_override is not None else radius_range(filtered)
    max_traffic = stations['total_traffic'].max() if len(stations) > 0 else 0

    logger.debug(f"Radius scale: domain [0, {max_traffic}] -> range [{low}, {high}]")
    return build_radius_scale(max_traffic, low, high)


def format_tooltip(total_traffic: int, departures: int, arrivals: int) -> str:
    """Tooltip text for a station marker."""
    return f"{total_traffic} trips ({departures} departures, {arrivals} arrivals)"


class FlowColorScheme:
    """Colors stations by the share of their traffic that departs."""

    def __init__(self, palette: str = 'coolwarm', n_classes: int = 3):
        if n_classes < 2:
            raise ValueError("Flow coloring needs at least 2 classes")
        self.palette = palette
        self.n_classes = n_classes
        self.colors = self._get_colors()

    def _get_colors(self) -> List[str]:
        cmap = plt.get_cmap(self.palette)
        return [mcolors.rgb2hex(cmap(i / (self.n_classes - 1))) for i in range(self.n_classes)]

    def quantize(self, departure_ratio: float) -> Optional[float]:
        """
        Snap a departure ratio to one of n_classes evenly spaced levels.

        With three classes the levels are 0 (mostly arrivals), 0.5 (balanced)
        and 1 (mostly departures). Returns None for stations without traffic.
        """
        if departure_ratio is None or pd.isna(departure_ratio):
            return None
        steps = self.n_classes - 1
        level = round(float(np.clip(departure_ratio, 0.0, 1.0)) * steps)
        return level / steps

    def get_color(self, departure_ratio: float, default: str) -> str:
        level = self.quantize(departure_ratio)
        if level is None:
            return default
        return self.colors[int(round(level * (self.n_classes - 1)))]


class MarkerStyle:
    """Fill and stroke styling for station circles."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 flow_config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.fill_color = config.get('fill_color', 'steelblue')
        self.fill_opacity = config.get('fill_opacity', 0.6)
        self.stroke_color = config.get('stroke_color', 'white')
        self.stroke_width = config.get('stroke_width', 1)
        self.color_by_flow = config.get('color_by_flow', True)

        flow_config = flow_config or {}
        self.flow_scheme = FlowColorScheme(
            flow_config.get('palette', 'coolwarm'),
            flow_config.get('n_classes', 3)
        )

    def fill_for(self, departure_ratio: float) -> str:
        if not self.color_by_flow:
            return self.fill_color
        return self.flow_scheme.get_color(departure_ratio, self.fill_color)

    def to_dict(self, fill_color: Optional[str] = None) -> Dict[str, Any]:
        return {
            'fill_color': fill_color or self.fill_color,
            'fill_opacity': self.fill_opacity,
            'color': self.stroke_color,
            'weight': self.stroke_width,
        }
