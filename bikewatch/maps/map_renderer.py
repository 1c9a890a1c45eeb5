"""
Map rendering module for the station traffic map.

This module builds the Folium map: basemap, the two bike-lane overlays and
one circle marker per station.
"""

import folium
import geopandas as gpd
from typing import Dict, List, Optional, Any, Iterable, Tuple
import logging

from .markers import StationMarker
from .symbology import MarkerStyle

logger = logging.getLogger(__name__)


class MapRenderer:
    """Core map rendering using Folium."""

    def __init__(self, map_settings: Optional[Dict[str, Any]] = None):
        map_settings = map_settings or {}
        self.default_center = map_settings.get('default_center', [-71.09415, 42.36027])  # lon, lat
        self.default_zoom = map_settings.get('default_zoom', 12)
        self.min_zoom = map_settings.get('min_zoom', 5)
        self.max_zoom = map_settings.get('max_zoom', 18)
        self.tiles = map_settings.get('tiles', 'OpenStreetMap')

    def create_base_map(self) -> folium.Map:
        """Create the base map centered on Boston/Cambridge."""
        lon, lat = self.default_center
        m = folium.Map(
            location=[lat, lon],
            zoom_start=self.default_zoom,
            min_zoom=self.min_zoom,
            max_zoom=self.max_zoom,
            tiles=self.tiles
        )
        logger.debug(f"Created base map centered at {[lat, lon]}")
        return m

    def add_bike_lane_layers(self, map_obj: folium.Map,
                             layers: List[Tuple[Dict[str, str], gpd.GeoDataFrame]],
                             style: Dict[str, Any]) -> folium.Map:
        """
        Add one line layer per bike lane source.

        Args:
            map_obj: Folium Map object
            layers: List of (source entry, GeoDataFrame in EPSG:4326) pairs
            style: Line style with 'color', 'weight' and 'opacity'

        Returns:
            Updated Folium Map object
        """
        line_style = {
            'color': style.get('color', 'green'),
            'weight': style.get('weight', 3),
            'opacity': style.get('opacity', 0.4),
        }

        def style_function(feature):
            return line_style

        for source, lanes in layers:
            if lanes.empty:
                logger.warning(f"Bike lane layer {source.get('id')} has no features")
                continue
            folium.GeoJson(
                lanes,
                name=source.get('name', source['id']),
                style_function=style_function,
            ).add_to(map_obj)

        logger.info(f"Added {len(layers)} bike lane layers")
        return map_obj

    def add_station_markers(self, map_obj: folium.Map, markers: Iterable[StationMarker],
                            style: MarkerStyle) -> folium.Map:
        """Add a circle marker per station with its current radius and tooltip."""
        layer = folium.FeatureGroup(name="Stations")
        count = 0

        for marker in markers:
            marker_style = style.to_dict(marker.fill_color)
            folium.CircleMarker(
                location=[marker.lat, marker.lon],
                radius=marker.radius,
                color=marker_style['color'],
                weight=marker_style['weight'],
                fill=True,
                fill_color=marker_style['fill_color'],
                fill_opacity=marker_style['fill_opacity'],
                tooltip=marker.tooltip,
            ).add_to(layer)
            count += 1

        layer.add_to(map_obj)
        logger.info(f"Added {count} station markers to map")
        return map_obj

    def render(self, markers: Iterable[StationMarker], style: MarkerStyle,
               bike_lanes: List[Tuple[Dict[str, str], gpd.GeoDataFrame]],
               bike_lane_style: Dict[str, Any]) -> folium.Map:
        """Build the complete map."""
        m = self.create_base_map()
        self.add_bike_lane_layers(m, bike_lanes, bike_lane_style)
        self.add_station_markers(m, markers, style)
        folium.LayerControl(collapsed=True).add_to(m)
        return m
