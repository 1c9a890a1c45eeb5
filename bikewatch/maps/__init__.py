"""
Maps Component - Interactive station traffic map.

This component sizes station markers by traffic, keeps their positions in
step with the map camera and renders them over the bike lane network.

Maps are rendered using Folium embedded in Streamlit.
"""

from .map_config import BikeMapConfig, get_map_config
from .symbology import build_radius_scale, build_station_radius_scale, MarkerStyle
from .projection import CameraState, project
from .markers import MarkerLayer, StationMarker
from .controller import TrafficMapController, ControllerState, AppState
from .spatial_data import TrafficDataManager

__all__ = [
    'BikeMapConfig',
    'get_map_config',
    'build_radius_scale',
    'build_station_radius_scale',
    'MarkerStyle',
    'CameraState',
    'project',
    'MarkerLayer',
    'StationMarker',
    'TrafficMapController',
    'ControllerState',
    'AppState',
    'TrafficDataManager'
]
