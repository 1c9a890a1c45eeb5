"""
Streamlit page for the station traffic map.

Wires the reactive controller to the time slider and to the camera values
reported back by the embedded Folium map.
"""

import streamlit as st
import pandas as pd
import geopandas as gpd
from typing import Any, Dict, List, Optional, Tuple
import logging

from streamlit.runtime.scriptrunner import add_script_run_ctx, get_script_run_ctx
from streamlit_folium import st_folium

from .controller import TrafficMapController, ControllerState
from .controls import TimeFilterControls, render_traffic_summary, time_filter_label
from .map_config import BikeMapConfig, get_map_config
from .map_renderer import MapRenderer
from .projection import CameraState
from .spatial_data import TrafficDataManager
from .symbology import MarkerStyle

logger = logging.getLogger(__name__)

CONTROLLER_KEY = 'bikewatch_controller'


@st.cache_data(ttl=3600)  # Cache for 1 hour
def load_stations_cached(data_sources: Dict[str, Any]) -> gpd.GeoDataFrame:
    return TrafficDataManager(data_sources).load_stations()


@st.cache_data(ttl=3600)
def load_trips_cached(data_sources: Dict[str, Any]) -> pd.DataFrame:
    return TrafficDataManager(data_sources).load_trips()


@st.cache_data(ttl=3600)
def load_bike_lanes_cached(data_sources: Dict[str, Any]) -> List[Tuple[Dict[str, str], gpd.GeoDataFrame]]:
    return TrafficDataManager(data_sources).load_bike_lanes()


def script_context_initializer():
    """Worker initializer that attaches the current script run context."""
    ctx = get_script_run_ctx()

    def attach_context():
        add_script_run_ctx(ctx=ctx)

    return attach_context


def build_controller(config: BikeMapConfig) -> TrafficMapController:
    """Create a controller from configuration."""
    style = MarkerStyle(config.get_marker_style(), config.get_flow_colors())
    return TrafficMapController(
        radius_ranges={False: config.get_radius_range(False), True: config.get_radius_range(True)},
        window_minutes=config.get_window_minutes(),
        style=style,
    )


class MapsPageInterface:
    """Station traffic map page."""

    def __init__(self, config: Optional[BikeMapConfig] = None):
        self.config = config or get_map_config()
        self.map_settings = self.config.get_map_settings()
        self.renderer = MapRenderer(self.map_settings)
        self.time_controls = TimeFilterControls()
        self._initialize_session_state()

    def _initialize_session_state(self) -> None:
        if CONTROLLER_KEY not in st.session_state:
            st.session_state[CONTROLLER_KEY] = build_controller(self.config)

    @property
    def controller(self) -> TrafficMapController:
        return st.session_state[CONTROLLER_KEY]

    def render(self) -> None:
        st.title("🚲 Bikewatch")
        st.markdown("Bike-share station traffic over the Boston and Cambridge bike lane network")

        self._ensure_loaded()

        if self.controller.state == ControllerState.FAILED:
            self._render_load_errors()
            return

        value = self.time_controls.render_time_slider(self.controller.time_filter)
        if value != self.controller.time_filter:
            logger.info(f"Time filter changed to {time_filter_label(value)}")
            self.controller.on_time_filter_changed(value)

        self._render_map()

    def _ensure_loaded(self) -> None:
        if self.controller.state != ControllerState.LOADING:
            return

        sources = self.config.get_data_sources()

        with st.spinner("🔄 Loading stations and trips..."):
            self.controller.load(
                lambda: load_stations_cached(sources),
                lambda: load_trips_cached(sources),
                initializer=script_context_initializer(),
            )

    def _render_load_errors(self) -> None:
        for dataset, message in self.controller.errors.items():
            st.error(f"❌ Failed to load {dataset}: {message}")

        if st.button("Reload data", key="bikewatch_reload"):
            load_stations_cached.clear()
            load_trips_cached.clear()
            load_bike_lanes_cached.clear()
            del st.session_state[CONTROLLER_KEY]
            st.rerun()

    def _render_map(self) -> None:
        controller = self.controller
        style = controller.layer.style

        m = self.renderer.render(
            controller.layer,
            style,
            load_bike_lanes_cached(self.config.get_data_sources()),
            self.config.get_bike_lane_style(),
        )

        width = self.map_settings.get('viewport_width', 1000)
        height = self.map_settings.get('viewport_height', 700)

        # Keep the user's view when markers change
        view = {}
        if controller.camera is not None:
            view = {
                'center': [controller.camera.center_lat, controller.camera.center_lon],
                'zoom': controller.camera.zoom,
            }

        map_data = st_folium(
            m,
            width=width,
            height=height,
            key="bikewatch_map",
            returned_objects=["center", "zoom"],
            **view
        )

        camera = CameraState.from_folium(map_data, width, height, self.map_settings.get('tile_size', 256))
        visible = controller.on_camera_moved(camera) if camera is not None else None

        render_traffic_summary(len(controller.layer), controller.filtered_trip_count, visible)


def render_maps_page():
    """Main function to render the station traffic map page."""
    MapsPageInterface().render()
