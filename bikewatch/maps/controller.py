"""
Reactive controller for the station traffic map.

The controller owns the loaded datasets, the time filter and the marker layer.
It reacts to three triggers:

1. Both datasets finished loading -> full aggregation, markers built with the
   unfiltered radius preset.
2. Slider input -> trips re-filtered from the full set, re-aggregated, marker
   radii updated in place.
3. Camera movement -> marker pixel positions recomputed, radii untouched.

Each handler re-derives its output from the authoritative state (full trip
set, station table, camera) rather than from the previous handler's result.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional
import pandas as pd
import logging

from bikewatch.traffic import (
    TIME_FILTER_DISABLED,
    compute_station_traffic,
    filter_trips_by_time,
    is_filter_active,
    validate_station_join,
)
from .markers import MarkerLayer
from .projection import CameraState
from .symbology import MarkerStyle, build_station_radius_scale, radius_range

logger = logging.getLogger(__name__)


class ControllerState(Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class AppState:
    """Snapshot of the controller state for display."""
    state: ControllerState
    time_filter: int = TIME_FILTER_DISABLED
    camera: Optional[CameraState] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def filtered(self) -> bool:
        return is_filter_active(self.time_filter)


class TrafficMapController:
    """Keeps station markers consistent with the time filter and the map camera."""

    def __init__(self, radius_ranges: Optional[Dict[bool, tuple]] = None,
                 window_minutes: int = 60, style: Optional[MarkerStyle] = None):
        self.radius_ranges = radius_ranges or {False: radius_range(False), True: radius_range(True)}
        self.window_minutes = window_minutes
        self.layer = MarkerLayer(style)

        self.state = ControllerState.LOADING
        self.time_filter = TIME_FILTER_DISABLED
        self.camera: Optional[CameraState] = None
        self.errors: Dict[str, str] = {}
        self.join_stats: Dict = {}

        self.stations: Optional[pd.DataFrame] = None
        self.trips: Optional[pd.DataFrame] = None
        self.station_traffic: Optional[pd.DataFrame] = None
        self.filtered_trip_count = 0

    @property
    def is_ready(self) -> bool:
        return self.state == ControllerState.READY

    def snapshot(self) -> AppState:
        return AppState(self.state, self.time_filter, self.camera, dict(self.errors))

    def load(self, station_loader: Callable[[], pd.DataFrame],
             trip_loader: Callable[[], pd.DataFrame],
             initializer: Optional[Callable[[], None]] = None) -> AppState:
        """
        Run both dataset loaders concurrently and wait for both.

        Completion order does not matter. Each load fails independently; any
        failure leaves the controller in the FAILED state with the error
        recorded per dataset.

        Args:
            station_loader: Callable returning the station table
            trip_loader: Callable returning the trip table
            initializer: Optional callable run once in each worker thread

        Returns:
            State snapshot after loading
        """
        self.state = ControllerState.LOADING
        self.errors = {}

        with ThreadPoolExecutor(max_workers=2, initializer=initializer) as executor:
            futures = {
                'stations': executor.submit(station_loader),
                'trips': executor.submit(trip_loader),
            }
            results = {}
            for name, future in futures.items():
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.error(f"Loading {name} failed: {e}")
                    self.errors[name] = str(e)

        if self.errors:
            self.state = ControllerState.FAILED
            return self.snapshot()

        self.on_datasets_loaded(results['stations'], results['trips'])
        return self.snapshot()

    def on_datasets_loaded(self, stations: pd.DataFrame, trips: pd.DataFrame) -> None:
        """Build markers from the full aggregation with the unfiltered preset."""
        self.stations = stations
        self.trips = trips
        self.time_filter = TIME_FILTER_DISABLED
        self.join_stats = validate_station_join(stations, trips)

        self.layer.clear()
        self._refresh_radii()
        self.state = ControllerState.READY

        if self.camera is not None:
            self.layer.update_positions(self.camera)

        logger.info(f"Map ready with {len(self.layer)} station markers")

    def on_time_filter_changed(self, value: int) -> None:
        """Re-filter trips and update marker radii in place."""
        if not self.is_ready:
            logger.warning(f"Ignoring time filter {value} while {self.state.value}")
            return

        self.time_filter = TIME_FILTER_DISABLED if value is None else int(value)
        self._refresh_radii()

    def on_camera_moved(self, camera: Optional[CameraState]) -> int:
        """
        Recompute marker pixel positions for a new camera.

        Returns:
            Number of markers inside the viewport
        """
        if camera is None:
            return 0
        self.camera = camera
        return self.layer.update_positions(camera)

    def _refresh_radii(self) -> None:
        filtered = is_filter_active(self.time_filter)
        trips = filter_trips_by_time(self.trips, self.time_filter, self.window_minutes)
        self.filtered_trip_count = len(trips)

        self.station_traffic = compute_station_traffic(self.stations, trips)
        scale = build_station_radius_scale(self.station_traffic, filtered, self.radius_ranges[filtered])
        self.layer.upsert_radii(self.station_traffic, scale)

        logger.debug(f"Radius refresh for filter {self.time_filter}: {len(trips)} trips")
