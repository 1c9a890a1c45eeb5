"""
Tests for the reactive map controller.
"""

import threading
import pytest
from unittest.mock import Mock

from bikewatch.maps.controller import ControllerState, TrafficMapController
from bikewatch.maps.projection import CameraState
from bikewatch.traffic import TIME_FILTER_DISABLED


@pytest.fixture
def camera():
    return CameraState(center_lon=-71.0939, center_lat=42.3625, zoom=14, width=1000, height=700)


@pytest.fixture
def ready_controller(sample_stations, sample_trips):
    controller = TrafficMapController()
    controller.on_datasets_loaded(sample_stations, sample_trips)
    return controller


class TestLoading:
    """Test cases for the concurrent startup load."""

    def test_load_success(self, sample_stations, sample_trips):
        controller = TrafficMapController()
        snapshot = controller.load(lambda: sample_stations, lambda: sample_trips)

        assert snapshot.state == ControllerState.READY
        assert snapshot.errors == {}
        assert snapshot.time_filter == TIME_FILTER_DISABLED
        assert len(controller.layer) == 3

    def test_load_order_does_not_matter(self, sample_stations, sample_trips):
        trips_done = threading.Event()

        def slow_stations():
            # Stations finish only after trips
            trips_done.wait(timeout=5)
            return sample_stations

        def fast_trips():
            trips_done.set()
            return sample_trips

        controller = TrafficMapController()
        snapshot = controller.load(slow_stations, fast_trips)

        assert snapshot.state == ControllerState.READY
        assert controller.layer.get('A32000').total_traffic == 5

    def test_load_runs_both_loaders(self, sample_stations, sample_trips):
        station_loader = Mock(return_value=sample_stations)
        trip_loader = Mock(return_value=sample_trips)

        TrafficMapController().load(station_loader, trip_loader)

        station_loader.assert_called_once()
        trip_loader.assert_called_once()

    def test_initializer_runs_in_worker_threads(self, sample_stations, sample_trips):
        main_thread = threading.get_ident()
        initialized = []

        def station_loader():
            assert threading.get_ident() in initialized
            return sample_stations

        snapshot = TrafficMapController().load(
            station_loader, lambda: sample_trips,
            initializer=lambda: initialized.append(threading.get_ident())
        )

        assert snapshot.state == ControllerState.READY
        assert initialized
        assert main_thread not in initialized

    def test_station_load_failure(self, sample_trips):
        controller = TrafficMapController()
        snapshot = controller.load(Mock(side_effect=ConnectionError("timed out")), lambda: sample_trips)

        assert snapshot.state == ControllerState.FAILED
        assert snapshot.errors == {'stations': 'timed out'}
        assert len(controller.layer) == 0

    def test_both_loads_fail_independently(self):
        controller = TrafficMapController()
        snapshot = controller.load(Mock(side_effect=ValueError("bad json")),
                                   Mock(side_effect=ValueError("bad csv")))

        assert snapshot.state == ControllerState.FAILED
        assert snapshot.errors == {'stations': 'bad json', 'trips': 'bad csv'}

    def test_initial_state(self):
        controller = TrafficMapController()
        assert controller.state == ControllerState.LOADING
        assert controller.is_ready is False


class TestTimeFilter:
    """Test cases for slider updates."""

    def test_initial_markers_use_unfiltered_preset(self, ready_controller):
        radii = [m.radius for m in ready_controller.layer]
        assert max(radii) == pytest.approx(25)
        assert ready_controller.filtered_trip_count == 6

    def test_filter_updates_radii_in_place(self, ready_controller):
        marker = ready_controller.layer.get('M32006')

        ready_controller.on_time_filter_changed(480)

        assert ready_controller.layer.get('M32006') is marker
        assert ready_controller.time_filter == 480
        assert ready_controller.filtered_trip_count == 2
        assert ready_controller.snapshot().filtered is True
        assert max(m.radius for m in ready_controller.layer) == pytest.approx(50)
        # Filtered floor keeps every station visible
        assert min(m.radius for m in ready_controller.layer) >= 3

    def test_filter_from_full_trip_set(self, ready_controller):
        ready_controller.on_time_filter_changed(480)
        ready_controller.on_time_filter_changed(1050)

        # 17:10 and 17:40 departures, not a subset of the 8:00 result
        assert ready_controller.filtered_trip_count == 2
        assert ready_controller.layer.get('A32000').arrivals == 2

    def test_disable_filter_restores_full_counts(self, ready_controller):
        ready_controller.on_time_filter_changed(480)
        ready_controller.on_time_filter_changed(TIME_FILTER_DISABLED)

        assert ready_controller.filtered_trip_count == 6
        assert ready_controller.layer.get('A32000').total_traffic == 5
        assert max(m.radius for m in ready_controller.layer) == pytest.approx(25)

    def test_filter_with_no_matching_trips(self, ready_controller):
        ready_controller.on_time_filter_changed(240)

        assert ready_controller.filtered_trip_count == 0
        assert all(m.radius == 3 for m in ready_controller.layer)

    def test_filter_ignored_while_loading(self):
        controller = TrafficMapController()
        controller.on_time_filter_changed(600)
        assert controller.time_filter == TIME_FILTER_DISABLED

    def test_custom_radius_ranges(self, sample_stations, sample_trips):
        controller = TrafficMapController(radius_ranges={False: (1, 10), True: (2, 20)})
        controller.on_datasets_loaded(sample_stations, sample_trips)
        assert max(m.radius for m in controller.layer) == pytest.approx(10)

        controller.on_time_filter_changed(480)
        assert max(m.radius for m in controller.layer) == pytest.approx(20)


class TestCameraMovement:
    """Test cases for camera updates."""

    def test_camera_updates_positions_only(self, ready_controller, camera):
        radii = {m.station_id: m.radius for m in ready_controller.layer}

        visible = ready_controller.on_camera_moved(camera)

        assert visible == 3
        assert ready_controller.camera == camera
        assert {m.station_id: m.radius for m in ready_controller.layer} == radii
        assert all(m.has_position for m in ready_controller.layer)

    def test_filter_keeps_positions(self, ready_controller, camera):
        ready_controller.on_camera_moved(camera)
        positions = {m.station_id: (m.x, m.y) for m in ready_controller.layer}

        ready_controller.on_time_filter_changed(600)

        assert {m.station_id: (m.x, m.y) for m in ready_controller.layer} == positions

    def test_zoom_changes_positions(self, ready_controller, camera):
        ready_controller.on_camera_moved(camera)
        x1 = ready_controller.layer.get('M32011').x

        ready_controller.on_camera_moved(CameraState(camera.center_lon, camera.center_lat, 15, 1000, 700))

        assert ready_controller.layer.get('M32011').x != x1

    def test_none_camera_ignored(self, ready_controller):
        assert ready_controller.on_camera_moved(None) == 0
        assert ready_controller.camera is None

    def test_camera_before_load_applied_after_load(self, sample_stations, sample_trips, camera):
        controller = TrafficMapController()
        controller.on_camera_moved(camera)
        controller.on_datasets_loaded(sample_stations, sample_trips)

        assert all(m.has_position for m in controller.layer)


def test_empty_station_dataset(sample_trips):
    import geopandas as gpd

    stations = gpd.GeoDataFrame({'short_name': [], 'name': [], 'lon': [], 'lat': []},
                                geometry=gpd.points_from_xy([], []), crs="EPSG:4326")
    controller = TrafficMapController()
    controller.on_datasets_loaded(stations, sample_trips)

    assert controller.is_ready
    assert len(controller.layer) == 0
