"""
Tests for the keyed station marker layer.
"""

import pytest

from bikewatch.maps.markers import MarkerLayer
from bikewatch.maps.projection import CameraState
from bikewatch.maps.symbology import build_radius_scale
from bikewatch.traffic import compute_station_traffic, filter_trips_by_time


@pytest.fixture
def traffic(sample_stations, sample_trips):
    return compute_station_traffic(sample_stations, sample_trips)


@pytest.fixture
def camera():
    return CameraState(center_lon=-71.0939, center_lat=42.3625, zoom=14, width=1000, height=700)


class TestMarkerLayer:
    """Test cases for MarkerLayer."""

    def setup_method(self):
        self.layer = MarkerLayer()

    def test_upsert_creates_markers(self, traffic):
        created = self.layer.upsert_radii(traffic, build_radius_scale(5, 0, 25))

        assert created == 3
        assert len(self.layer) == 3
        marker = self.layer.get('A32000')
        assert marker.total_traffic == 5
        assert marker.radius == pytest.approx(25)
        assert marker.tooltip == "5 trips (3 departures, 2 arrivals)"

    def test_upsert_updates_in_place(self, traffic, sample_stations, sample_trips):
        self.layer.upsert_radii(traffic, build_radius_scale(5, 0, 25))
        original = self.layer.get('A32000')

        filtered = compute_station_traffic(sample_stations, filter_trips_by_time(sample_trips, 480))
        created = self.layer.upsert_radii(filtered, build_radius_scale(2, 3, 50))

        assert created == 0
        assert self.layer.get('A32000') is original
        assert original.total_traffic == 2
        assert original.radius == pytest.approx(50)
        assert self.layer.get('M32011').radius == pytest.approx(3 + 47 * (1 / 2) ** 0.5)

    def test_positions_untouched_by_radius_update(self, traffic, camera):
        self.layer.upsert_radii(traffic, build_radius_scale(5, 0, 25))
        self.layer.update_positions(camera)
        before = [(m.x, m.y) for m in self.layer]

        self.layer.upsert_radii(traffic, build_radius_scale(5, 3, 50))

        assert [(m.x, m.y) for m in self.layer] == before

    def test_radii_untouched_by_position_update(self, traffic, camera):
        self.layer.upsert_radii(traffic, build_radius_scale(5, 0, 25))
        before = [m.radius for m in self.layer]

        self.layer.update_positions(camera)

        assert [m.radius for m in self.layer] == before
        assert all(m.has_position for m in self.layer)

    def test_update_positions_counts_visible(self, traffic, camera):
        self.layer.upsert_radii(traffic, build_radius_scale(5, 0, 25))
        assert self.layer.update_positions(camera) == 3

        far_away = CameraState(center_lon=-70.0, center_lat=41.0, zoom=14)
        assert self.layer.update_positions(far_away) == 0

    def test_empty_layer(self, camera, traffic):
        assert self.layer.update_positions(camera) == 0
        assert self.layer.upsert_radii(traffic.iloc[0:0], build_radius_scale(0, 0, 25)) == 0
        assert len(self.layer) == 0

    def test_clear(self, traffic):
        self.layer.upsert_radii(traffic, build_radius_scale(5, 0, 25))
        self.layer.clear()
        assert len(self.layer) == 0
        assert 'A32000' not in self.layer
