"""
Pytest configuration and fixtures for station traffic tests.
"""

import pytest
import pandas as pd
import geopandas as gpd
import json


def _make_trips(rows):
    trips = pd.DataFrame(rows, columns=['start_station_id', 'end_station_id', 'started_at', 'ended_at'])
    trips['started_at'] = pd.to_datetime(trips['started_at'])
    trips['ended_at'] = pd.to_datetime(trips['ended_at'])
    return trips


@pytest.fixture
def make_trips():
    """Factory building a parsed trip frame from (start_id, end_id, started_at, ended_at) tuples."""
    return _make_trips


@pytest.fixture
def sample_stations():
    """Three stations around Kendall Square."""
    data = {
        'short_name': ['A32000', 'M32006', 'M32011'],
        'name': ['Kendall T', 'MIT at Mass Ave', 'Central Square'],
        'lon': [-71.0862, -71.0939, -71.1031],
        'lat': [42.3625, 42.3581, 42.3655],
    }
    df = pd.DataFrame(data)
    return gpd.GeoDataFrame(df, geometry=gpd.points_from_xy(df['lon'], df['lat']), crs="EPSG:4326")


@pytest.fixture
def sample_trips():
    """Trips spread over the day, including one to an unknown station."""
    return _make_trips([
        ('A32000', 'M32006', '2024-03-01 08:05:00', '2024-03-01 08:20:00'),
        ('A32000', 'M32011', '2024-03-01 08:30:00', '2024-03-01 08:45:00'),
        ('M32006', 'A32000', '2024-03-01 17:10:00', '2024-03-01 17:25:00'),
        ('M32011', 'A32000', '2024-03-02 17:40:00', '2024-03-02 18:05:00'),
        ('M32011', 'M32011', '2024-03-02 23:50:00', '2024-03-03 00:10:00'),
        ('A32000', 'X99999', '2024-03-03 12:00:00', '2024-03-03 12:30:00'),
    ])


@pytest.fixture
def empty_trips():
    return _make_trips([])


@pytest.fixture
def station_feed():
    """Station feed payload in the {'data': {'stations': [...]}} layout."""
    return {
        'data': {
            'stations': [
                {'short_name': 'A32000', 'name': 'Kendall T', 'lon': -71.0862, 'lat': 42.3625, 'capacity': 23},
                {'short_name': 'M32006', 'name': 'MIT at Mass Ave', 'lon': -71.0939, 'lat': 42.3581, 'capacity': 15},
                {'short_name': 'M32011', 'name': 'Central Square', 'lon': -71.1031, 'lat': 42.3655, 'capacity': 19},
            ]
        }
    }


@pytest.fixture
def station_feed_file(tmp_path, station_feed):
    path = tmp_path / "stations.json"
    path.write_text(json.dumps(station_feed), encoding='utf-8')
    return str(path)


@pytest.fixture
def trip_csv_file(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(
        "ride_id,bike_type,started_at,ended_at,start_station_id,end_station_id,is_member\n"
        "r1,classic,2024-03-01 08:05:00.000,2024-03-01 08:20:00.000,A32000,M32006,1\n"
        "r2,electric,2024-03-01 17:10:00.000,2024-03-01 17:25:00.000,M32006,A32000,0\n"
        "r3,classic,not a time,2024-03-01 18:00:00.000,M32011,A32000,1\n",
        encoding='utf-8'
    )
    return str(path)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
