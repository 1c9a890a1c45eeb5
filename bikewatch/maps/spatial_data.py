"""
Station and trip dataset loading for the station traffic map.

This module fetches the station list (JSON) and trip records (CSV), normalizes
column name variations, drops malformed records and parses trip timestamps
once at load time.
"""

import json
import geopandas as gpd
import pandas as pd
import requests
from typing import Tuple, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return str(source).startswith(("http://", "https://"))


class StationDataLoader:
    """Handles loading and validation of the station dataset."""

    def __init__(self, timeout: float = 30):
        self.required_fields = ['short_name', 'lon', 'lat']
        self.timeout = timeout
        # Handle column name variations
        self.column_variations = {
            'short_name': ['short_name', 'Number', 'station_id', 'id'],
            'lon': ['lon', 'Long', 'longitude', 'lng'],
            'lat': ['lat', 'Lat', 'latitude'],
            'name': ['name', 'NAME', 'Name']
        }

    def fetch_records(self, source: str) -> List[Dict[str, Any]]:
        """
        Read station records from a URL or a local JSON file.

        Accepts either a bare list of records or the {'data': {'stations': [...]}}
        layout of the station feed.
        """
        if _is_url(source):
            resp = requests.get(source, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        else:
            with open(source, 'r', encoding='utf-8') as f:
                payload = json.load(f)

        if isinstance(payload, dict):
            container = payload.get('data', payload)
            stations = container.get('stations') if isinstance(container, dict) else None
            if not isinstance(stations, list):
                raise ValueError(f"Station source {source} has no data.stations list")
            payload = stations
        if not isinstance(payload, list):
            raise ValueError(f"Station source {source} does not contain a station list")
        return payload

    def normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rename known column variations to the canonical names."""
        renames = {}
        for canonical, variations in self.column_variations.items():
            if canonical in df.columns:
                continue
            for var in variations:
                if var in df.columns:
                    renames[var] = canonical
                    break
        return df.rename(columns=renames)

    def validate_schema(self, df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """
        Validate that the station table contains required fields.

        Returns:
            Tuple of (is_valid, missing_fields)
        """
        missing_fields = [field for field in self.required_fields if field not in df.columns]
        if missing_fields:
            logger.warning(f"Missing required station fields: {missing_fields}")
        return len(missing_fields) == 0, missing_fields

    def build_stations(self, records: List[Dict[str, Any]]) -> gpd.GeoDataFrame:
        """
        Build the station GeoDataFrame from raw records.

        Raises:
            ValueError: If required fields are missing
        """
        df = self.normalize_columns(pd.DataFrame(records))
        if df.empty:
            logger.warning("Station dataset is empty")
            return gpd.GeoDataFrame(
                {'short_name': [], 'name': [], 'lon': [], 'lat': []},
                geometry=gpd.points_from_xy([], []), crs="EPSG:4326"
            )

        is_valid, missing_fields = self.validate_schema(df)
        if not is_valid:
            raise ValueError(f"Station dataset is missing required fields: {missing_fields}")

        if 'name' not in df.columns:
            df['name'] = df['short_name']

        df['lon'] = pd.to_numeric(df['lon'], errors='coerce')
        df['lat'] = pd.to_numeric(df['lat'], errors='coerce')

        bad = df['lon'].isna() | df['lat'].isna() | df['short_name'].isna()
        if bad.any():
            logger.warning(f"Dropping {int(bad.sum())} stations without id or coordinates")
            df = df[~bad].copy()

        df['short_name'] = df['short_name'].astype(str)

        duplicated = df['short_name'].duplicated()
        if duplicated.any():
            logger.warning(f"Dropping {int(duplicated.sum())} duplicate station ids")
            df = df[~duplicated].copy()

        df = df[['short_name', 'name', 'lon', 'lat']].reset_index(drop=True)
        return gpd.GeoDataFrame(df, geometry=gpd.points_from_xy(df['lon'], df['lat']), crs="EPSG:4326")

    def load_stations(self, source: str) -> gpd.GeoDataFrame:
        """Fetch and build the station table."""
        try:
            stations = self.build_stations(self.fetch_records(source))
            logger.info(f"Successfully loaded {len(stations)} stations from {source}")
            return stations
        except Exception as e:
            logger.error(f"Failed to load stations from {source}: {e}")
            raise


class TripDataLoader:
    """Handles loading of trip records with timestamp parsing."""

    def __init__(self):
        self.required_fields = ['start_station_id', 'end_station_id', 'started_at', 'ended_at']
        self.timestamp_fields = ['started_at', 'ended_at']

    def validate_schema(self, df: pd.DataFrame) -> Tuple[bool, List[str]]:
        missing_fields = [field for field in self.required_fields if field not in df.columns]
        if missing_fields:
            logger.warning(f"Missing required trip fields: {missing_fields}")
        return len(missing_fields) == 0, missing_fields

    def prepare_trips(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Parse timestamps and drop malformed trips.

        Raises:
            ValueError: If required fields are missing
        """
        is_valid, missing_fields = self.validate_schema(df)
        if not is_valid:
            raise ValueError(f"Trip dataset is missing required fields: {missing_fields}")

        df = df.copy()
        for field in self.timestamp_fields:
            df[field] = pd.to_datetime(df[field], errors='coerce')

        for field in ['start_station_id', 'end_station_id']:
            df[field] = df[field].where(df[field].isna(), df[field].astype(str))

        bad = df['started_at'].isna() | df['ended_at'].isna()
        if bad.any():
            logger.warning(f"Dropping {int(bad.sum())} trips with unparseable timestamps")
            df = df[~bad]

        return df.reset_index(drop=True)

    def load_trips(self, source: str) -> pd.DataFrame:
        """Read the trip CSV from a URL or local path."""
        try:
            df = pd.read_csv(source, dtype={'start_station_id': str, 'end_station_id': str})
            trips = self.prepare_trips(df)
            logger.info(f"Successfully loaded {len(trips)} trips from {source}")
            return trips
        except Exception as e:
            logger.error(f"Failed to load trips from {source}: {e}")
            raise


class BikeLaneLoader:
    """Loads bike lane line geometry from GeoJSON."""

    def load_bike_lanes(self, source: str) -> gpd.GeoDataFrame:
        """
        Read bike lane lines and reproject them to WGS84 for Folium.

        Args:
            source: GeoJSON path or URL

        Returns:
            GeoDataFrame in EPSG:4326
        """
        gdf = gpd.read_file(source)

        if gdf.crs is None:
            gdf = gdf.set_crs("EPSG:4326")
        elif gdf.crs.to_epsg() != 4326:
            gdf = gdf.to_crs("EPSG:4326")

        # Geometry only, attribute columns may not be JSON serializable
        gdf = gdf.loc[gdf.geometry.notna() & ~gdf.geometry.is_empty, ["geometry"]]
        logger.info(f"Loaded {len(gdf)} bike lane features from {source}")
        return gdf


class TrafficDataManager:
    """Main interface for dataset loading."""

    def __init__(self, data_sources: Dict[str, Any]):
        self.data_sources = data_sources
        self.station_loader = StationDataLoader(timeout=data_sources.get('request_timeout_sec', 30))
        self.trip_loader = TripDataLoader()
        self.lane_loader = BikeLaneLoader()

    def load_stations(self) -> gpd.GeoDataFrame:
        return self.station_loader.load_stations(self.data_sources['stations'])

    def load_trips(self) -> pd.DataFrame:
        return self.trip_loader.load_trips(self.data_sources['trips'])

    def load_bike_lanes(self) -> List[Tuple[Dict[str, str], gpd.GeoDataFrame]]:
        """
        Load every configured bike lane source.

        Bike lanes are cosmetic, so a source that fails to load is logged and
        skipped instead of failing the map.
        """
        layers = []
        for source in self.data_sources.get('bike_lanes', []):
            try:
                layers.append((source, self.lane_loader.load_bike_lanes(source['url'])))
            except Exception as e:
                logger.warning(f"Skipping bike lane layer {source.get('id')}: {e}")
        return layers
