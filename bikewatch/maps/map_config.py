"""
Configuration management for the station traffic map.

Settings are read from a JSON file and merged over built-in defaults so that
a partial file only overrides the keys it names.
"""

import copy
import json
import os
from typing import Dict, Any, Optional, List, Tuple
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class BikeMapConfig:
    """Manages data source, map and symbology settings."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or "bike_map_config.json"
        self.default_config = self._get_default_config()
        self.config = self._load_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default map configuration."""
        return {
            "data_sources": {
                "stations": "https://dsc106.com/labs/lab07/data/bluebikes-stations.json",
                "trips": "https://dsc106.com/labs/lab07/data/bluebikes-traffic-2024-03.csv",
                "bike_lanes": [
                    {
                        "id": "boston_route",
                        "name": "Boston bike lanes",
                        "url": "https://bostonopendata-boston.opendata.arcgis.com/datasets/boston::existing-bike-network-2022.geojson"
                    },
                    {
                        "id": "cambridge_route",
                        "name": "Cambridge bike lanes",
                        "url": "https://raw.githubusercontent.com/cambridgegis/cambridgegis_data/main/Recreation/Bike_Facilities/RECREATION_BikeFacilities.geojson"
                    }
                ],
                "request_timeout_sec": 30
            },
            "map_settings": {
                "default_center": [-71.09415, 42.36027],  # lon, lat
                "default_zoom": 12,
                "min_zoom": 5,
                "max_zoom": 18,
                "tiles": "OpenStreetMap",
                "viewport_width": 1000,
                "viewport_height": 700,
                "tile_size": 256
            },
            "bike_lanes": {
                "color": "green",
                "weight": 3,
                "opacity": 0.4
            },
            "radius_presets": {
                "unfiltered": [0, 25],
                "filtered": [3, 50]
            },
            "marker_style": {
                "fill_color": "steelblue",
                "fill_opacity": 0.6,
                "stroke_color": "white",
                "stroke_width": 1,
                "color_by_flow": True
            },
            "flow_colors": {
                "palette": "coolwarm",
                "n_classes": 3
            },
            "time_filter": {
                "window_minutes": 60
            }
        }

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or use defaults."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config = json.load(f)
                logger.info(f"Loaded map configuration from {self.config_path}")

                # Merge with defaults to ensure all keys exist
                return self._merge_configs(self.default_config, config)
            except Exception as e:
                logger.error(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")
                return copy.deepcopy(self.default_config)
        else:
            logger.info(f"Config file {self.config_path} not found, using defaults")
            return copy.deepcopy(self.default_config)

    def _merge_configs(self, default: Dict, user: Dict) -> Dict:
        """Recursively merge user config with defaults."""
        merged = copy.deepcopy(default)

        for key, value in user.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            config_dir = Path(self.config_path).parent
            config_dir.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=2)
            logger.info(f"Saved map configuration to {self.config_path}")
        except Exception as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")

    def get_data_sources(self) -> Dict[str, Any]:
        """Get station, trip and bike lane source locations."""
        return self.config["data_sources"]

    def get_map_settings(self) -> Dict[str, Any]:
        """Get map display settings."""
        return self.config["map_settings"]

    def get_bike_lane_style(self) -> Dict[str, Any]:
        return self.config["bike_lanes"]

    def get_radius_range(self, filtered: bool) -> Tuple[float, float]:
        """Get the (low, high) radius range for the current filter state."""
        preset = "filtered" if filtered else "unfiltered"
        low, high = self.config["radius_presets"][preset]
        return float(low), float(high)

    def get_marker_style(self) -> Dict[str, Any]:
        return self.config["marker_style"]

    def get_flow_colors(self) -> Dict[str, Any]:
        return self.config["flow_colors"]

    def get_window_minutes(self) -> int:
        return int(self.config["time_filter"]["window_minutes"])

    def update_radius_presets(self, updates: Dict[str, List[float]]) -> None:
        """Update radius presets, e.g. {'filtered': [5, 40]}."""
        self.config["radius_presets"].update(updates)
        logger.info(f"Updated radius presets: {list(updates)}")

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self.config = copy.deepcopy(self.default_config)
        logger.info("Reset configuration to defaults")


# Global configuration instance
_map_config = None

def get_map_config(config_path: Optional[str] = None) -> BikeMapConfig:
    """Get global map configuration instance."""
    global _map_config
    if _map_config is None:
        _map_config = BikeMapConfig(config_path)
    return _map_config
