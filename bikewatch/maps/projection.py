"""
Geographic to screen projection for station markers.

Station coordinates are projected to Web Mercator with pyproj and then placed
on the viewport relative to the current map camera, the same way the Leaflet
map positions its layers.
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
import numpy as np
import pandas as pd
from pyproj import Transformer
import logging

logger = logging.getLogger(__name__)

# Half the Web Mercator world width in meters
ORIGIN_SHIFT = math.pi * 6378137.0

_transformer = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


@dataclass(frozen=True)
class CameraState:
    """Current map view: center, zoom and viewport size in pixels."""
    center_lon: float
    center_lat: float
    zoom: float
    width: int = 1000
    height: int = 700
    tile_size: int = 256

    @classmethod
    def from_folium(cls, map_data: Optional[Dict[str, Any]], width: int, height: int,
                    tile_size: int = 256) -> Optional['CameraState']:
        """
        Build a camera from the values returned by st_folium.

        Args:
            map_data: Dictionary returned by st_folium (may be None on first run)
            width: Viewport width in pixels
            height: Viewport height in pixels
            tile_size: Map tile size in pixels

        Returns:
            CameraState, or None when the map has not reported its view yet
        """
        if not map_data:
            return None
        center = map_data.get('center')
        zoom = map_data.get('zoom')
        if not center or zoom is None:
            return None
        return cls(
            center_lon=float(center['lng']),
            center_lat=float(center['lat']),
            zoom=float(zoom),
            width=int(width),
            height=int(height),
            tile_size=int(tile_size),
        )

    @property
    def world_size(self) -> float:
        """Width of the whole world in pixels at the current zoom."""
        return self.tile_size * (2 ** self.zoom)


def _mercator_to_world_pixels(x, y, world_size: float):
    px = (x + ORIGIN_SHIFT) / (2 * ORIGIN_SHIFT) * world_size
    py = (ORIGIN_SHIFT - y) / (2 * ORIGIN_SHIFT) * world_size
    return px, py


def project(lon: float, lat: float, camera: CameraState) -> Tuple[float, float]:
    """
    Project a geographic coordinate to viewport pixel coordinates.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees
        camera: Current camera state

    Returns:
        Tuple of (x, y) pixels from the top-left corner of the viewport
    """
    x, y = _transformer.transform(lon, lat)
    cx, cy = _transformer.transform(camera.center_lon, camera.center_lat)

    px, py = _mercator_to_world_pixels(x, y, camera.world_size)
    pcx, pcy = _mercator_to_world_pixels(cx, cy, camera.world_size)

    return float(px - pcx + camera.width / 2), float(py - pcy + camera.height / 2)


def project_frame(stations: pd.DataFrame, camera: CameraState) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project every station in a frame with 'lon' and 'lat' columns.

    Returns:
        Tuple of (xs, ys) arrays aligned with the frame rows
    """
    if len(stations) == 0:
        return np.array([]), np.array([])

    xs, ys = _transformer.transform(stations['lon'].to_numpy(dtype=float),
                                    stations['lat'].to_numpy(dtype=float))
    cx, cy = _transformer.transform(camera.center_lon, camera.center_lat)

    px, py = _mercator_to_world_pixels(np.asarray(xs), np.asarray(ys), camera.world_size)
    pcx, pcy = _mercator_to_world_pixels(cx, cy, camera.world_size)

    return px - pcx + camera.width / 2, py - pcy + camera.height / 2


def in_viewport(x: float, y: float, camera: CameraState) -> bool:
    """Whether a projected point lies inside the viewport."""
    return 0 <= x <= camera.width and 0 <= y <= camera.height
