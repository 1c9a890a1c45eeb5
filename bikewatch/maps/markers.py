"""
Station marker layer keyed by station identifier.

Markers keep their identity across updates: radius updates and position
updates modify the existing marker objects in place and never touch each
other's fields.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional
import numpy as np
import pandas as pd
import logging

from .projection import CameraState, project_frame, in_viewport
from .symbology import MarkerStyle, format_tooltip

logger = logging.getLogger(__name__)


@dataclass
class StationMarker:
    station_id: str
    lon: float
    lat: float
    name: str = ""
    radius: float = 0.0
    x: Optional[float] = None
    y: Optional[float] = None
    fill_color: str = "steelblue"
    arrivals: int = 0
    departures: int = 0
    total_traffic: int = 0
    tooltip: str = ""

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None


class MarkerLayer:
    """Mapping from station id to marker, updated with keyed upserts."""

    def __init__(self, style: Optional[MarkerStyle] = None):
        self.style = style or MarkerStyle()
        self._markers: Dict[str, StationMarker] = {}

    def __len__(self) -> int:
        return len(self._markers)

    def __iter__(self) -> Iterator[StationMarker]:
        return iter(self._markers.values())

    def __contains__(self, station_id: str) -> bool:
        return station_id in self._markers

    def get(self, station_id: str) -> Optional[StationMarker]:
        return self._markers.get(station_id)

    def markers(self) -> List[StationMarker]:
        return list(self._markers.values())

    def upsert_radii(self, stations: pd.DataFrame, scale) -> int:
        """
        Update radius, traffic and tooltip for every station, creating missing markers.

        Args:
            stations: Aggregated station DataFrame
            scale: Radius scale function

        Returns:
            Number of markers created
        """
        if len(stations) == 0:
            return 0

        radii = np.atleast_1d(scale(stations['total_traffic'].to_numpy()))
        created = 0

        for row, radius in zip(stations.itertuples(index=False), radii):
            station_id = str(row.short_name)
            marker = self._markers.get(station_id)
            if marker is None:
                marker = StationMarker(
                    station_id=station_id,
                    lon=float(row.lon),
                    lat=float(row.lat),
                    name=str(getattr(row, 'name', '') or ''),
                )
                self._markers[station_id] = marker
                created += 1

            marker.radius = float(radius)
            marker.arrivals = int(row.arrivals)
            marker.departures = int(row.departures)
            marker.total_traffic = int(row.total_traffic)
            marker.fill_color = self.style.fill_for(row.departure_ratio)
            marker.tooltip = format_tooltip(marker.total_traffic, marker.departures, marker.arrivals)

        logger.debug(f"Updated radii for {len(stations)} markers ({created} created)")
        return created

    def update_positions(self, camera: CameraState) -> int:
        """
        Recompute pixel positions for all markers from the camera.

        Returns:
            Number of markers inside the viewport
        """
        if not self._markers:
            return 0

        markers = self.markers()
        coords = pd.DataFrame({
            'lon': [m.lon for m in markers],
            'lat': [m.lat for m in markers],
        })
        xs, ys = project_frame(coords, camera)

        visible = 0
        for marker, x, y in zip(markers, xs, ys):
            marker.x = float(x)
            marker.y = float(y)
            if in_viewport(marker.x, marker.y, camera):
                visible += 1

        logger.debug(f"Projected {len(markers)} markers, {visible} in view")
        return visible

    def clear(self) -> None:
        self._markers.clear()
