"""
Per-station traffic aggregation.

Counts trips grouped by start station (departures) and end station (arrivals)
and joins the counts onto the station table by short station identifier.
"""

import numpy as np
import pandas as pd
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

STATION_ID_COLUMN = 'short_name'
TRAFFIC_COLUMNS = ['arrivals', 'departures', 'total_traffic', 'departure_ratio']


def compute_station_traffic(stations: pd.DataFrame, trips: pd.DataFrame) -> pd.DataFrame:
    """
    Compute arrivals, departures and total traffic for every station.

    Counts are always rebuilt from the given trips, so the function can be
    called on the full trip set or on any filtered subset. Stations without
    matching trips get zero counts; trips whose station ids are not in the
    station table contribute to no station.

    Args:
        stations: Station DataFrame with a 'short_name' column
        trips: Trip DataFrame with 'start_station_id' and 'end_station_id' columns

    Returns:
        Copy of stations (same rows, same order) with the traffic columns overwritten
    """
    result = stations.copy()

    departures = trips.groupby('start_station_id').size()
    arrivals = trips.groupby('end_station_id').size()

    station_ids = result[STATION_ID_COLUMN]
    result['departures'] = station_ids.map(departures).fillna(0).astype(int)
    result['arrivals'] = station_ids.map(arrivals).fillna(0).astype(int)
    result['total_traffic'] = result['arrivals'] + result['departures']

    # NaN for stations without traffic
    total = result['total_traffic'].replace(0, np.nan)
    result['departure_ratio'] = result['departures'] / total

    logger.debug(f"Aggregated {len(trips)} trips onto {len(result)} stations")
    return result


def validate_station_join(stations: pd.DataFrame, trips: pd.DataFrame) -> Dict[str, Any]:
    """
    Report how well trip station ids match the station table.

    Args:
        stations: Station DataFrame
        trips: Trip DataFrame

    Returns:
        Dictionary with join statistics
    """
    station_keys = set(stations[STATION_ID_COLUMN])
    start_keys = set(trips['start_station_id'].dropna())
    end_keys = set(trips['end_station_id'].dropna())

    matched = trips['start_station_id'].isin(station_keys) | trips['end_station_id'].isin(station_keys)

    stats = {
        'stations': len(stations),
        'trips': len(trips),
        'unmatched_start_ids': sorted(str(k) for k in start_keys - station_keys),
        'unmatched_end_ids': sorted(str(k) for k in end_keys - station_keys),
        'matched_trips': int(matched.sum()),
    }

    if stats['unmatched_start_ids'] or stats['unmatched_end_ids']:
        logger.warning(
            f"Trips reference {len(stats['unmatched_start_ids'])} unknown start stations "
            f"and {len(stats['unmatched_end_ids'])} unknown end stations"
        )
    logger.info(f"Station join: {stats['matched_trips']} of {stats['trips']} trips matched "
                f"{stats['stations']} stations")
    return stats
