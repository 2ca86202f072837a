"""
Map data API client for ingesting voice network client snapshots.
"""

import math
import requests
import logging
from typing import List, Dict, Optional
from datetime import datetime
from config import MAP_DATA_API_URL, REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def _coordinate(value, limit: float) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if not -limit <= value <= limit:
        return None
    return value


def _number(value) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    # JSON numbers like 1e400 decode to inf
    if not math.isfinite(value):
        return None
    return value


def parse_transceiver(raw: Dict, index: int) -> Optional[Dict]:
    """
    Parse one transceiver entry of a client record.

    Transceivers without a usable position are dropped; the client itself
    stays valid.
    """
    if not isinstance(raw, dict):
        return None

    latitude = _coordinate(raw.get('latitude', raw.get('lat')), 90)
    longitude = _coordinate(raw.get('longitude', raw.get('lon')), 180)
    if latitude is None or longitude is None:
        return None

    tx_id = raw.get('id')
    return {
        'id': tx_id if tx_id is not None else index,
        'frequency': _number(raw.get('frequency')),
        'latitude': latitude,
        'longitude': longitude,
        'height_msl_m': _number(raw.get('heightMslM')),
        'height_agl_m': _number(raw.get('heightAglM')),
    }


def parse_client_record(record: Dict) -> Optional[Dict]:
    """
    Parse a raw map data record into structured client data.

    Record format:
    {callsign, type, latitude, longitude, altitude, frequencies, transceivers}

    Returns:
        Dictionary with parsed client data, or None if the record is malformed
        (missing callsign, missing type, or invalid position).
    """
    if not isinstance(record, dict):
        logger.warning(f"Dropping non-object client record: {record!r}")
        return None

    callsign = record.get('callsign')
    if not isinstance(callsign, str) or not callsign.strip():
        logger.warning(f"Dropping client record without callsign: {record!r}")
        return None
    callsign = callsign.strip()

    client_type = record.get('type')
    if not isinstance(client_type, str) or not client_type.strip():
        logger.warning(f"Dropping client record {callsign} without type")
        return None

    latitude = _coordinate(record.get('latitude'), 90)
    longitude = _coordinate(record.get('longitude'), 180)
    if latitude is None or longitude is None:
        logger.warning(f"Dropping client record {callsign} with invalid position")
        return None

    frequencies = []
    for frequency in record.get('frequencies') or []:
        value = _number(frequency)
        if value is not None:
            frequencies.append(value)

    transceivers = []
    for index, raw_tx in enumerate(record.get('transceivers') or []):
        transceiver = parse_transceiver(raw_tx, index)
        if transceiver:
            transceivers.append(transceiver)

    return {
        'callsign': callsign,
        'type': client_type.strip().upper(),
        'latitude': latitude,
        'longitude': longitude,
        'altitude': _number(record.get('altitude')) or 0,
        'frequencies': frequencies,
        'transceivers': transceivers,
    }


class MapDataClient:
    """Client for fetching voice network snapshots from the map data API."""

    def __init__(self, api_url: str = MAP_DATA_API_URL, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.api_url = api_url
        self.timeout = timeout
        self.last_fetch_time = None

    def fetch_clients(self) -> Optional[List[Dict]]:
        """
        Fetch the current snapshot of connected clients.

        Returns:
            List of raw client records, or None on error. A failed fetch is
            never reported as an empty snapshot.
        """
        try:
            response = requests.get(self.api_url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching data from map data API: {e}")
            return None
        except ValueError as e:
            logger.error(f"Map data API returned invalid JSON: {e}")
            return None

        clients = data.get('clients') if isinstance(data, dict) else None
        if not isinstance(clients, list):
            logger.error("Map data API response has no client list")
            return None

        self.last_fetch_time = datetime.now()
        logger.info(f"Fetched {len(clients)} client records")
        return clients
