"""
Top-level controller owning the client registry, search state and map surface.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from data_ingester import MapDataClient
from map_surface import MapSurface
from range_analyzer import build_client_list, build_in_range_report
from registry import ClientRegistry
from search_filter import FilterState, apply_ring_visibility

logger = logging.getLogger(__name__)


class NetworkMap:
    """
    Entry point for every operation on the map state.

    All public methods hold one lock, so a snapshot reconcile never runs
    alongside another reconcile or a user command.
    """

    def __init__(self, data_client: Optional[MapDataClient] = None,
                 allow_list: Optional[Iterable[str]] = None,
                 surface: Optional[MapSurface] = None):
        self.data_client = data_client or MapDataClient()
        self.surface = surface or MapSurface()
        self.filter_state = FilterState(allow_list)
        self.registry = ClientRegistry(self.surface, self.filter_state)
        self.last_update: Optional[datetime] = None
        self._lock = threading.RLock()

    def reload_map_data(self) -> bool:
        """
        Fetch a snapshot and apply it.

        Returns:
            False if the fetch failed and the registry was left untouched
        """
        records = self.data_client.fetch_clients()
        if records is None:
            logger.warning("Skipping refresh, no snapshot available")
            return False

        self.apply_snapshot(records)
        return True

    def apply_snapshot(self, records: Iterable[Dict]) -> Dict[str, int]:
        with self._lock:
            summary = self.registry.reconcile(records)
            apply_ring_visibility(self.registry, self.filter_state)
            self.last_update = datetime.now()
            return summary

    def set_search_term(self, term: Optional[str]):
        with self._lock:
            self.filter_state.set_search_term(term)
            apply_ring_visibility(self.registry, self.filter_state)

    def select_client(self, callsign: str) -> bool:
        """
        Center the map on a client and search for its exact callsign.

        Returns:
            False if the client is not connected; nothing is changed then
        """
        with self._lock:
            client = self.registry.get(callsign)
            if client is None:
                logger.warning(f"Client not found: {callsign}")
                return False

            logger.info(f"Selected client: {callsign}")
            self.surface.set_view(client.position)
            self.filter_state.set_search_term(callsign)
            apply_ring_visibility(self.registry, self.filter_state)
            return True

    def toggle_ring_layer(self, client_type: str) -> bool:
        with self._lock:
            return self.surface.toggle_ring_layer(client_type)

    def online_count(self) -> int:
        with self._lock:
            return len(self.registry)

    def client_list(self) -> List[Tuple[str, str]]:
        with self._lock:
            return build_client_list(self.registry)

    def in_range_report(self) -> List[Dict]:
        with self._lock:
            return build_in_range_report(self.registry, self.filter_state)

    def map_payload(self) -> Dict:
        with self._lock:
            return self.surface.to_payload()
