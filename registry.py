"""
Client registry kept in step with map data snapshots.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set
from clients import Client, instantiate_client
from data_ingester import parse_client_record
from map_surface import MapSurface
from search_filter import FilterState

logger = logging.getLogger(__name__)


class ClientRegistry:
    """
    Connected clients keyed by callsign.

    Clients are updated in place across snapshots so their map layers keep
    their identity; only disconnected clients are destroyed.
    """

    def __init__(self, surface: MapSurface, filter_state: FilterState):
        self.surface = surface
        self.filter_state = filter_state
        self.clients: Dict[str, Client] = {}

    def __len__(self):
        return len(self.clients)

    def __contains__(self, callsign: str):
        return callsign in self.clients

    def __iter__(self):
        return iter(self.clients.values())

    def get(self, callsign: str) -> Optional[Client]:
        return self.clients.get(callsign)

    def callsigns(self) -> Set[str]:
        return set(self.clients)

    def reconcile(self, records: Iterable[Dict]) -> Dict[str, int]:
        """
        Apply a complete snapshot: upsert every valid record, then remove
        clients missing from it.

        Args:
            records: Raw client records of one snapshot

        Returns:
            Counts of added, updated, removed and skipped records
        """
        summary = {'added': 0, 'updated': 0, 'removed': 0, 'skipped': 0}
        incoming: Set[str] = set()

        for record in records:
            client_data = parse_client_record(record)
            if client_data is None:
                summary['skipped'] += 1
                continue

            callsign = client_data['callsign']
            if not self.filter_state.allows(callsign):
                continue

            try:
                added = self.upsert_client(client_data)
            except (ValueError, OverflowError) as e:
                logger.warning(f"Dropping client record {callsign}: {e}")
                summary['skipped'] += 1
                continue

            incoming.add(callsign)
            summary['added' if added else 'updated'] += 1

        disconnected = self.find_disconnected_clients(incoming)
        self.remove_clients(disconnected)
        summary['removed'] = len(disconnected)

        logger.info(
            f"Reconciled snapshot: {summary['added']} added, {summary['updated']} updated, "
            f"{summary['removed']} removed, {summary['skipped']} skipped"
        )
        return summary

    def upsert_client(self, client_data: Dict) -> bool:
        """
        Create or update the client for a parsed record.

        Returns:
            True if a new client was created
        """
        callsign = client_data['callsign']
        client = self.clients.get(callsign)

        created = False

        if client is None:
            client = instantiate_client(client_data, self.surface)
            created = True
        elif client.client_type != client_data['type']:
            # Build the replacement first so an unknown type leaves the old client alone
            replacement = instantiate_client(client_data, self.surface)
            logger.info(f"{callsign} changed type {client.client_type} -> {client_data['type']}")
            self.remove_client(callsign)
            client = replacement
            created = True

        client.update(client_data)
        self.clients[callsign] = client
        return created

    def find_disconnected_clients(self, incoming: Set[str]) -> List[str]:
        return sorted(set(self.clients) - incoming)

    def remove_clients(self, callsigns: Iterable[str]):
        for callsign in callsigns:
            self.remove_client(callsign)

    def remove_client(self, callsign: str):
        self.clients[callsign].destroy()
        del self.clients[callsign]
