"""
Callsign search and startup allow-list.
"""

import logging
from typing import Iterable, Optional
from clients import Client

logger = logging.getLogger(__name__)


class FilterState:
    """
    Live search term plus the optional allow-list given at startup.

    The search term is matched as a case-insensitive substring of the
    callsign; an empty term matches everything. The allow-list is fixed for
    the lifetime of the state and only consulted during ingestion.
    """

    def __init__(self, allow_list: Optional[Iterable[str]] = None):
        self.allow_list = frozenset(c.strip() for c in allow_list or [] if c and c.strip())
        self.search_term = ''

    def set_search_term(self, term: Optional[str]):
        self.search_term = (term or '').lower()
        logger.debug(f"Search term set to {self.search_term!r}")

    def matches(self, callsign: str) -> bool:
        if not self.search_term:
            return True
        return self.search_term in callsign.lower()

    def allows(self, callsign: str) -> bool:
        if not self.allow_list:
            return True
        return callsign in self.allow_list


def apply_ring_visibility(clients: Iterable[Client], filter_state: FilterState):
    """Show the rings of matching clients and hide all others."""
    for client in clients:
        client.set_rings_visible(filter_state.matches(client.callsign))
