"""
In-range analysis: which broadcasting clients lie inside another client's rings.
"""

from typing import Dict, Iterable, List, Tuple
from clients import Client
from distance_calculator import is_within_radius
from search_filter import FilterState


def _by_callsign(clients: Iterable[Client]) -> List[Client]:
    return sorted(clients, key=lambda c: c.callsign)


def find_clients_in_range(subject: Client, clients: Iterable[Client]) -> List[Client]:
    """
    Find broadcasting clients inside at least one of the subject's range rings.

    The relation is not symmetric: it depends only on the subject's rings,
    so A can be in range of B while B is out of range of A.

    Args:
        subject: Client whose rings are checked
        clients: All connected clients (the subject may be among them)

    Returns:
        Clients in range, ordered by callsign
    """
    rings = subject.rings()
    in_range = []

    for candidate in clients:
        if not candidate.broadcasting or candidate.callsign == subject.callsign:
            continue
        for ring in rings:
            if is_within_radius(ring.center, ring.radius_m, candidate.position):
                in_range.append(candidate)
                break

    return _by_callsign(in_range)


def _describe(client: Client) -> Dict:
    return {
        'callsign': client.callsign,
        'display_text': client.get_list_text(),
        'attributes': client.attributes,
    }


def build_in_range_report(clients: Iterable[Client], filter_state: FilterState) -> List[Dict]:
    """
    Build the in-range report for every broadcasting client matching the search.

    The search term narrows which subjects are reported; each subject's own
    in-range list is never filtered.

    Returns:
        One entry per subject, ordered by callsign:
        {'callsign', 'display_text', 'attributes', 'count', 'in_range': [...]}
    """
    clients = list(clients)
    subjects = [
        c for c in clients
        if c.broadcasting and filter_state.matches(c.callsign)
    ]

    report = []
    for subject in _by_callsign(subjects):
        in_range = find_clients_in_range(subject, clients)
        report.append({
            **_describe(subject),
            'count': len(in_range),
            'in_range': [_describe(c) for c in in_range],
        })
    return report


def build_client_list(clients: Iterable[Client]) -> List[Tuple[str, str]]:
    """Return (callsign, display text) pairs ordered by callsign."""
    return [(c.callsign, c.get_list_text()) for c in _by_callsign(clients)]
