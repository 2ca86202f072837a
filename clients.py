"""
Voice network clients and the range rings they draw on the map.

Each client owns its marker and ring handles on the map surface. Only the
client's own update/destroy may create, move or remove them.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple, Optional, Tuple
from config import ATC_DEFAULT_RANGE_KM, ATC_MIN_RANGE_KM
from distance_calculator import radio_horizon, feet_to_meters
from map_surface import MapSurface


class RangeRing(NamedTuple):
    """Circular coverage region: center position and radius in meters."""
    latitude: float
    longitude: float
    radius_m: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


def format_frequency(frequency_hz: float) -> str:
    return f"{frequency_hz / 1e6:.3f}"


def transceiver_keys(transceivers: List[Dict]) -> List[Tuple[str, Dict]]:
    """
    Pair each transceiver with a unique ring key.

    Keys follow the transceiver id; a repeated id gets a numeric suffix so
    no ring is lost.
    """
    keyed = []
    seen = set()
    for tx in transceivers:
        key = base = f"tx-{tx['id']}"
        suffix = 1
        while key in seen:
            key = f"{base}-{suffix}"
            suffix += 1
        seen.add(key)
        keyed.append((key, tx))
    return keyed


class Client(ABC):
    """A connected client with a position marker and zero or more range rings."""

    client_type = ''
    # Broadcasting clients take part in the in-range report
    broadcasting = False

    def __init__(self, client_data: Dict, surface: MapSurface):
        self.client_data = client_data
        self.surface = surface
        self.markers: Dict[str, str] = {}
        self.range_rings: Dict[str, str] = {}
        self._rings: Dict[str, RangeRing] = {}
        self._rings_visible = True

    @property
    def callsign(self) -> str:
        return self.client_data['callsign']

    @property
    def position(self) -> Tuple[float, float]:
        return (self.client_data['latitude'], self.client_data['longitude'])

    @property
    def attributes(self) -> Dict:
        """Kind-specific values shown next to the callsign in lists."""
        return {}

    def update(self, client_data: Dict):
        """Replace the client's data and bring its map layers in line with it."""
        self.client_data = client_data
        self._rings = self.compute_range_rings()
        self.upsert_markers()
        self.upsert_range_rings()

    def destroy(self):
        for handle in self.markers.values():
            self.surface.remove(handle)
        for handle in self.range_rings.values():
            self.surface.remove(handle)
        self.markers = {}
        self.range_rings = {}

    def rings(self) -> List[RangeRing]:
        return [self._rings[key] for key in sorted(self._rings)]

    def set_rings_visible(self, visible: bool):
        self._rings_visible = visible
        for handle in self.range_rings.values():
            self.surface.set_visible(handle, visible)

    def upsert_markers(self):
        handle = self.markers.get('position')
        if handle is None:
            self.markers['position'] = self.surface.add_marker(
                self.position, self.get_list_text(), self.client_type)
        else:
            self.surface.move_marker(handle, self.position, self.get_list_text())

    def upsert_range_rings(self):
        for key in list(self.range_rings):
            if key not in self._rings:
                self.surface.remove(self.range_rings.pop(key))

        for key, ring in self._rings.items():
            handle = self.range_rings.get(key)
            if handle is None:
                self.range_rings[key] = self.surface.add_circle(
                    ring.center, ring.radius_m, self.client_type, visible=self._rings_visible)
            else:
                self.surface.update_circle(handle, ring.center, ring.radius_m)

    @abstractmethod
    def compute_range_rings(self) -> Dict[str, RangeRing]:
        """Derive the rings keyed by a stable name from the current data."""

    @abstractmethod
    def get_list_text(self) -> str:
        """Single-line summary for the client list."""

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.callsign}>"


class PilotClient(Client):
    """Aircraft: one ring per transceiver, sized by antenna height."""

    client_type = 'PILOT'
    broadcasting = True

    @property
    def altitude(self) -> int:
        return int(round(self.client_data.get('altitude') or 0))

    @property
    def attributes(self) -> Dict:
        return {'altitude': self.altitude}

    def _transceiver_height(self, transceiver: Dict) -> float:
        for key in ('height_agl_m', 'height_msl_m'):
            if transceiver.get(key) is not None:
                return transceiver[key]
        return feet_to_meters(self.client_data.get('altitude'))

    def compute_range_rings(self) -> Dict[str, RangeRing]:
        transceivers = self.client_data.get('transceivers') or []
        if not transceivers:
            radius = radio_horizon(feet_to_meters(self.client_data.get('altitude')))
            return {'position': RangeRing(*self.position, radius)}

        return {
            key: RangeRing(tx['latitude'], tx['longitude'], radio_horizon(self._transceiver_height(tx)))
            for key, tx in transceiver_keys(transceivers)
        }

    def get_list_text(self) -> str:
        return f"{self.callsign} - {self.altitude}ft"


class AtcClient(Client):
    """Ground station: one ring per transceiver, or a fixed default ring."""

    client_type = 'ATC'

    @property
    def attributes(self) -> Dict:
        return {'frequencies': [format_frequency(f) for f in self.client_data.get('frequencies') or []]}

    def compute_range_rings(self) -> Dict[str, RangeRing]:
        transceivers = self.client_data.get('transceivers') or []
        if not transceivers:
            return {'position': RangeRing(*self.position, ATC_DEFAULT_RANGE_KM * 1000.0)}

        rings = {}
        for key, tx in transceiver_keys(transceivers):
            radius = max(radio_horizon(tx.get('height_agl_m')), ATC_MIN_RANGE_KM * 1000.0)
            rings[key] = RangeRing(tx['latitude'], tx['longitude'], radius)
        return rings

    def get_list_text(self) -> str:
        frequencies = self.attributes['frequencies']
        if not frequencies:
            return self.callsign
        return f"{self.callsign} - {' / '.join(frequencies)} MHz"


class ObserverClient(Client):
    """Listener without a transmitter; draws no rings."""

    client_type = 'OBS'

    def compute_range_rings(self) -> Dict[str, RangeRing]:
        return {}

    def get_list_text(self) -> str:
        return f"{self.callsign} (observer)"


CLIENT_TYPES = {
    cls.client_type: cls
    for cls in (PilotClient, AtcClient, ObserverClient)
}


def instantiate_client(client_data: Dict, surface: MapSurface) -> Client:
    """
    Build the client variant for a record's type.

    Raises:
        ValueError: if the type is not one of CLIENT_TYPES
    """
    cls: Optional[type] = CLIENT_TYPES.get(client_data.get('type'))
    if cls is None:
        raise ValueError(f"Unknown client type {client_data.get('type')!r} for {client_data.get('callsign')}")
    return cls(client_data, surface)
