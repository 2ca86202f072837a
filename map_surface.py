"""
In-memory map layers consumed by the web front end.

Clients draw through this surface only: they receive opaque handles for the
markers and circles they create and are responsible for removing them.
"""

import itertools
from typing import Dict, List, Optional, Set, Tuple
from config import DEFAULT_VIEW_CENTER, DEFAULT_VIEW_ZOOM, MIN_SELECT_ZOOM


class MapSurface:
    """Marker and circle layers plus the current view of the map."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.markers: Dict[str, Dict] = {}
        self.circles: Dict[str, Dict] = {}
        self.hidden_ring_layers: Set[str] = set()
        self.center: Tuple[float, float] = DEFAULT_VIEW_CENTER
        self.zoom = DEFAULT_VIEW_ZOOM

    def _next_handle(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def add_marker(self, position: Tuple[float, float], label: str, client_type: str) -> str:
        """
        Create a position marker.

        Returns:
            Handle identifying the marker for later moves and removal
        """
        handle = self._next_handle('marker')
        self.markers[handle] = {
            'id': handle,
            'latitude': position[0],
            'longitude': position[1],
            'label': label,
            'type': client_type,
        }
        return handle

    def move_marker(self, handle: str, position: Tuple[float, float], label: str):
        marker = self.markers[handle]
        marker['latitude'] = position[0]
        marker['longitude'] = position[1]
        marker['label'] = label

    def add_circle(self, center: Tuple[float, float], radius_m: float,
                   client_type: str, visible: bool = True) -> str:
        """
        Create a circular region (range ring).

        Returns:
            Handle identifying the circle for later updates and removal
        """
        handle = self._next_handle('circle')
        self.circles[handle] = {
            'id': handle,
            'latitude': center[0],
            'longitude': center[1],
            'radius_m': radius_m,
            'type': client_type,
            'visible': visible,
        }
        return handle

    def update_circle(self, handle: str, center: Tuple[float, float], radius_m: float):
        circle = self.circles[handle]
        circle['latitude'] = center[0]
        circle['longitude'] = center[1]
        circle['radius_m'] = radius_m

    def set_visible(self, handle: str, visible: bool):
        self.circles[handle]['visible'] = visible

    def remove(self, handle: str):
        """Remove a marker or circle. Unknown handles are ignored."""
        self.markers.pop(handle, None)
        self.circles.pop(handle, None)

    def set_view(self, position: Tuple[float, float], zoom: Optional[int] = None):
        """Re-center the map, never zooming out below MIN_SELECT_ZOOM."""
        if zoom is None:
            zoom = self.zoom
        self.center = position
        self.zoom = max(zoom, MIN_SELECT_ZOOM)

    def toggle_ring_layer(self, client_type: str) -> bool:
        """
        Show or hide every ring belonging to one client type.

        Returns:
            True if the layer is now hidden
        """
        if client_type in self.hidden_ring_layers:
            self.hidden_ring_layers.discard(client_type)
            return False
        self.hidden_ring_layers.add(client_type)
        return True

    def to_payload(self) -> Dict:
        """Serializable view of all layers for the front end."""
        circles: List[Dict] = []
        for circle in self.circles.values():
            shown = circle['visible'] and circle['type'] not in self.hidden_ring_layers
            circles.append({**circle, 'visible': shown})

        return {
            'markers': [dict(marker) for marker in self.markers.values()],
            'circles': circles,
            'view': {
                'latitude': self.center[0],
                'longitude': self.center[1],
                'zoom': self.zoom,
            },
            'hidden_ring_layers': sorted(self.hidden_ring_layers),
        }
