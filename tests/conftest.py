"""Shared pytest fixtures: an empty map surface, search state and registry."""

from unittest.mock import MagicMock

import pytest

from data_ingester import MapDataClient
from map_controller import NetworkMap
from map_surface import MapSurface
from registry import ClientRegistry
from search_filter import FilterState


@pytest.fixture
def surface() -> MapSurface:
    return MapSurface()


@pytest.fixture
def filter_state() -> FilterState:
    return FilterState()


@pytest.fixture
def registry(surface: MapSurface, filter_state: FilterState) -> ClientRegistry:
    return ClientRegistry(surface, filter_state)


@pytest.fixture
def data_client() -> MagicMock:
    """Snapshot source returning an empty snapshot until told otherwise."""
    client = MagicMock(spec=MapDataClient)
    client.fetch_clients.return_value = []
    return client


@pytest.fixture
def network_map(data_client: MagicMock) -> NetworkMap:
    return NetworkMap(data_client=data_client)
