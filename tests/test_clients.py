"""Tests for client variants, their range rings and map layers."""

import pytest

from clients import (
    CLIENT_TYPES,
    AtcClient,
    ObserverClient,
    PilotClient,
    RangeRing,
    instantiate_client,
)
from config import ATC_DEFAULT_RANGE_KM, ATC_MIN_RANGE_KM
from conftest_utils import altitude_for_range, atc_record, observer_record, pilot_record, transceiver
from data_ingester import parse_client_record
from distance_calculator import radio_horizon


def build(record, surface):
    data = parse_client_record(record)
    client = instantiate_client(data, surface)
    client.update(data)
    return client


class TestFactory:
    @pytest.mark.parametrize("client_type, cls", [
        ("PILOT", PilotClient),
        ("ATC", AtcClient),
        ("OBS", ObserverClient),
    ])
    def test_builds_variant_for_type(self, surface, client_type, cls):
        data = parse_client_record(pilot_record("X1"))
        data["type"] = client_type
        assert isinstance(instantiate_client(data, surface), cls)
        assert CLIENT_TYPES[client_type] is cls

    def test_unknown_type_raises(self, surface):
        data = parse_client_record(pilot_record("X1"))
        data["type"] = "SUP"
        with pytest.raises(ValueError, match="SUP"):
            instantiate_client(data, surface)

    def test_only_pilots_broadcast(self):
        assert PilotClient.broadcasting
        assert not AtcClient.broadcasting
        assert not ObserverClient.broadcasting


class TestPilotClient:
    def test_ring_from_altitude_without_transceivers(self, surface):
        pilot = build(pilot_record("DAL1", 10.0, 20.0, altitude=altitude_for_range(100)), surface)

        rings = pilot.rings()
        assert len(rings) == 1
        assert rings[0].center == (10.0, 20.0)
        assert rings[0].radius_m == pytest.approx(100_000)

    def test_one_ring_per_transceiver(self, surface):
        pilot = build(pilot_record("DAL1", transceivers=[
            transceiver(0, 1.0, 1.0, height_agl_m=1000.0),
            transceiver(1, 1.1, 1.1, height_agl_m=3000.0),
        ]), surface)

        assert pilot.rings() == [
            RangeRing(1.0, 1.0, radio_horizon(1000.0)),
            RangeRing(1.1, 1.1, radio_horizon(3000.0)),
        ]
        assert len(surface.circles) == 2

    def test_transceiver_height_falls_back_to_msl(self, surface):
        pilot = build(pilot_record("DAL1", transceivers=[
            transceiver(0, 1.0, 1.0, height_msl_m=2000.0),
        ]), surface)
        assert pilot.rings()[0].radius_m == pytest.approx(radio_horizon(2000.0))

    def test_rings_are_deterministic(self, surface):
        record = pilot_record("DAL1", altitude=12000)
        pilot = build(record, surface)
        first = pilot.rings()
        pilot.update(parse_client_record(record))
        assert pilot.rings() == first

    def test_list_text_and_attributes(self, surface):
        pilot = build(pilot_record("DAL1", altitude=34999.6), surface)
        assert pilot.get_list_text() == "DAL1 - 35000ft"
        assert pilot.attributes == {"altitude": 35000}


class TestAtcClient:
    def test_default_ring_without_transceivers(self, surface):
        atc = build(atc_record("KJFK_TWR", 40.6, -73.8), surface)
        assert atc.rings() == [RangeRing(40.6, -73.8, ATC_DEFAULT_RANGE_KM * 1000.0)]

    def test_transceiver_rings_have_minimum_range(self, surface):
        atc = build(atc_record("KJFK_TWR", transceivers=[
            transceiver(0, 40.6, -73.8, height_agl_m=2.0),
            transceiver(1, 40.7, -73.9, height_agl_m=500.0),
        ]), surface)

        low, high = atc.rings()
        assert low.radius_m == ATC_MIN_RANGE_KM * 1000.0
        assert high.radius_m == pytest.approx(radio_horizon(500.0))

    def test_list_text_shows_frequencies(self, surface):
        atc = build(atc_record("KJFK_TWR", frequencies=[118700000, 119100000]), surface)
        assert atc.get_list_text() == "KJFK_TWR - 118.700 / 119.100 MHz"
        assert atc.attributes == {"frequencies": ["118.700", "119.100"]}

    def test_list_text_without_frequencies(self, surface):
        atc = build(atc_record("KJFK_TWR", frequencies=[]), surface)
        assert atc.get_list_text() == "KJFK_TWR"


class TestObserverClient:
    def test_has_no_rings(self, surface):
        obs = build(observer_record("JOHN_OBS"), surface)
        assert obs.rings() == []
        assert surface.circles == {}
        assert len(surface.markers) == 1
        assert obs.get_list_text() == "JOHN_OBS (observer)"


class TestMapLayers:
    def test_update_moves_existing_layers(self, surface):
        pilot = build(pilot_record("DAL1", 0.0, 0.0, altitude=10000), surface)
        marker = pilot.markers["position"]
        ring = pilot.range_rings["position"]

        pilot.update(parse_client_record(pilot_record("DAL1", 1.0, 2.0, altitude=20000)))

        assert pilot.markers["position"] == marker
        assert pilot.range_rings["position"] == ring
        assert len(surface.markers) == 1
        assert len(surface.circles) == 1
        assert surface.markers[marker]["latitude"] == 1.0
        assert surface.markers[marker]["label"] == "DAL1 - 20000ft"
        assert surface.circles[ring]["radius_m"] == pytest.approx(radio_horizon(20000 * 0.3048))

    def test_update_removes_stale_rings(self, surface):
        pilot = build(pilot_record("DAL1", transceivers=[
            transceiver(0, 1.0, 1.0, height_agl_m=1000.0),
            transceiver(1, 1.0, 1.0, height_agl_m=1000.0),
        ]), surface)
        stale = pilot.range_rings["tx-1"]

        pilot.update(parse_client_record(pilot_record("DAL1", transceivers=[
            transceiver(0, 1.0, 1.0, height_agl_m=1000.0),
        ])))

        assert stale not in surface.circles
        assert list(pilot.range_rings) == ["tx-0"]
        assert len(surface.circles) == 1

    def test_destroy_releases_everything_and_is_idempotent(self, surface):
        pilot = build(pilot_record("DAL1"), surface)
        pilot.destroy()
        pilot.destroy()

        assert surface.markers == {}
        assert surface.circles == {}
        assert pilot.markers == {}
        assert pilot.range_rings == {}

    def test_hidden_rings_stay_hidden_when_recreated(self, surface):
        pilot = build(pilot_record("DAL1"), surface)
        pilot.set_rings_visible(False)

        pilot.update(parse_client_record(pilot_record("DAL1", transceivers=[
            transceiver(0, 1.0, 1.0, height_agl_m=1000.0),
        ])))

        assert [c["visible"] for c in surface.circles.values()] == [False]

    def test_payload_markers_are_copies(self, surface):
        pilot = build(pilot_record("DAL1", 0.0, 0.0), surface)
        payload = surface.to_payload()

        pilot.update(parse_client_record(pilot_record("DAL1", 5.0, 5.0)))

        assert (payload["markers"][0]["latitude"], payload["markers"][0]["longitude"]) == (0.0, 0.0)


class TestTransceiverKeys:
    def test_missing_id_colliding_with_explicit_id_keeps_both_rings(self, surface):
        record = pilot_record("DAL1", transceivers=[
            transceiver(None, 0.0, 0.0, height_agl_m=1000.0),
            transceiver(0, 10.0, 10.0, height_agl_m=1000.0),
        ])
        pilot = build(record, surface)

        assert sorted(ring.center for ring in pilot.rings()) == [(0.0, 0.0), (10.0, 10.0)]
        assert len(surface.circles) == 2

    def test_duplicate_explicit_ids_keep_both_rings(self, surface):
        atc = build(atc_record("KJFK_TWR", transceivers=[
            transceiver(3, 40.6, -73.8, height_agl_m=500.0),
            transceiver(3, 40.7, -73.9, height_agl_m=500.0),
        ]), surface)

        assert sorted(atc.range_rings) == ["tx-3", "tx-3-1"]
        assert len(atc.rings()) == 2

    def test_keys_stable_across_updates(self, surface):
        record = pilot_record("DAL1", transceivers=[
            transceiver(1, 0.0, 0.0, height_agl_m=1000.0),
            transceiver(1, 1.0, 1.0, height_agl_m=1000.0),
        ])
        pilot = build(record, surface)
        handles = dict(pilot.range_rings)

        pilot.update(parse_client_record(record))

        assert pilot.range_rings == handles
