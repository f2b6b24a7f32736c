from __future__ import annotations

from tokenview.ingestion.stream import route_event
from tokenview.state.events import (
    BulkPatchEvent,
    EventKind,
    IngestionSource,
    NewTokenEvent,
    PriceTickEvent,
    SnapshotEvent,
    VolumeTickEvent,
)


def test_initial_data_routes_to_snapshot() -> None:
    event = route_event("initial_data", {"data": [{"token_address": "A"}]})

    assert isinstance(event, SnapshotEvent)
    assert event.items == ({"token_address": "A"},)
    assert event.sequence is None
    assert event.source == IngestionSource.STREAM


def test_initial_data_without_list_routes_to_empty_snapshot() -> None:
    event = route_event("initial_data", {"data": {"unexpected": True}})

    assert isinstance(event, SnapshotEvent)
    assert event.items is None


def test_tokens_updated_routes_to_bulk_patch() -> None:
    event = route_event("tokens_updated", {"data": [{"token_address": "A", "price_sol": 1}]})

    assert isinstance(event, BulkPatchEvent)
    assert event.kind == EventKind.BULK_PATCH
    assert len(event.items) == 1


def test_tokens_updated_without_list_is_ignored() -> None:
    assert route_event("tokens_updated", {"data": None}) is None
    assert route_event("tokens_updated", {"data": {"token_address": "A"}}) is None


def test_price_update_single_object_is_normalized() -> None:
    event = route_event(
        "price_update",
        {"data": {"token_address": "A", "new_price": 0.5, "change_percent": -2, "old_price": 0.6}},
    )

    assert isinstance(event, PriceTickEvent)
    assert event.items == ({"address": "A", "price_sol": 0.5, "price_change_percent": -2},)


def test_price_update_list_is_normalized() -> None:
    event = route_event(
        "price_update",
        {"data": [{"token_address": "A", "new_price": 1}, {"token_address": "B", "change_percent": 3}]},
    )

    assert isinstance(event, PriceTickEvent)
    assert event.items == (
        {"address": "A", "price_sol": 1},
        {"address": "B", "price_change_percent": 3},
    )


def test_volume_spike_is_normalized() -> None:
    event = route_event("volume_spike", {"data": [{"token_address": "A", "new_volume": 900, "new_price": 1}]})

    assert isinstance(event, VolumeTickEvent)
    assert event.items == ({"address": "A", "volume_sol": 900},)


def test_tick_passes_non_object_items_through() -> None:
    event = route_event("volume_spike", {"data": ["junk", {"token_address": "A", "new_volume": 1}]})

    assert isinstance(event, VolumeTickEvent)
    assert event.items[0] == "junk"


def test_new_token_routes_to_new_entity() -> None:
    event = route_event("new_token", {"data": {"token_address": "N"}})

    assert isinstance(event, NewTokenEvent)
    assert event.item == {"token_address": "N"}


def test_new_token_without_data_is_ignored() -> None:
    assert route_event("new_token", {"data": None}) is None
    assert route_event("new_token", {}) is None


def test_unknown_event_and_bad_payload_are_ignored() -> None:
    assert route_event("market_closed", {"data": []}) is None
    assert route_event("price_update", "not a mapping") is None
