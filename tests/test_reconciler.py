from __future__ import annotations

from tokenview.models.token import TokenRecord
from tokenview.reconcile import UpdateReconciler
from tokenview.state.events import (
    BulkPatchEvent,
    EventKind,
    IngestionSource,
    NewTokenEvent,
    PriceTickEvent,
    SnapshotEvent,
    VolumeTickEvent,
)
from tokenview.state.store import StateStore


def _reconciler(*items: dict, max_records: int = 100) -> tuple[UpdateReconciler, StateStore]:
    store = StateStore(max_records=max_records)
    reconciler = UpdateReconciler(store)
    if items:
        reconciler.apply(SnapshotEvent(items=items))
    return reconciler, store


def _get(store: StateStore, address: str) -> TokenRecord:
    record = store.get(address)
    assert record is not None
    return record


def test_snapshot_installs_records_with_defaults() -> None:
    _, store = _reconciler({"token_address": "A"}, {"token_address": "B", "token_name": "Bee", "price_sol": "0.5"})

    a = _get(store, "A")
    b = _get(store, "B")
    assert store.addresses() == ("A", "B")
    assert (a.name, a.ticker, a.protocol, a.price_sol) == ("Unknown", "N/A", "N/A", 0.0)
    assert (b.name, b.price_sol) == ("Bee", 0.5)


def test_malformed_snapshot_installs_empty_view() -> None:
    reconciler, store = _reconciler({"token_address": "A"})

    result = reconciler.apply(SnapshotEvent(items=None))

    assert len(store) == 0
    assert result.kind == EventKind.SNAPSHOT
    assert result.changed is True


def test_snapshot_skips_malformed_items_individually() -> None:
    reconciler, store = _reconciler()

    result = reconciler.apply(
        SnapshotEvent(items=({"token_address": "A"}, "garbage", {"token_name": "no address"}, {"token_address": "B"}))
    )

    assert store.addresses() == ("A", "B")
    assert result.applied == 2
    assert result.skipped == 2


def test_stale_http_snapshot_is_discarded() -> None:
    reconciler, store = _reconciler()

    reconciler.apply(SnapshotEvent(items=({"token_address": "NEW"},), sequence=2, source=IngestionSource.HTTP))
    result = reconciler.apply(SnapshotEvent(items=({"token_address": "OLD"},), sequence=1, source=IngestionSource.HTTP))

    assert result.stale is True
    assert result.changed is False
    assert store.addresses() == ("NEW",)
    assert reconciler.last_sequence == 2


def test_unsequenced_snapshot_always_applies() -> None:
    reconciler, store = _reconciler()
    reconciler.apply(SnapshotEvent(items=({"token_address": "HTTP"},), sequence=5, source=IngestionSource.HTTP))

    reconciler.apply(SnapshotEvent(items=({"token_address": "PUSH"},)))

    assert store.addresses() == ("PUSH",)
    assert reconciler.last_sequence == 5


def test_bulk_patch_is_update_only_and_highlights_applied() -> None:
    reconciler, store = _reconciler({"token_address": "A", "volume_sol": 5})

    result = reconciler.apply(
        BulkPatchEvent(items=({"token_address": "A", "price_sol": 2}, {"token_address": "UNKNOWN", "price_sol": 1}))
    )

    assert store.addresses() == ("A",)
    assert _get(store, "A").price_sol == 2
    assert _get(store, "A").volume_sol == 5
    assert result.applied == 1
    assert result.skipped == 0
    assert result.highlighted == ("A",)


def test_bulk_patch_last_write_wins_within_batch() -> None:
    reconciler, store = _reconciler({"token_address": "A", "price_sol": 1, "volume_sol": 10, "liquidity_sol": 3})

    result = reconciler.apply(
        BulkPatchEvent(
            items=(
                {"token_address": "A", "price_sol": 2, "volume_sol": 20},
                {"token_address": "A", "price_sol": 3},
            )
        )
    )

    a = _get(store, "A")
    assert a.price_sol == 3
    assert a.volume_sol == 20
    assert a.liquidity_sol == 3
    assert result.applied == 2
    assert result.highlighted == ("A",)


def test_bulk_patch_malformed_item_does_not_abort_batch() -> None:
    reconciler, store = _reconciler({"token_address": "A"}, {"token_address": "B"})

    result = reconciler.apply(
        BulkPatchEvent(
            items=(
                {"token_address": "A", "price_sol": 1},
                42,
                {"price_sol": 7},
                {"token_address": "B", "price_sol": 2},
            )
        )
    )

    assert _get(store, "A").price_sol == 1
    assert _get(store, "B").price_sol == 2
    assert result.applied == 2
    assert result.skipped == 2


def test_patch_with_unparseable_value_leaves_field_untouched() -> None:
    reconciler, store = _reconciler({"token_address": "A", "price_sol": 1.5})

    reconciler.apply(BulkPatchEvent(items=({"token_address": "A", "price_sol": "n/a", "volume_sol": 4},)))

    a = _get(store, "A")
    assert a.price_sol == 1.5
    assert a.volume_sol == 4


def test_price_tick_touches_only_price_fields() -> None:
    reconciler, store = _reconciler(
        {"token_address": "A", "price_sol": 1, "price_24hr_change": 1, "volume_sol": 9, "token_name": "Alpha"}
    )

    result = reconciler.apply(
        PriceTickEvent(items=({"address": "A", "price_sol": 2, "price_change_percent": -4, "volume_sol": 0},))
    )

    a = _get(store, "A")
    assert (a.price_sol, a.price_change_percent) == (2, -4)
    assert a.volume_sol == 9
    assert a.name == "Alpha"
    assert result.highlighted == ("A",)


def test_volume_tick_touches_only_volume() -> None:
    reconciler, store = _reconciler({"token_address": "A", "price_sol": 1, "volume_sol": 9})

    reconciler.apply(VolumeTickEvent(items=({"address": "A", "volume_sol": 50, "price_sol": 0},)))

    a = _get(store, "A")
    assert a.volume_sol == 50
    assert a.price_sol == 1


def test_ticks_never_create_tokens() -> None:
    reconciler, store = _reconciler({"token_address": "A"})

    price = reconciler.apply(PriceTickEvent(items=({"address": "Z", "price_sol": 2},)))
    volume = reconciler.apply(VolumeTickEvent(items=({"address": "Z", "volume_sol": 2},)))

    assert store.addresses() == ("A",)
    assert price.applied == 0 and volume.applied == 0
    assert price.highlighted == () and volume.highlighted == ()


def test_new_token_inserted_at_front_with_eviction() -> None:
    reconciler, store = _reconciler({"token_address": "A"}, {"token_address": "B"}, max_records=2)

    result = reconciler.apply(NewTokenEvent(item={"token_address": "C", "token_ticker": "CC"}))

    assert store.addresses() == ("C", "A")
    assert _get(store, "C").ticker == "CC"
    assert _get(store, "C").name == "Unknown"
    assert result.highlighted == ("C",)


def test_malformed_new_token_is_skipped() -> None:
    reconciler, store = _reconciler({"token_address": "A"})

    result = reconciler.apply(NewTokenEvent(item=["not", "an", "object"]))

    assert store.addresses() == ("A",)
    assert result.applied == 0
    assert result.skipped == 1


def test_highlight_callback_receives_addresses_and_failures_are_contained() -> None:
    seen: list[str] = []

    def _on_highlight(address: str) -> None:
        seen.append(address)
        raise RuntimeError("render failed")

    store = StateStore()
    reconciler = UpdateReconciler(store, on_highlight=_on_highlight)
    reconciler.apply(SnapshotEvent(items=({"token_address": "A"}, {"token_address": "B"})))

    result = reconciler.apply(BulkPatchEvent(items=({"token_address": "A"}, {"token_address": "B"})))

    assert seen == ["A", "B"]
    assert result.applied == 2
