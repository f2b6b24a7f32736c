"""Apply normalized events to the state store.

Each event kind has its own merge policy:

- snapshot: total replacement (stale HTTP snapshots are discarded)
- bulk patch / price tick / volume tick: update-only, unknown addresses dropped
- new token: insert at the front with FIFO eviction

Nothing here raises for bad input.  A malformed item is logged and skipped
and its siblings still apply, so the event loop keeps running.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from tokenview._logfmt import summarize_for_log
from tokenview.models.token import TokenPatch, TokenRecord
from tokenview.state.events import (
    BulkPatchEvent,
    EventKind,
    NewTokenEvent,
    PriceTickEvent,
    SnapshotEvent,
    StreamEvent,
    VolumeTickEvent,
)
from tokenview.state.policy import should_accept_snapshot
from tokenview.state.store import StateStore

_logger = logging.getLogger(__name__)

# Fields a tick may touch; anything else in the item is ignored.
_TICK_FIELDS: dict[EventKind, tuple[str, ...]] = {
    EventKind.PRICE_TICK: ("price_sol", "price_change_percent"),
    EventKind.VOLUME_TICK: ("volume_sol",),
}


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of applying one event.

    ``highlighted`` lists the addresses the rendering side should flash,
    in application order without duplicates.  It is a side signal only
    and not part of the stored state.
    """

    kind: EventKind
    applied: int = 0
    skipped: int = 0
    stale: bool = False
    highlighted: tuple[str, ...] = field(default_factory=tuple)

    @property
    def changed(self) -> bool:
        return self.applied > 0 or (self.kind == EventKind.SNAPSHOT and not self.stale)


def _parse_record(item: Any) -> TokenRecord | None:
    if not isinstance(item, Mapping):
        _logger.warning("Skipping token item that is not an object: %r", summarize_for_log(item))
        return None
    try:
        return TokenRecord.model_validate(dict(item))
    except ValidationError:
        _logger.warning("Skipping malformed token item: %r", summarize_for_log(item), exc_info=True)
        return None


def _parse_patch(item: Any, fields: tuple[str, ...] | None = None) -> TokenPatch | None:
    if not isinstance(item, Mapping):
        _logger.warning("Skipping patch item that is not an object: %r", summarize_for_log(item))
        return None
    try:
        patch = TokenPatch.model_validate(dict(item))
    except ValidationError:
        _logger.warning("Skipping malformed patch item: %r", summarize_for_log(item), exc_info=True)
        return None
    if fields is None:
        return patch
    return TokenPatch(address=patch.address, raw=patch.raw, **{name: getattr(patch, name) for name in fields})


class UpdateReconciler:
    """Translate events into :class:`StateStore` calls.

    Parameters
    ----------
    store
        The store to mutate.  The reconciler never keeps records itself.
    on_highlight
        Optional callback invoked once per highlighted address.  Failures
        in the callback are logged and ignored.
    """

    def __init__(
        self,
        store: StateStore,
        *,
        on_highlight: Callable[[str], None] | None = None,
    ) -> None:
        self._store = store
        self._on_highlight = on_highlight
        self._last_sequence: int | None = None

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def last_sequence(self) -> int | None:
        """Sequence number of the last applied HTTP snapshot."""
        return self._last_sequence

    def apply(self, event: StreamEvent) -> ReconcileResult:
        """Apply one normalized event and report what happened."""
        if isinstance(event, SnapshotEvent):
            result = self._apply_snapshot(event)
        elif isinstance(event, (BulkPatchEvent, PriceTickEvent, VolumeTickEvent)):
            result = self._apply_patches(event.kind, event.items)
        elif isinstance(event, NewTokenEvent):
            result = self._apply_new_token(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

        self._emit_highlights(result.highlighted)
        return result

    def _apply_snapshot(self, event: SnapshotEvent) -> ReconcileResult:
        if not should_accept_snapshot(
            last_applied_sequence=self._last_sequence,
            incoming_sequence=event.sequence,
        ):
            _logger.debug(
                "Discarding stale %s snapshot #%s (last applied #%s)",
                event.source,
                event.sequence,
                self._last_sequence,
            )
            return ReconcileResult(kind=EventKind.SNAPSHOT, stale=True)

        if event.items is None:
            _logger.warning("Snapshot payload was not a sequence; installing an empty view")
            items: tuple[Any, ...] = ()
        else:
            items = event.items

        records: list[TokenRecord] = []
        skipped = 0
        for item in items:
            record = _parse_record(item)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        self._store.replace_all(records)
        if event.sequence is not None:
            self._last_sequence = event.sequence
        _logger.debug("Installed %s snapshot of %d tokens (%d skipped)", event.source, len(records), skipped)
        return ReconcileResult(kind=EventKind.SNAPSHOT, applied=len(records), skipped=skipped)

    def _apply_patches(self, kind: EventKind, items: tuple[Any, ...]) -> ReconcileResult:
        fields = _TICK_FIELDS.get(kind)
        applied = 0
        skipped = 0
        highlighted: list[str] = []
        for item in items:
            patch = _parse_patch(item, fields)
            if patch is None:
                skipped += 1
                continue
            if not self._store.upsert_patch(patch.address, patch):
                # Update-only: unknown addresses are not an error.
                _logger.debug("Dropping %s for unknown token %s", kind, patch.address)
                continue
            applied += 1
            highlighted.append(patch.address)
        return ReconcileResult(
            kind=kind,
            applied=applied,
            skipped=skipped,
            highlighted=tuple(dict.fromkeys(highlighted)),
        )

    def _apply_new_token(self, event: NewTokenEvent) -> ReconcileResult:
        record = _parse_record(event.item)
        if record is None:
            return ReconcileResult(kind=EventKind.NEW_TOKEN, skipped=1)
        self._store.insert_new(record)
        return ReconcileResult(kind=EventKind.NEW_TOKEN, applied=1, highlighted=(record.address,))

    def _emit_highlights(self, addresses: tuple[str, ...]) -> None:
        if self._on_highlight is None:
            return
        for address in addresses:
            try:
                self._on_highlight(address)
            except Exception:
                _logger.debug("on_highlight callback failed for %s", address, exc_info=True)
