"""Deterministic in-memory token store.

This is the only component holding token records.  It is mutated solely
through its own operations and hands out immutable snapshots.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Iterable, Mapping
from typing import Any

from tokenview._constants import MAX_TOKENS
from tokenview.models.token import TokenPatch, TokenRecord

_logger = logging.getLogger(__name__)


class StateStore:
    """Ordered, address-keyed collection of :class:`TokenRecord`.

    Iteration order is insertion order with the most recent insertion
    first.  A snapshot installs its items in the given order; a new token
    goes to the front.  That order drives FIFO eviction and is independent
    of any display sort.

    Records are frozen models; a patch replaces the stored record with a
    merged copy, so a snapshot taken earlier never changes underneath its
    reader.
    """

    def __init__(self, *, max_records: int = MAX_TOKENS) -> None:
        if max_records < 1:
            raise ValueError(f"max_records must be >= 1, got {max_records}")
        self._max_records = max_records
        self._records: OrderedDict[str, TokenRecord] = OrderedDict()

    @property
    def max_records(self) -> int:
        return self._max_records

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, address: object) -> bool:
        return address in self._records

    def get(self, address: str) -> TokenRecord | None:
        return self._records.get(address)

    def addresses(self) -> tuple[str, ...]:
        return tuple(self._records)

    def replace_all(self, records: Iterable[TokenRecord]) -> None:
        """Discard the collection and install *records* in the given order.

        A duplicate address keeps the position of its first occurrence and
        the values of its last.
        """
        installed: OrderedDict[str, TokenRecord] = OrderedDict()
        for record in records:
            installed[record.address] = record
        self._records = installed

    def upsert_patch(self, address: str, patch: TokenPatch | Mapping[str, Any]) -> bool:
        """Merge *patch* into the record for *address*.

        Only fields present in the patch are overwritten.  Returns ``False``
        without mutating anything when *address* is not held.
        """
        current = self._records.get(address)
        if current is None:
            return False
        if not isinstance(patch, TokenPatch):
            patch = TokenPatch.model_validate({**patch, "address": address})
        self._records[address] = current.merged(patch.changes())
        return True

    def insert_new(self, record: TokenRecord) -> TokenRecord | None:
        """Insert *record* at the front, evicting the oldest on overflow.

        Returns the evicted record, if any.  Re-inserting a held address
        moves it to the front with the new values.
        """
        self._records.pop(record.address, None)
        self._records[record.address] = record
        self._records.move_to_end(record.address, last=False)

        if len(self._records) <= self._max_records:
            return None
        _, evicted = self._records.popitem(last=True)
        _logger.debug("Evicted %s (store bound %d)", evicted.address, self._max_records)
        return evicted

    def snapshot(self) -> tuple[TokenRecord, ...]:
        """Point-in-time view of the collection in insertion order."""
        return tuple(self._records.values())

    def clear(self) -> None:
        self._records.clear()
