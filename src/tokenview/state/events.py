"""Normalized ingestion events.

All ingestion paths (bulk fetch, push channel) convert their inputs into
one of these events.  Only the reconciler is allowed to apply them to the
state store.

Items are kept as received (after envelope unwrapping and tick
normalization); each one is validated individually when applied so a
single malformed item cannot poison its siblings.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class IngestionSource(StrEnum):
    HTTP = "http"
    STREAM = "stream"


class EventKind(StrEnum):
    SNAPSHOT = "snapshot"
    BULK_PATCH = "bulk_patch"
    PRICE_TICK = "price_tick"
    VOLUME_TICK = "volume_tick"
    NEW_TOKEN = "new_token"


class _BaseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: IngestionSource = IngestionSource.STREAM


class SnapshotEvent(_BaseEvent):
    """Full replacement of the collection.

    ``items`` is ``None`` when the payload was not a sequence; the
    reconciler installs an empty view in that case.
    """

    kind: Literal[EventKind.SNAPSHOT] = EventKind.SNAPSHOT
    items: tuple[Any, ...] | None = None
    sequence: int | None = Field(
        default=None,
        description="Monotonic fetch sequence number for HTTP snapshots.",
    )


class BulkPatchEvent(_BaseEvent):
    """Update-only patches for existing tokens, applied in order."""

    kind: Literal[EventKind.BULK_PATCH] = EventKind.BULK_PATCH
    items: tuple[Any, ...] = ()


class PriceTickEvent(_BaseEvent):
    """Price and change-percent patches; never creates tokens."""

    kind: Literal[EventKind.PRICE_TICK] = EventKind.PRICE_TICK
    items: tuple[Any, ...] = ()


class VolumeTickEvent(_BaseEvent):
    """Volume patches; never creates tokens."""

    kind: Literal[EventKind.VOLUME_TICK] = EventKind.VOLUME_TICK
    items: tuple[Any, ...] = ()


class NewTokenEvent(_BaseEvent):
    """A previously unseen token to insert at the front of the collection."""

    kind: Literal[EventKind.NEW_TOKEN] = EventKind.NEW_TOKEN
    item: Any = None


StreamEvent = Annotated[
    SnapshotEvent | BulkPatchEvent | PriceTickEvent | VolumeTickEvent | NewTokenEvent,
    Field(discriminator="kind"),
]
