"""Push-channel ingestion.

This module translates named channel messages into normalized events.
Every channel message carries its body under ``data``; tick messages
name their changed values with their own keys (``new_price``,
``change_percent``, ``new_volume``) which are mapped onto token fields
here so the reconciler only sees one patch shape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from tokenview._constants import (
    EVENT_INITIAL_DATA,
    EVENT_NEW_TOKEN,
    EVENT_PRICE_UPDATE,
    EVENT_TOKENS_UPDATED,
    EVENT_VOLUME_SPIKE,
)
from tokenview._logfmt import summarize_for_log
from tokenview.ingestion.normalize import as_item_list, is_sequence
from tokenview.state.events import (
    BulkPatchEvent,
    NewTokenEvent,
    PriceTickEvent,
    SnapshotEvent,
    StreamEvent,
    VolumeTickEvent,
)

_logger = logging.getLogger(__name__)

_ADDRESS_KEYS = ("token_address", "address", "tokenAddress")


def _first(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def _extract_data(payload: Any) -> Any:
    if isinstance(payload, Mapping):
        return payload.get("data")
    return None


def _tick_items(data: Any, fields: dict[str, tuple[str, ...]]) -> tuple[Any, ...]:
    """Reduce tick items to ``address`` plus the mapped changed fields.

    Non-object items are passed through untouched; the reconciler counts
    them as skipped.
    """
    items: list[Any] = []
    for item in as_item_list(data):
        if not isinstance(item, Mapping):
            items.append(item)
            continue
        patch: dict[str, Any] = {"address": _first(item, *_ADDRESS_KEYS)}
        for field_name, keys in fields.items():
            value = _first(item, *keys)
            if value is not None:
                patch[field_name] = value
        items.append(patch)
    return tuple(items)


def _route_initial_data(data: Any) -> StreamEvent:
    if not is_sequence(data):
        return SnapshotEvent(items=None)
    return SnapshotEvent(items=tuple(data))


def _route_tokens_updated(data: Any) -> StreamEvent | None:
    if not is_sequence(data):
        _logger.warning("tokens_updated without a token list: %r", summarize_for_log(data))
        return None
    return BulkPatchEvent(items=tuple(data))


def _route_price_update(data: Any) -> StreamEvent | None:
    if data is None:
        return None
    return PriceTickEvent(
        items=_tick_items(
            data,
            {
                "price_sol": ("new_price", "price_sol"),
                "price_change_percent": ("change_percent", "price_24hr_change", "price_change_24h"),
            },
        )
    )


def _route_volume_spike(data: Any) -> StreamEvent | None:
    if data is None:
        return None
    return VolumeTickEvent(items=_tick_items(data, {"volume_sol": ("new_volume", "volume_sol", "volume_24h")}))


def _route_new_token(data: Any) -> StreamEvent | None:
    if not data:
        return None
    return NewTokenEvent(item=data)


_ROUTES: dict[str, Callable[[Any], StreamEvent | None]] = {
    EVENT_INITIAL_DATA: _route_initial_data,
    EVENT_TOKENS_UPDATED: _route_tokens_updated,
    EVENT_PRICE_UPDATE: _route_price_update,
    EVENT_VOLUME_SPIKE: _route_volume_spike,
    EVENT_NEW_TOKEN: _route_new_token,
}


def route_event(name: str, payload: Any) -> StreamEvent | None:
    """Classify a named channel message into a normalized event.

    Returns ``None`` for unknown event names and for messages that carry
    nothing to apply.
    """
    route = _ROUTES.get(name)
    if route is None:
        _logger.debug("Ignoring unknown channel event %r", name)
        return None

    event = route(_extract_data(payload))
    if event is None:
        _logger.debug("Channel event %s carried no data: %r", name, summarize_for_log(payload))
        return None
    return event
