"""Normalization helpers.

Centralizes defensive parsing and placeholder handling.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def non_negative_or_zero(value: Any) -> float | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return 0.0 if parsed < 0 else parsed


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def as_item_list(data: Any) -> list[Any]:
    """Return *data* as a list: sequences as-is, a single object wrapped.

    Tick events carry either one object or a list of them.
    """

    if data is None:
        return []
    if is_sequence(data):
        return list(data)
    return [data]


def unwrap_token_list(body: Any) -> list[Any] | None:
    """Locate the token array inside a bulk-fetch response envelope.

    Accepted shapes:

    - a bare list
    - ``{"data": [...]}``
    - ``{"success": true, "data": {"data": [...], "pagination": {...}}}``

    The envelope is searched at most one level deep; the first array-valued
    field wins.  Returns ``None`` when no array is found.
    """

    if is_sequence(body):
        return list(body)
    if not isinstance(body, Mapping):
        return None

    # Prefer the conventional ``data`` key before scanning field order.
    candidates: list[Any] = []
    if "data" in body:
        candidates.append(body["data"])
    candidates.extend(v for k, v in body.items() if k != "data")

    for value in candidates:
        if is_sequence(value):
            return list(value)

    for value in candidates:
        if isinstance(value, Mapping):
            nested = value.get("data")
            if is_sequence(nested):
                return list(nested)
            for inner in value.values():
                if is_sequence(inner):
                    return list(inner)
    return None
