"""Base model for token payloads.

Every token model inherits from :class:`TokenViewBaseModel` which provides:

* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``"--"``, NaN, ``None``) so the field default is used.
* A read-only ``raw`` mapping that captures the wire payload.

Wire payloads arrive in more than one historical naming scheme
(``token_address`` vs ``address``, ``volume_24h`` vs ``volume_sol``); each
model declares ``AliasChoices`` for the shapes it accepts.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

# Placeholder strings the server uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


def freeze(value: Any) -> Any:
    """Deep read-only copy: mappings become proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`, for serialization."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


class TokenViewBaseModel(BaseModel):
    """Base for token payload models.

    Handles:
    * placeholder values dropped so the field default is used instead
    * the wire payload stashed in ``raw`` as a deep read-only copy, so a
      reader holding a record cannot reach back into the store
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: Mapping[str, Any] = Field(default_factory=dict, repr=False, validate_default=True)
    """Wire payload (read-only)."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        """Strip placeholder values from *values*."""
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip placeholder values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = TokenViewBaseModel._clean_dict(original)

        # Only auto-stash raw when not explicitly provided.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned

    @field_validator("raw", mode="after")
    @classmethod
    def _freeze_raw(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze(value)

    @field_serializer("raw")
    def _serialize_raw(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return thaw(value)
