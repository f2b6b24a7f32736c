"""Data models for token payloads."""

from tokenview.models._base import TokenViewBaseModel
from tokenview.models.token import (
    DEFAULT_NAME,
    DEFAULT_PROTOCOL,
    DEFAULT_TICKER,
    PATCHABLE_FIELDS,
    TokenPatch,
    TokenRecord,
)

__all__ = [
    "DEFAULT_NAME",
    "DEFAULT_PROTOCOL",
    "DEFAULT_TICKER",
    "PATCHABLE_FIELDS",
    "TokenPatch",
    "TokenRecord",
    "TokenViewBaseModel",
]
