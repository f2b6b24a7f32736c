"""Token record and partial-update models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from tokenview.ingestion.normalize import non_negative_or_zero, safe_float, safe_str
from tokenview.models._base import TokenViewBaseModel, freeze

DEFAULT_NAME = "Unknown"
DEFAULT_TICKER = "N/A"
DEFAULT_PROTOCOL = "N/A"

_ADDRESS = AliasChoices("address", "token_address", "tokenAddress")
_NAME = AliasChoices("name", "token_name", "tokenName")
_TICKER = AliasChoices("ticker", "token_ticker", "tokenTicker", "symbol")
_PROTOCOL = AliasChoices("protocol")
_PRICE = AliasChoices("price_sol", "priceSol")
_PRICE_CHANGE = AliasChoices(
    "price_change_percent",
    "priceChangePercent",
    "price_24hr_change",
    "price_change_24h",
)
_VOLUME = AliasChoices("volume_sol", "volumeSol", "volume_24h")
_LIQUIDITY = AliasChoices("liquidity_sol", "liquiditySol", "liquidity")

#: Fields a patch may carry; ``address`` and ``raw`` are never patched.
PATCHABLE_FIELDS: tuple[str, ...] = (
    "name",
    "ticker",
    "protocol",
    "price_sol",
    "price_change_percent",
    "volume_sol",
    "liquidity_sol",
)

# Wire keys that may carry each patchable field.
_WIRE_KEYS: dict[str, frozenset[str]] = {
    "name": frozenset(_NAME.choices),
    "ticker": frozenset(_TICKER.choices),
    "protocol": frozenset(_PROTOCOL.choices),
    "price_sol": frozenset(_PRICE.choices),
    "price_change_percent": frozenset(_PRICE_CHANGE.choices),
    "volume_sol": frozenset(_VOLUME.choices),
    "liquidity_sol": frozenset(_LIQUIDITY.choices),
}


def _text(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return safe_str(value)


def _address(value: Any) -> str:
    text = _text(value)
    if text is None:
        raise ValueError("address must be a non-empty string")
    return text


class TokenRecord(TokenViewBaseModel):
    """A tradable token as held by the state store.

    Every field except ``address`` is optional on the wire and normalized
    to a default here, so the store never holds a partially-populated
    record.

    Parameters
    ----------
    address : str
        Stable identity of the token.  Never reassigned.
    name, ticker, protocol : str
        Descriptive strings; ``"Unknown"`` / ``"N/A"`` when absent.
    price_sol : float
        Price in SOL, non-negative.
    price_change_percent : float
        Signed price change in percentage points.
    volume_sol, liquidity_sol : float
        Non-negative volume and liquidity in SOL.
    raw : Mapping
        Read-only wire payload, with applied patches folded in.
    """

    address: str = Field(..., validation_alias=_ADDRESS)
    name: str = Field(default=DEFAULT_NAME, validation_alias=_NAME)
    ticker: str = Field(default=DEFAULT_TICKER, validation_alias=_TICKER)
    protocol: str = Field(default=DEFAULT_PROTOCOL, validation_alias=_PROTOCOL)
    price_sol: float = Field(default=0.0, validation_alias=_PRICE)
    price_change_percent: float = Field(default=0.0, validation_alias=_PRICE_CHANGE)
    volume_sol: float = Field(default=0.0, validation_alias=_VOLUME)
    liquidity_sol: float = Field(default=0.0, validation_alias=_LIQUIDITY)

    @field_validator("address", mode="before")
    @classmethod
    def _coerce_address(cls, value: Any) -> str:
        return _address(value)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return _text(value) or DEFAULT_NAME

    @field_validator("ticker", mode="before")
    @classmethod
    def _coerce_ticker(cls, value: Any) -> str:
        return _text(value) or DEFAULT_TICKER

    @field_validator("protocol", mode="before")
    @classmethod
    def _coerce_protocol(cls, value: Any) -> str:
        return _text(value) or DEFAULT_PROTOCOL

    @field_validator("price_sol", "volume_sol", "liquidity_sol", mode="before")
    @classmethod
    def _coerce_non_negative(cls, value: Any) -> float:
        parsed = non_negative_or_zero(value)
        return 0.0 if parsed is None else parsed

    @field_validator("price_change_percent", mode="before")
    @classmethod
    def _coerce_change(cls, value: Any) -> float:
        parsed = safe_float(value)
        return 0.0 if parsed is None else parsed

    def merged(self, changes: dict[str, Any]) -> TokenRecord:
        """Return a copy with *changes* applied over this record.

        Keys not in *changes* keep their current value.  ``raw`` follows
        the merge: every applied field replaces whichever wire key carried
        it, under the field name.
        """
        update = {key: value for key, value in changes.items() if key in PATCHABLE_FIELDS}
        if not update:
            return self
        raw = dict(self.raw)
        for name, value in update.items():
            raw = {key: item for key, item in raw.items() if key not in _WIRE_KEYS[name]}
            raw[name] = value
        return self.model_copy(update={**update, "raw": freeze(raw)})


class TokenPatch(TokenViewBaseModel):
    """A partial update for one token.

    Fields left as ``None`` are not part of the patch.  Unparseable values
    are treated as absent rather than as a reset to the default.
    """

    address: str = Field(..., validation_alias=_ADDRESS)
    name: str | None = Field(default=None, validation_alias=_NAME)
    ticker: str | None = Field(default=None, validation_alias=_TICKER)
    protocol: str | None = Field(default=None, validation_alias=_PROTOCOL)
    price_sol: float | None = Field(default=None, validation_alias=_PRICE)
    price_change_percent: float | None = Field(default=None, validation_alias=_PRICE_CHANGE)
    volume_sol: float | None = Field(default=None, validation_alias=_VOLUME)
    liquidity_sol: float | None = Field(default=None, validation_alias=_LIQUIDITY)

    @field_validator("address", mode="before")
    @classmethod
    def _coerce_address(cls, value: Any) -> str:
        return _address(value)

    @field_validator("name", "ticker", "protocol", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _text(value)

    @field_validator("price_sol", "volume_sol", "liquidity_sol", mode="before")
    @classmethod
    def _coerce_non_negative(cls, value: Any) -> float | None:
        return non_negative_or_zero(value)

    @field_validator("price_change_percent", mode="before")
    @classmethod
    def _coerce_change(cls, value: Any) -> float | None:
        return safe_float(value)

    def changes(self) -> dict[str, Any]:
        """Fields present in this patch, keyed by field name."""
        return self.model_dump(include=set(PATCHABLE_FIELDS), exclude_none=True)
