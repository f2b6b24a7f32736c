"""Custom exception hierarchy for tokenview."""

from __future__ import annotations


class TokenViewError(Exception):
    """Base exception for all tokenview errors."""


class TokenViewConfigError(TokenViewError):
    """Invalid or missing configuration."""


class TokenViewTransportError(TokenViewError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class TokenViewPayloadError(TokenViewError):
    """A response or event body did not have a usable shape.

    Raised at the ingestion boundary only.  The reconciliation engine
    never raises it; malformed items are skipped there instead.
    """
