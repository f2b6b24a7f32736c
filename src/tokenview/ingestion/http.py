"""Bulk-fetch ingestion + envelope unwrapping."""

from __future__ import annotations

import logging

from tokenview._constants import TOKENS_ENDPOINT
from tokenview._logfmt import summarize_for_log
from tokenview._transport import Transport
from tokenview.exceptions import TokenViewPayloadError
from tokenview.ingestion.normalize import unwrap_token_list
from tokenview.state.events import IngestionSource, SnapshotEvent

_logger = logging.getLogger(__name__)


def build_token_query(
    *,
    limit: int,
    sort_by: str | None = None,
    order: str | None = None,
    period: str | None = None,
) -> dict[str, str]:
    """Query parameters for the token list endpoint; unset axes are omitted."""
    params: dict[str, str] = {"limit": str(limit)}
    if sort_by:
        params["sortBy"] = sort_by
    if order:
        params["order"] = order
    if period:
        params["period"] = period
    return params


async def fetch_token_snapshot(
    transport: Transport,
    *,
    sequence: int,
    limit: int,
    sort_by: str | None = None,
    order: str | None = None,
    period: str | None = None,
) -> SnapshotEvent:
    """Fetch the token list and wrap it as a sequenced snapshot event.

    Raises
    ------
    TokenViewTransportError
        From the transport.
    TokenViewPayloadError
        When no token array can be located in the response envelope.
    """
    params = build_token_query(limit=limit, sort_by=sort_by, order=order, period=period)
    body = await transport.get_json(TOKENS_ENDPOINT, params)

    items = unwrap_token_list(body)
    if items is None:
        raise TokenViewPayloadError(f"No token list in response: {summarize_for_log(body)!r}")

    _logger.debug("Fetched %d tokens (fetch #%d): %r", len(items), sequence, summarize_for_log(items))
    return SnapshotEvent(items=tuple(items), sequence=sequence, source=IngestionSource.HTTP)
