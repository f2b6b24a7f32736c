"""High-level async driver for the live token view."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from typing import Any

import aiohttp

from tokenview._channel import PushChannel
from tokenview._constants import EVENT_INITIAL_DATA, STREAM_EVENTS
from tokenview._transport import HttpTransport, Transport
from tokenview.config import TokenViewConfig
from tokenview.exceptions import TokenViewError, TokenViewPayloadError, TokenViewTransportError
from tokenview.ingestion.http import fetch_token_snapshot
from tokenview.ingestion.stream import route_event
from tokenview.models.token import TokenRecord
from tokenview.query import Page, SortKey, SortOrder, clamp_page, query, total_pages
from tokenview.reconcile import ReconcileResult, UpdateReconciler
from tokenview.state.events import IngestionSource, SnapshotEvent, StreamEvent
from tokenview.state.store import StateStore
from tokenview.stats import TokenStats, compute_stats

_logger = logging.getLogger(__name__)

_COUNTED_EVENTS = frozenset(STREAM_EVENTS) - {EVENT_INITIAL_DATA}


class TokenFeed:
    """Live token view: bulk snapshots + push-channel updates.

    The feed owns the :class:`StateStore` for one session and is the only
    place events enter it.  Merges never await, so at most one
    reconciliation step runs at a time on the event loop.

    Usage::

        async with TokenFeed(config) as feed:
            await feed.apply_filters(sort_by="volume", order="desc", period="24h")
            page = feed.view()
            stats = feed.stats()

    Parameters
    ----------
    config
        Feed configuration.  Defaults to :class:`TokenViewConfig`.
    session
        Optional externally-owned :class:`aiohttp.ClientSession`.
    transport
        Optional transport replacing the aiohttp one (tests).
    on_highlight
        Called with each address the last event touched.
    on_update
        Called with the :class:`ReconcileResult` of every applied event.
    """

    def __init__(
        self,
        config: TokenViewConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_highlight: Callable[[str], None] | None = None,
        on_update: Callable[[ReconcileResult], None] | None = None,
    ) -> None:
        self._config = config if config is not None else TokenViewConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._store = StateStore(max_records=self._config.max_tokens)
        self._reconciler = UpdateReconciler(self._store, on_highlight=on_highlight)
        self._on_update = on_update
        self._channel: PushChannel | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

        self._update_count = 0
        self._fetch_sequence = 0
        self._sort_by: str | None = None
        self._order: str | None = None
        self._period: str | None = None
        self._page = 1

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TokenFeed:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)

        await self.refresh()
        await self._ensure_channel_started()
        if self._config.refresh_interval > 0:
            self._spawn(self._refresh_loop(self._config.refresh_interval))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for task in list(self._tasks):
            task.cancel()
        for task in list(self._tasks):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()

        channel = self._channel
        self._channel = None
        if channel is not None:
            await channel.stop()

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._store.clear()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> TokenViewConfig:
        return self._config

    @property
    def update_count(self) -> int:
        return self._update_count

    @property
    def page(self) -> int:
        return self._page

    @property
    def filters(self) -> dict[str, str | None]:
        return {"sort_by": self._sort_by, "order": self._order, "period": self._period}

    @property
    def is_connected(self) -> bool:
        return self._channel is not None and self._channel.is_connected

    def records(self) -> tuple[TokenRecord, ...]:
        """Immutable point-in-time view of the held tokens."""
        return self._store.snapshot()

    # ------------------------------------------------------------------
    # Bulk fetch
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TokenViewError("Feed not initialized. Use 'async with TokenFeed(...) as feed:'")
        return self._transport

    async def refresh(self) -> ReconcileResult:
        """Fetch a fresh snapshot with the current filter axes.

        A failed fetch installs an empty snapshot instead of raising.  A
        response that arrives after a newer fetch has been applied is
        discarded.
        """
        transport = self._require_transport()
        self._fetch_sequence += 1
        sequence = self._fetch_sequence

        try:
            event = await fetch_token_snapshot(
                transport,
                sequence=sequence,
                limit=self._config.fetch_limit,
                sort_by=self._sort_by,
                order=self._order,
                period=self._period,
            )
        except (TokenViewTransportError, TokenViewPayloadError):
            _logger.warning("Failed to fetch tokens (fetch #%d)", sequence, exc_info=True)
            event = SnapshotEvent(items=(), sequence=sequence, source=IngestionSource.HTTP)

        return self._apply(event)

    async def apply_filters(
        self,
        *,
        sort_by: SortKey | str | None = None,
        order: SortOrder | str | None = None,
        period: str | None = None,
    ) -> ReconcileResult:
        """Change the server-side sort/period axes, reset to page 1 and refetch."""
        self._sort_by = str(sort_by) if sort_by else None
        self._order = SortOrder(order).value if order else None
        self._period = period or None
        self._page = 1
        return await self.refresh()

    async def _refresh_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh()
            except TokenViewError:
                _logger.debug("Periodic refresh skipped", exc_info=True)

    # ------------------------------------------------------------------
    # Push channel
    # ------------------------------------------------------------------

    async def _ensure_channel_started(self) -> None:
        """Best-effort channel startup (failures must not break the REST flow)."""
        if not self._config.stream_enabled:
            return
        if self._channel is not None and self._channel.is_connected:
            return
        channel = PushChannel(
            self._config.base_url,
            on_event=self.handle_event,
            on_connect=self._on_channel_connect,
        )
        try:
            await channel.start()
        except Exception:
            _logger.warning("Push channel startup failed", exc_info=True)
            return
        self._channel = channel

    def _on_channel_connect(self) -> None:
        # Reconnects may have missed updates; resync from a fresh snapshot.
        if self._transport is not None:
            self._spawn(self.refresh())

    def handle_event(self, name: str, payload: Any) -> ReconcileResult | None:
        """Single intake for named channel messages.

        Every update message (all token events but ``initial_data``) bumps
        the update counter on receipt, even when it carries nothing to
        apply.  Returns ``None`` when the message is not a token event or
        carries nothing to apply.
        """
        if name in _COUNTED_EVENTS:
            self._update_count += 1
        event = route_event(name, payload)
        if event is None:
            return None
        return self._apply(event)

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def view(self, *, sort_by: SortKey | str | None = None, order: SortOrder | str = SortOrder.DESC) -> Page:
        """Current page of the held tokens.

        The stored page number is clamped to the available pages first.
        ``sort_by`` re-derives the order locally without a refetch.
        """
        records = self._store.snapshot()
        pages = total_pages(len(records), self._config.page_size)
        self._page = clamp_page(self._page, pages)
        return query(records, page=self._page, page_size=self._config.page_size, sort_by=sort_by, order=order)

    def set_page(self, page: int) -> int:
        pages = total_pages(len(self._store), self._config.page_size)
        self._page = clamp_page(page, pages)
        return self._page

    def next_page(self) -> int:
        return self.set_page(self._page + 1)

    def prev_page(self) -> int:
        return self.set_page(self._page - 1)

    def stats(self) -> TokenStats:
        return compute_stats(self._store.snapshot(), self._update_count)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(self, event: StreamEvent) -> ReconcileResult:
        result = self._reconciler.apply(event)
        if self._on_update is not None:
            try:
                self._on_update(result)
            except Exception:
                _logger.debug("on_update callback failed", exc_info=True)
        return result

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
