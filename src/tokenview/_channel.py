"""Internal push-channel runtime (Socket.IO)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import socketio

from tokenview._constants import STREAM_EVENTS

_logger = logging.getLogger(__name__)


class PushChannel:
    """Thin wrapper around :class:`socketio.AsyncClient`.

    Connection and reconnection are handled by python-socketio.  This
    class only wires the named token events to a single ``on_event``
    callback and reports connection state changes.  Callback failures are
    logged so one bad message never stops the listener.
    """

    def __init__(
        self,
        url: str,
        *,
        on_event: Callable[[str, Any], None],
        on_connect: Callable[[], None] | None = None,
        on_disconnect: Callable[[], None] | None = None,
        client: socketio.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._on_event = on_event
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self._client = client if client is not None else socketio.AsyncClient(reconnection=True)
        self._register_handlers()

    @property
    def is_connected(self) -> bool:
        return bool(self._client.connected)

    def _register_handlers(self) -> None:
        self._client.on("connect", self._handle_connect)
        self._client.on("disconnect", self._handle_disconnect)
        for name in STREAM_EVENTS:
            self._client.on(name, self._make_event_handler(name))

    def _make_event_handler(self, name: str) -> Callable[[Any], None]:
        def _handler(payload: Any = None) -> None:
            try:
                self._on_event(name, payload)
            except Exception:
                _logger.warning("Channel event %s handler failed", name, exc_info=True)

        return _handler

    def _handle_connect(self) -> None:
        _logger.info("Push channel connected to %s", self._url)
        if self._on_connect is not None:
            try:
                self._on_connect()
            except Exception:
                _logger.debug("on_connect callback failed", exc_info=True)

    def _handle_disconnect(self, *_args: Any) -> None:
        _logger.info("Push channel disconnected")
        if self._on_disconnect is not None:
            try:
                self._on_disconnect()
            except Exception:
                _logger.debug("on_disconnect callback failed", exc_info=True)

    async def start(self) -> None:
        await self._client.connect(self._url)

    async def stop(self) -> None:
        if self._client.connected:
            await self._client.disconnect()
