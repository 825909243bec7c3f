"""Transport ownership shared by ``RPCClient`` and ``RPCServer``."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from localrpc.errors import TransportError
from localrpc.rpc.contracts import JSONRPCNotification

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from localrpc.rpc.contracts import Params
    from localrpc.transport.base import Message, Transport

logger = logging.getLogger(__name__)


class RPCPeer:
    """One side of a JSON-RPC conversation bound to a single transport."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._transport: Transport | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def transport(self) -> Transport | None:
        return self._transport

    @property
    def is_connected(self) -> bool:
        return self._transport is not None

    async def connect(self, transport: Transport) -> None:
        """Attach to *transport* and start it.

        Raises:
            RuntimeError: If this peer is already connected.
        """
        if self._transport is not None:
            msg = f"{self.name} is already connected"
            raise RuntimeError(msg)

        previous = (transport.on_message, transport.on_close, transport.on_error)
        transport.on_message = self._on_message
        transport.on_close = self._on_close
        transport.on_error = self._on_error
        try:
            await transport.start()
        except Exception:
            transport.on_message, transport.on_close, transport.on_error = previous
            raise
        self._transport = transport
        logger.debug("%s connected via %s", self.name, transport.session_id)

    async def notify(self, method: str, params: Params | None = None) -> None:
        """Send a notification (no response expected)."""
        notification = JSONRPCNotification(method=method, params=params)
        await self._require_transport().send(notification.to_message())

    async def close(self) -> None:
        """Wait for in-flight handlers, then close the transport."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._transport is not None:
            await self._transport.close()

    def _require_transport(self) -> Transport:
        if self._transport is None:
            msg = f"{self.name} is not connected; call connect() first"
            raise ConnectionError(msg)
        return self._transport

    def _spawn(self, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled error in %s background task", self.name, exc_info=exc)

    async def _send_quietly(self, message: Message) -> None:
        """Send from a background task, where there is no caller to raise to."""
        try:
            await self._require_transport().send(message)
        except (ConnectionError, TransportError) as exc:
            logger.warning("%s could not send message: %s", self.name, exc)

    def _on_message(self, message: Message) -> None:
        raise NotImplementedError

    def _on_close(self) -> None:
        logger.debug("%s transport closed", self.name)

    def _on_error(self, error: Exception) -> None:
        logger.error("Transport error in %s", self.name, exc_info=error)


__all__ = ["RPCPeer"]
