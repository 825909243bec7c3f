"""JSON-RPC client that issues requests over a transport and awaits replies."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any

from localrpc.rpc.contracts import (
    METHOD_NOT_FOUND,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    RPCError,
    parse_message,
)
from localrpc.rpc.peer import RPCPeer

if TYPE_CHECKING:
    from collections.abc import Callable

    from localrpc.rpc.contracts import Params, RequestId
    from localrpc.transport.base import Message

    NotificationHandler = Callable[[JSONRPCNotification], Any]

logger = logging.getLogger(__name__)


class RPCClient(RPCPeer):
    """Sends JSON-RPC requests and resolves them as responses arrive.

    Usage::

        client = RPCClient("calc-client", timeout=10.0)
        await client.connect(client_transport)
        result = await client.request("add", {"a": 1, "b": 2})
        await client.close()

    Requests may be issued concurrently; each resolves from the response that
    carries its id.
    """

    def __init__(self, name: str = "rpc-client", *, timeout: float | None = None) -> None:
        super().__init__(name)
        self._timeout = timeout
        self._next_id = 0
        self._pending: dict[RequestId, asyncio.Future[Any]] = {}
        self._notification_handlers: dict[str, NotificationHandler] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def set_notification_handler(self, method: str, handler: NotificationHandler) -> None:
        """Route notifications named *method* to *handler* (sync or async)."""
        self._notification_handlers[method] = handler

    def remove_notification_handler(self, method: str) -> None:
        self._notification_handlers.pop(method, None)

    async def request(
        self,
        method: str,
        params: Params | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a request and return its result.

        Args:
            method: Remote method name.
            params: Method parameters.
            timeout: Per-request override of the client default timeout.

        Raises:
            ConnectionError: If the client is not connected or closes first.
            RPCError: If the server answers with an error.
            TimeoutError: If no response arrives in time.
        """
        transport = self._require_transport()
        self._next_id += 1
        request = JSONRPCRequest(id=self._next_id, method=method, params=params)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future

        effective_timeout = self._timeout if timeout is None else timeout
        try:
            await transport.send(request.to_message())
            if effective_timeout is None:
                return await future
            return await asyncio.wait_for(future, timeout=effective_timeout)
        finally:
            self._pending.pop(request.id, None)

    async def close(self) -> None:
        """Fail outstanding requests and close the transport."""
        self._fail_pending("Client closed")
        await super().close()

    def _on_message(self, message: Message) -> None:
        try:
            parsed = parse_message(message)
        except RPCError as exc:
            logger.warning("%s dropping invalid message: %s", self.name, exc)
            return

        if isinstance(parsed, JSONRPCResponse):
            self._resolve(parsed)
        elif isinstance(parsed, JSONRPCNotification):
            self._notify_handler(parsed)
        else:
            error = RPCError(f"Method not found: {parsed.method}", METHOD_NOT_FOUND)
            self._spawn(self._send_quietly(JSONRPCResponse.failure(parsed.id, error).to_message()))

    def _on_close(self) -> None:
        super()._on_close()
        self._fail_pending("Transport closed")

    def _resolve(self, response: JSONRPCResponse) -> None:
        future = self._pending.get(response.id) if response.id is not None else None
        if future is None or future.done():
            logger.debug("%s ignoring response for unknown id %s", self.name, response.id)
            return
        try:
            future.set_result(response.raise_for_error())
        except RPCError as exc:
            future.set_exception(exc)

    def _notify_handler(self, notification: JSONRPCNotification) -> None:
        handler = self._notification_handlers.get(notification.method)
        if handler is None:
            logger.debug("%s has no handler for %s", self.name, notification.method)
            return
        result = handler(notification)
        if inspect.isawaitable(result):
            self._spawn(result)

    def _fail_pending(self, reason: str) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(ConnectionError(reason))


__all__ = ["RPCClient"]
