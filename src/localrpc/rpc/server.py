"""JSON-RPC server that answers requests arriving on a transport."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from localrpc.rpc.contracts import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
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

    MethodHandler = Callable[..., Any]

logger = logging.getLogger(__name__)

_CTX_PARAM = "ctx"


class RequestContext:
    """Passed to handlers that declare a ``ctx`` parameter."""

    def __init__(self, server: RPCServer, request_id: RequestId | None) -> None:
        self._server = server
        self.request_id = request_id

    async def send_notification(self, method: str, params: Params | None = None) -> None:
        await self._server.notify(method, params)


class RPCServer(RPCPeer):
    """Dispatches JSON-RPC requests to registered method handlers.

    Usage::

        server = RPCServer("calc")

        @server.method("add")
        async def add(a: int, b: int) -> int:
            return a + b

        await server.connect(server_transport)
    """

    def __init__(self, name: str = "rpc-server") -> None:
        super().__init__(name)
        self._methods: dict[str, MethodHandler] = {}

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(self._methods)

    def register(self, name: str, handler: MethodHandler) -> None:
        """Register a method handler."""
        self._methods[name] = handler

    def method(self, name: str | None = None) -> Callable[[MethodHandler], MethodHandler]:
        """Decorator form of ``register``; defaults to the function name."""

        def decorator(handler: MethodHandler) -> MethodHandler:
            self.register(name or handler.__name__, handler)
            return handler

        return decorator

    async def call(self, data: Message) -> Message | None:
        """Dispatch one raw JSON-RPC message and return the response dict.

        Returns ``None`` for notifications and for stray responses.
        """
        request_id = data.get("id") if isinstance(data, dict) else None
        try:
            message = parse_message(data)
        except RPCError as exc:
            return JSONRPCResponse.failure(_coerce_id(request_id), exc).to_message()

        if isinstance(message, JSONRPCResponse):
            logger.debug("%s ignoring response for id %s", self.name, message.id)
            return None

        is_notification = isinstance(message, JSONRPCNotification)
        call_id = None if is_notification else message.id

        try:
            result = await self._invoke(message, call_id)
        except RPCError as exc:
            if is_notification:
                logger.warning("Notification %s failed: %s", message.method, exc)
                return None
            return JSONRPCResponse.failure(call_id, exc).to_message()
        except Exception as exc:
            logger.exception("Unhandled error in method %s", message.method)
            if is_notification:
                return None
            return JSONRPCResponse.failure(call_id, RPCError(str(exc), INTERNAL_ERROR)).to_message()

        if is_notification:
            return None
        if isinstance(result, BaseModel):
            result = result.model_dump(mode="json")
        return JSONRPCResponse.success(call_id, result).to_message()

    async def _invoke(
        self,
        message: JSONRPCRequest | JSONRPCNotification,
        call_id: RequestId | None,
    ) -> Any:
        handler = self._methods.get(message.method)
        if handler is None:
            raise RPCError(f"Method not found: {message.method}", METHOD_NOT_FOUND)

        sig = inspect.signature(handler)
        params = message.params if message.params is not None else {}
        if isinstance(params, list):
            # Convert positional to keyword args
            names = [p for p in sig.parameters if p not in ("self", _CTX_PARAM)]
            if len(params) > len(names):
                msg = (
                    f"Invalid params for {message.method}: expected at most {len(names)} "
                    f"positional params, got {len(params)}"
                )
                raise RPCError(msg, INVALID_PARAMS)
            params = dict(zip(names, params, strict=False))
        kwargs = dict(params)
        if _CTX_PARAM in sig.parameters:
            kwargs[_CTX_PARAM] = RequestContext(self, call_id)

        try:
            bound = sig.bind(**kwargs)
        except TypeError as exc:
            raise RPCError(f"Invalid params for {message.method}: {exc}", INVALID_PARAMS) from exc

        result = handler(*bound.args, **bound.kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _on_message(self, message: Message) -> None:
        self._spawn(self._handle(message))

    async def _handle(self, message: Message) -> None:
        response = await self.call(message)
        if response is not None:
            await self._send_quietly(response)


def _coerce_id(value: Any) -> RequestId | None:
    return value if isinstance(value, int | str) else None


__all__ = ["RPCServer", "RequestContext"]
