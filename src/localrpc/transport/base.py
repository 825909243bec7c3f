"""Shared transport contract and endpoint lifecycle for local transports."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import uuid4

from localrpc.errors import AlreadyStartedError, NotConnectedError

if TYPE_CHECKING:
    from collections.abc import Callable

    from localrpc.transport.registry import TransportRegistry

logger = logging.getLogger(__name__)

type Message = dict[str, Any]


def new_session_id() -> str:
    return uuid4().hex


class TransportState(StrEnum):
    CREATED = "created"
    STARTED = "started"
    CLOSED = "closed"


@runtime_checkable
class Transport(Protocol):
    """What an RPC client or server needs from a transport."""

    on_message: Callable[[Message], None] | None
    on_close: Callable[[], None] | None
    on_error: Callable[[Exception], None] | None

    @property
    def session_id(self) -> str: ...

    async def start(self) -> None: ...

    async def send(self, message: Message) -> None: ...

    async def close(self) -> None: ...


class LocalEndpoint:
    """Registry-backed endpoint with a ``created -> started -> closed`` lifecycle.

    The endpoint registers itself on construction so that peers can address
    it as soon as they hold its session id. ``close()`` unregisters it.
    """

    _role = "LocalEndpoint"

    def __init__(self, *, registry: TransportRegistry, session_id: str | None = None) -> None:
        self._registry = registry
        self._session_id = session_id or new_session_id()
        self._state = TransportState.CREATED

        self.on_message: Callable[[Message], None] | None = None
        self.on_close: Callable[[], None] | None = None
        self.on_error: Callable[[Exception], None] | None = None

        self._registry.register(self._session_id, self._receive)

    async def __aenter__(self) -> LocalEndpoint:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} session_id={self._session_id} state={self._state}>"

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def registry(self) -> TransportRegistry:
        return self._registry

    @property
    def state(self) -> TransportState:
        return self._state

    @property
    def is_started(self) -> bool:
        return self._state is TransportState.STARTED

    @property
    def is_closed(self) -> bool:
        return self._state is TransportState.CLOSED

    async def start(self) -> None:
        self._mark_started()

    async def close(self) -> None:
        """Close the transport. Only the first call on a started endpoint does anything."""
        if self._state is not TransportState.STARTED:
            return
        self._registry.unregister(self._session_id)
        self._state = TransportState.CLOSED
        logger.debug("%s %s closed", self._role, self._session_id)
        if self.on_close is not None:
            self.on_close()

    def _ensure_created(self) -> None:
        if self._state is not TransportState.CREATED:
            raise AlreadyStartedError(self._role)

    def _mark_started(self) -> None:
        self._ensure_created()
        self._state = TransportState.STARTED
        logger.debug("%s %s started", self._role, self._session_id)

    def _require_started(self) -> None:
        if self._state is not TransportState.STARTED:
            raise NotConnectedError()

    def _receive(self, message: Message) -> None:
        """Registry callback: hand a delivered message to the owner."""
        if self.on_message is None:
            return
        try:
            self.on_message(message)
        except Exception as exc:
            if self.on_error is None:
                logger.exception("Unhandled error in %s message handler", self._role)
                return
            self.on_error(exc)


__all__ = [
    "LocalEndpoint",
    "Message",
    "Transport",
    "TransportState",
    "new_session_id",
]
