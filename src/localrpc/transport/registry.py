"""Session-id routing table shared by local client and server transports.

A ``TransportRegistry`` is an explicit object: the hosting application (or
each test) builds one and hands it to every endpoint that should be able to
reach the others. Two registries never see each other's endpoints.

Delivery is deferred onto the running event loop's ready queue, so a
receiver's handler never runs inside the sender's ``send()`` call. The ready
queue is FIFO, which keeps per-target ordering intact.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Literal

from localrpc.errors import DuplicateSessionError, PeerUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable

    from localrpc.config import RegistryConfig
    from localrpc.transport.base import Message

    MessageCallback = Callable[[Message], None]

logger = logging.getLogger(__name__)

type DuplicatePolicy = Literal["replace", "error"]


class TransportRegistry:
    """Routing table mapping session ids to message callbacks.

    Usage::

        registry = TransportRegistry()
        server = LocalServerTransport(registry=registry)
        client = LocalClientTransport(server)

    Single-threaded by contract: all operations must run on one event loop.
    """

    def __init__(self, *, duplicate_policy: DuplicatePolicy = "replace") -> None:
        self._entries: dict[str, MessageCallback] = {}
        self._duplicate_policy: DuplicatePolicy = duplicate_policy
        self._pending = 0

    @classmethod
    def from_config(cls, config: RegistryConfig) -> TransportRegistry:
        """Build a registry from the ``[registry]`` config section."""
        return cls(duplicate_policy=config.duplicate_policy)

    @property
    def duplicate_policy(self) -> DuplicatePolicy:
        return self._duplicate_policy

    @property
    def pending(self) -> int:
        """Number of accepted messages whose handler has not run yet."""
        return self._pending

    @property
    def session_ids(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def is_registered(self, session_id: str) -> bool:
        return session_id in self._entries

    def register(self, session_id: str, on_message: MessageCallback) -> None:
        """Register *on_message* as the delivery callback for *session_id*.

        Re-registering a live id replaces the previous subscriber under the
        ``replace`` policy and raises ``DuplicateSessionError`` under ``error``.
        """
        if session_id in self._entries:
            if self._duplicate_policy == "error":
                raise DuplicateSessionError(session_id)
            logger.warning("Replacing live transport registration for %s", session_id)
        self._entries[session_id] = on_message
        logger.debug("Registered transport %s", session_id)

    def unregister(self, session_id: str) -> None:
        """Remove *session_id*; unknown ids are ignored."""
        if self._entries.pop(session_id, None) is not None:
            logger.debug("Unregistered transport %s", session_id)

    def dispatch(self, target_id: str, message: Message) -> None:
        """Queue *message* for delivery to *target_id*.

        Raises:
            PeerUnavailableError: If nothing is registered under *target_id*.
            RuntimeError: If called outside a running event loop.
        """
        target = self._entries.get(target_id)
        if target is None:
            msg = f"Transport with ID {target_id} not found"
            raise PeerUnavailableError(msg, session_id=target_id)

        loop = asyncio.get_running_loop()
        self._pending += 1
        loop.call_soon(self._deliver, target_id, target, message)

    def clear(self) -> None:
        """Drop every registration. Messages already queued are still delivered."""
        self._entries.clear()

    async def drain(self) -> None:
        """Wait until every queued delivery (including ones they trigger) has run."""
        while self._pending:
            await asyncio.sleep(0)

    def _deliver(self, target_id: str, callback: MessageCallback, message: Message) -> None:
        try:
            callback(message)
        except Exception:
            logger.exception("Message delivery to transport %s failed", target_id)
        finally:
            self._pending -= 1


__all__ = ["DuplicatePolicy", "TransportRegistry"]
