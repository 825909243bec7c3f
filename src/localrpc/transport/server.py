"""Server side of the in-process transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from localrpc.errors import PeerUnavailableError
from localrpc.transport.base import LocalEndpoint, TransportState

if TYPE_CHECKING:
    from localrpc.transport.base import Message
    from localrpc.transport.registry import TransportRegistry

logger = logging.getLogger(__name__)


class LocalServerTransport(LocalEndpoint):
    """Server transport for direct in-process communication with a ``LocalClientTransport``.

    The server does not know its client up front. A client learns the server
    through the handle passed to its constructor and announces its own
    session id during ``start()``; from then on the server can reply.

    The server must be started before a client can attach.
    """

    _role = "LocalServerTransport"

    def __init__(
        self,
        session_id: str | None = None,
        *,
        registry: TransportRegistry,
    ) -> None:
        """Create a server transport.

        Args:
            session_id: Optional fixed id for this transport. A random one is
                generated when omitted.
            registry: Routing registry shared with the client.
        """
        super().__init__(registry=registry, session_id=session_id)
        self._client_id: str | None = None

    @property
    def client_id(self) -> str | None:
        """Session id of the attached client, if any."""
        return self._client_id

    async def send(self, message: Message) -> None:
        """Send a message to the attached client."""
        self._require_started()
        if self._client_id is None:
            msg = "No client connected"
            raise PeerUnavailableError(msg)
        self._registry.dispatch(self._client_id, message)

    def _attach_client(self, client_id: str) -> None:
        """Record the connecting client's session id.

        Called by ``LocalClientTransport.start()``. A later client replaces an
        earlier one as the reply target.
        """
        if self._state is not TransportState.STARTED:
            msg = f"Server transport {self._session_id} is not accepting connections"
            raise PeerUnavailableError(msg, session_id=self._session_id)
        if self._client_id is not None and self._client_id != client_id:
            logger.debug(
                "Server %s switching client %s -> %s",
                self._session_id,
                self._client_id,
                client_id,
            )
        self._client_id = client_id
        logger.debug("Server %s attached client %s", self._session_id, client_id)


__all__ = ["LocalServerTransport"]
