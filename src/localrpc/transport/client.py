"""Client side of the in-process transport."""

from __future__ import annotations

from typing import TYPE_CHECKING

from localrpc.errors import MissingPeerHandleError
from localrpc.transport.base import LocalEndpoint

if TYPE_CHECKING:
    from localrpc.transport.base import Message
    from localrpc.transport.registry import TransportRegistry
    from localrpc.transport.server import LocalServerTransport


class LocalClientTransport(LocalEndpoint):
    """Client transport that connects to a ``LocalServerTransport`` in the same process.

    Usage::

        registry = TransportRegistry()
        server_transport = LocalServerTransport(registry=registry)
        client_transport = LocalClientTransport(server_transport)

        await server_transport.start()
        await client_transport.start()  # tells the server who we are
        await client_transport.send({"jsonrpc": "2.0", "id": 1, "method": "ping"})
    """

    _role = "LocalClientTransport"

    def __init__(
        self,
        server: LocalServerTransport | None,
        *,
        registry: TransportRegistry | None = None,
        session_id: str | None = None,
    ) -> None:
        """Create a client transport bound to *server*.

        Args:
            server: The server transport to connect to.
            registry: Routing registry; defaults to the server's.
            session_id: Optional fixed id for this transport.

        Raises:
            MissingPeerHandleError: If *server* is ``None``.
        """
        if server is None:
            raise MissingPeerHandleError()
        super().__init__(registry=registry or server.registry, session_id=session_id)
        self._server = server

    @property
    def server_id(self) -> str:
        """Session id of the server this client talks to."""
        return self._server.session_id

    async def start(self) -> None:
        """Start the transport and complete the handshake with the server."""
        self._ensure_created()
        if self._server.registry is not self._registry:
            msg = "Server transport is registered in a different registry"
            raise MissingPeerHandleError(msg)

        self._server._attach_client(self._session_id)
        self._mark_started()

    async def send(self, message: Message) -> None:
        """Send a message to the server."""
        self._require_started()
        self._registry.dispatch(self._server.session_id, message)


__all__ = ["LocalClientTransport"]
