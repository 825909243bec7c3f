"""Convenience constructor for a connected-to-be server/client transport pair."""

from __future__ import annotations

from localrpc.transport.client import LocalClientTransport
from localrpc.transport.registry import TransportRegistry
from localrpc.transport.server import LocalServerTransport


def create_local_pair(
    registry: TransportRegistry | None = None,
    *,
    server_id: str | None = None,
) -> tuple[LocalServerTransport, LocalClientTransport]:
    """Create a server transport and a client transport pointing at it.

    Neither side is started. Start the server first, then the client.

    Returns:
        (server_transport, client_transport) sharing *registry*, or a fresh
        registry when none is given.

    Example:
        ```python
        server_transport, client_transport = create_local_pair()
        await rpc_server.connect(server_transport)
        await rpc_client.connect(client_transport)
        ```
    """
    registry = registry if registry is not None else TransportRegistry()
    server_transport = LocalServerTransport(server_id, registry=registry)
    client_transport = LocalClientTransport(server_transport)
    return server_transport, client_transport


__all__ = ["create_local_pair"]
