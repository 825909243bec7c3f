"""In-process transports: a session-id routing registry and the two endpoints that use it."""

from __future__ import annotations

from localrpc.transport.base import (
    LocalEndpoint,
    Message,
    Transport,
    TransportState,
    new_session_id,
)
from localrpc.transport.client import LocalClientTransport
from localrpc.transport.pair import create_local_pair
from localrpc.transport.registry import TransportRegistry
from localrpc.transport.server import LocalServerTransport

__all__ = [
    "LocalClientTransport",
    "LocalEndpoint",
    "LocalServerTransport",
    "Message",
    "Transport",
    "TransportRegistry",
    "TransportState",
    "create_local_pair",
    "new_session_id",
]
