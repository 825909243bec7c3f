"""localrpc: in-process client/server transports for JSON-RPC style messaging."""

from localrpc.errors import (
    AlreadyStartedError,
    DuplicateSessionError,
    MissingPeerHandleError,
    NotConnectedError,
    PeerUnavailableError,
    TransportError,
)
from localrpc.transport import (
    LocalClientTransport,
    LocalServerTransport,
    TransportRegistry,
    create_local_pair,
)
from localrpc.version import get_localrpc_version

__version__ = get_localrpc_version()

__all__ = [
    "AlreadyStartedError",
    "DuplicateSessionError",
    "LocalClientTransport",
    "LocalServerTransport",
    "MissingPeerHandleError",
    "NotConnectedError",
    "PeerUnavailableError",
    "TransportError",
    "TransportRegistry",
    "create_local_pair",
]
