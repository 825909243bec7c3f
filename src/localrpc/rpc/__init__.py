"""Minimal JSON-RPC 2.0 client and server that run over any ``Transport``."""

from __future__ import annotations

from localrpc.rpc.client import RPCClient
from localrpc.rpc.contracts import (
    JSONRPCErrorObject,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    RPCError,
    parse_message,
)
from localrpc.rpc.server import RequestContext, RPCServer

__all__ = [
    "JSONRPCErrorObject",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "RPCClient",
    "RPCError",
    "RPCServer",
    "RequestContext",
    "parse_message",
]
