"""Error taxonomy for the in-process transport layer."""

from __future__ import annotations


class TransportError(RuntimeError):
    """Base for transport errors with a machine-readable code."""

    def __init__(self, message: str, *, code: str) -> None:
        super().__init__(message)
        self.code = code


class AlreadyStartedError(TransportError):
    """Raised when ``start()`` is called on an endpoint that is not fresh."""

    def __init__(self, role: str) -> None:
        super().__init__(
            f"{role} already started! If using an RPC client or server, note that "
            "connect() calls start() automatically.",
            code="ALREADY_STARTED",
        )


class NotConnectedError(TransportError):
    """Raised when sending on an endpoint that is not started (or already closed)."""

    def __init__(self, message: str = "Not connected") -> None:
        super().__init__(message, code="NOT_CONNECTED")


class PeerUnavailableError(TransportError):
    """Raised when a message or handshake has nowhere to go."""

    def __init__(self, message: str, *, session_id: str | None = None) -> None:
        super().__init__(message, code="PEER_UNAVAILABLE")
        self.session_id = session_id


class MissingPeerHandleError(TransportError):
    """Raised when a client transport has no usable server handle."""

    def __init__(self, message: str = "No server transport provided") -> None:
        super().__init__(message, code="MISSING_PEER_HANDLE")


class DuplicateSessionError(TransportError):
    """Raised when a session id is registered twice under the strict policy."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Transport with ID {session_id} is already registered",
            code="DUPLICATE_SESSION",
        )
        self.session_id = session_id


__all__ = [
    "AlreadyStartedError",
    "DuplicateSessionError",
    "MissingPeerHandleError",
    "NotConnectedError",
    "PeerUnavailableError",
    "TransportError",
]
