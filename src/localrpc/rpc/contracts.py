"""JSON-RPC 2.0 envelope types carried over local transports.

The transports never look inside a message; these models are used by the RPC
client and server on either side of the wire.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

type RequestId = int | str
type Params = dict[str, Any] | list[Any]


class RPCError(Exception):
    """Error raised by RPC methods or received from the remote side."""

    def __init__(self, message: str, code: int = INTERNAL_ERROR, data: Any = None) -> None:
        self.message = message
        self.code = code
        self.data = data
        super().__init__(f"[{code}] {message}")

    def to_error_object(self) -> JSONRPCErrorObject:
        return JSONRPCErrorObject(code=self.code, message=self.message, data=self.data)


class JSONRPCRequest(BaseModel):
    """A call that expects a response carrying the same ``id``."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId = Field(description="Caller-chosen id echoed by the response")
    method: str = Field(description="Method name, e.g. 'tools/call'")
    params: Params | None = Field(default=None, description="Method arguments")

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONRPCNotification(BaseModel):
    """A one-way message; no response is sent."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Params | None = None

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONRPCErrorObject(BaseModel):
    """Structured error inside a failed ``JSONRPCResponse``."""

    code: int = Field(description="JSON-RPC error code (e.g. -32601)")
    message: str = Field(description="Human-readable error description")
    data: Any = Field(default=None, description="Optional extra error payload")


class JSONRPCResponse(BaseModel):
    """Reply to a ``JSONRPCRequest``; exactly one of ``result`` and ``error`` applies.

    ``id`` is ``None`` only when the failing request could not be parsed far
    enough to recover its id.
    """

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId | None
    result: Any = None
    error: JSONRPCErrorObject | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> JSONRPCResponse:
        if self.error is not None and self.result is not None:
            msg = "Response cannot carry both result and error"
            raise ValueError(msg)
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(request_id: RequestId, result: Any = None) -> JSONRPCResponse:
        """Create a successful response."""
        return JSONRPCResponse(id=request_id, result=result)

    @staticmethod
    def failure(request_id: RequestId | None, error: RPCError) -> JSONRPCResponse:
        """Create a failure response from an ``RPCError``."""
        return JSONRPCResponse(id=request_id, error=error.to_error_object())

    def to_message(self) -> dict[str, Any]:
        # ``result`` must be present on success even when it is null.
        if self.error is not None:
            return {
                "jsonrpc": self.jsonrpc,
                "id": self.id,
                "error": self.error.model_dump(exclude_none=True),
            }
        return {"jsonrpc": self.jsonrpc, "id": self.id, "result": self.result}

    def raise_for_error(self) -> Any:
        """Return ``result`` or raise the carried error as ``RPCError``."""
        if self.error is not None:
            raise RPCError(self.error.message, code=self.error.code, data=self.error.data)
        return self.result


type JSONRPCMessage = JSONRPCRequest | JSONRPCNotification | JSONRPCResponse


def parse_message(data: Any) -> JSONRPCMessage:
    """Classify and validate a raw message dict.

    Raises:
        RPCError: With ``INVALID_REQUEST`` when *data* is not a JSON-RPC 2.0
            request, notification or response.
    """
    if not isinstance(data, dict):
        raise RPCError("Message must be an object", INVALID_REQUEST)
    if data.get("jsonrpc") != JSONRPC_VERSION:
        raise RPCError("Invalid jsonrpc version", INVALID_REQUEST)

    model: type[BaseModel]
    if "method" in data:
        model = JSONRPCNotification if data.get("id") is None else JSONRPCRequest
    elif "result" in data or "error" in data:
        model = JSONRPCResponse
    else:
        raise RPCError("Missing method", INVALID_REQUEST)

    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError as exc:
        raise RPCError(f"Invalid {model.__name__}", INVALID_REQUEST, data=str(exc)) from exc


__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JSONRPCErrorObject",
    "JSONRPCMessage",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "Params",
    "RPCError",
    "RequestId",
    "parse_message",
]
