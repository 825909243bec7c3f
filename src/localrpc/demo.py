"""Calculator walkthrough: an RPC server and client talking through local transports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

from localrpc.rpc import RPCClient, RPCError, RPCServer
from localrpc.rpc.contracts import INVALID_PARAMS
from localrpc.transport import TransportRegistry, create_local_pair

if TYPE_CHECKING:
    from collections.abc import Callable

    from localrpc.config import LocalRPCConfig
    from localrpc.rpc import JSONRPCNotification, RequestContext

logger = logging.getLogger(__name__)

type Operation = Literal["add", "subtract", "multiply", "divide"]

LOG_NOTIFICATION = "notifications/message"

DEMO_CALCULATIONS: tuple[tuple[Operation, float, float], ...] = (
    ("add", 5, 3),
    ("subtract", 10, 4),
    ("multiply", 6, 7),
    ("divide", 20, 5),
)


def build_calculator_server() -> RPCServer:
    """Return an ``RPCServer`` exposing ``calculate`` and ``tools/list``."""
    server = RPCServer("local-example-server")

    @server.method("tools/list")
    def list_tools() -> dict[str, Any]:
        return {
            "tools": [
                {"name": "calculate", "description": "Simple calculator with basic operations"}
            ]
        }

    @server.method("calculate")
    async def calculate(operation: str, a: float, b: float, ctx: RequestContext) -> dict[str, Any]:
        await ctx.send_notification(
            LOG_NOTIFICATION,
            {"level": "info", "data": f"Performing calculation: {a} {operation} {b}"},
        )
        match operation:
            case "add":
                result = a + b
            case "subtract":
                result = a - b
            case "multiply":
                result = a * b
            case "divide":
                if b == 0:
                    raise RPCError("Division by zero", INVALID_PARAMS)
                result = a / b
            case _:
                raise RPCError(f"Unknown operation: {operation}", INVALID_PARAMS)
        return {"content": [{"type": "text", "text": f"Result: {result}"}]}

    return server


async def run_demo(config: LocalRPCConfig, echo: Callable[[str], None] = print) -> list[str]:
    """Run the walkthrough and return the result texts in order."""
    registry = TransportRegistry.from_config(config.registry)
    server_transport, client_transport = create_local_pair(registry)

    server = build_calculator_server()
    client = RPCClient("local-example-client", timeout=config.rpc.request_timeout)

    def _on_log(notification: JSONRPCNotification) -> None:
        params = notification.params if isinstance(notification.params, dict) else {}
        echo(f"Notification: {params.get('level')} - {params.get('data')}")

    client.set_notification_handler(LOG_NOTIFICATION, _on_log)

    echo("[Step 1] Connecting server and client...")
    await server.connect(server_transport)
    await client.connect(client_transport)
    logger.info(
        "Demo connected: server=%s client=%s",
        server_transport.session_id,
        client_transport.session_id,
    )

    results: list[str] = []
    try:
        echo("[Step 2] Listing tools...")
        tools = await client.request("tools/list")
        for tool in tools["tools"]:
            echo(f"- {tool['name']}: {tool['description']}")

        echo("[Step 3] Calling the calculator...")
        for operation, a, b in DEMO_CALCULATIONS:
            echo(f"Calculating: {a} {operation} {b}")
            response = await client.request(
                "calculate", {"operation": operation, "a": a, "b": b}
            )
            text = response["content"][0]["text"]
            results.append(text)
            echo(text)

        echo("[Step 4] Dividing by zero...")
        try:
            await client.request("calculate", {"operation": "divide", "a": 10, "b": 0})
        except RPCError as exc:
            echo(f"Error caught: {exc}")
    finally:
        echo("[Step 5] Closing connections...")
        await client.close()
        await server.close()

    return results


__all__ = ["DEMO_CALCULATIONS", "build_calculator_server", "run_demo"]
