"""Lifecycle and error-path tests for the local client/server transports."""

from __future__ import annotations

import logging

import pytest

from localrpc.errors import (
    AlreadyStartedError,
    MissingPeerHandleError,
    NotConnectedError,
    PeerUnavailableError,
)
from localrpc.transport import (
    LocalClientTransport,
    LocalServerTransport,
    Transport,
    TransportRegistry,
    TransportState,
    create_local_pair,
)
from tests.helpers import attach_recorder

pytestmark = pytest.mark.unit


def test_endpoints_register_on_construction(registry: TransportRegistry) -> None:
    server = LocalServerTransport(registry=registry)
    client = LocalClientTransport(server)

    assert server.session_id in registry
    assert client.session_id in registry
    assert client.registry is registry
    assert server.state is TransportState.CREATED
    assert client.state is TransportState.CREATED


def test_endpoints_satisfy_transport_protocol(
    server_transport: LocalServerTransport,
    client_transport: LocalClientTransport,
) -> None:
    assert isinstance(server_transport, Transport)
    assert isinstance(client_transport, Transport)


def test_server_accepts_custom_session_id(registry: TransportRegistry) -> None:
    server = LocalServerTransport("server-1", registry=registry)

    assert server.session_id == "server-1"
    assert "server-1" in registry


def test_client_requires_server_handle() -> None:
    with pytest.raises(MissingPeerHandleError) as exc_info:
        LocalClientTransport(None)

    assert exc_info.value.code == "MISSING_PEER_HANDLE"


@pytest.mark.asyncio
async def test_client_start_rejects_server_from_other_registry(
    server_transport: LocalServerTransport,
) -> None:
    await server_transport.start()
    client = LocalClientTransport(server_transport, registry=TransportRegistry())

    with pytest.raises(MissingPeerHandleError):
        await client.start()

    assert client.state is TransportState.CREATED
    assert server_transport.client_id is None


@pytest.mark.asyncio
async def test_handshake_records_client_id(
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair

    assert server.client_id == client.session_id
    assert client.server_id == server.session_id
    assert server.is_started
    assert client.is_started


@pytest.mark.asyncio
async def test_handshake_requires_started_server(
    server_transport: LocalServerTransport,
    client_transport: LocalClientTransport,
) -> None:
    with pytest.raises(PeerUnavailableError):
        await client_transport.start()

    assert client_transport.state is TransportState.CREATED
    assert server_transport.client_id is None

    await server_transport.start()
    await client_transport.start()
    assert server_transport.client_id == client_transport.session_id


@pytest.mark.asyncio
async def test_handshake_rejected_by_closed_server(
    server_transport: LocalServerTransport,
    client_transport: LocalClientTransport,
) -> None:
    await server_transport.start()
    await server_transport.close()

    with pytest.raises(PeerUnavailableError):
        await client_transport.start()


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["server", "client"])
async def test_send_before_start_fails_without_delivery(
    role: str,
    registry: TransportRegistry,
    server_transport: LocalServerTransport,
    client_transport: LocalClientTransport,
) -> None:
    server_rec = attach_recorder(server_transport)
    client_rec = attach_recorder(client_transport)
    endpoint = server_transport if role == "server" else client_transport

    with pytest.raises(NotConnectedError) as exc_info:
        await endpoint.send({"jsonrpc": "2.0", "method": "ping"})
    await registry.drain()

    assert exc_info.value.code == "NOT_CONNECTED"
    assert server_rec.messages == []
    assert client_rec.messages == []
    assert registry.pending == 0


@pytest.mark.asyncio
async def test_server_send_without_client_fails(server_transport: LocalServerTransport) -> None:
    await server_transport.start()

    with pytest.raises(PeerUnavailableError, match="No client connected"):
        await server_transport.send({"jsonrpc": "2.0", "method": "ping"})


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["server", "client"])
async def test_double_start_fails_and_keeps_started_state(
    role: str,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    endpoint = server if role == "server" else client

    with pytest.raises(AlreadyStartedError) as exc_info:
        await endpoint.start()

    assert exc_info.value.code == "ALREADY_STARTED"
    assert "already started" in str(exc_info.value)
    assert endpoint.state is TransportState.STARTED


@pytest.mark.asyncio
async def test_start_after_close_fails(
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    _server, client = connected_pair
    await client.close()

    with pytest.raises(AlreadyStartedError):
        await client.start()
    assert client.state is TransportState.CLOSED


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["server", "client"])
async def test_close_is_idempotent_and_fires_once(
    role: str,
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    endpoint = server if role == "server" else client
    recorder = attach_recorder(endpoint)

    for _ in range(3):
        await endpoint.close()

    assert recorder.close_count == 1
    assert endpoint.is_closed
    assert endpoint.session_id not in registry


@pytest.mark.asyncio
async def test_close_before_start_is_noop(
    registry: TransportRegistry,
    server_transport: LocalServerTransport,
) -> None:
    recorder = attach_recorder(server_transport)

    await server_transport.close()

    assert recorder.close_count == 0
    assert server_transport.state is TransportState.CREATED
    assert server_transport.session_id in registry


@pytest.mark.asyncio
async def test_send_after_close_fails_both_ways(
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    await client.close()

    with pytest.raises(NotConnectedError):
        await client.send({"method": "ping"})
    with pytest.raises(PeerUnavailableError):
        await server.send({"method": "pong"})
    with pytest.raises(PeerUnavailableError):
        registry.dispatch(client.session_id, {"method": "pong"})


@pytest.mark.asyncio
async def test_client_send_to_closed_server_fails(
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    await server.close()

    with pytest.raises(PeerUnavailableError):
        await client.send({"method": "ping"})
    with pytest.raises(NotConnectedError):
        await server.send({"method": "pong"})


@pytest.mark.asyncio
async def test_send_returns_before_peer_handler_runs(
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    recorder = attach_recorder(server)

    await client.send({"id": 1, "method": "ping"})
    assert recorder.messages == []

    await registry.drain()
    assert recorder.messages == [{"id": 1, "method": "ping"}]


@pytest.mark.asyncio
async def test_message_is_delivered_unmodified(
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    recorder = attach_recorder(client)
    payload = {"jsonrpc": "2.0", "id": "x", "result": {"nested": [1, 2, {"k": None}]}}

    await server.send(payload)
    await registry.drain()

    assert recorder.messages == [payload]
    assert recorder.messages[0] is payload


@pytest.mark.asyncio
async def test_handler_error_is_routed_to_on_error(
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    server, client = connected_pair
    recorder = attach_recorder(server)

    def _explode(_message: dict) -> None:
        raise ValueError("bad payload")

    server.on_message = _explode
    await client.send({"id": 1})
    await registry.drain()

    assert len(recorder.errors) == 1
    assert isinstance(recorder.errors[0], ValueError)


@pytest.mark.asyncio
async def test_handler_error_without_on_error_is_logged(
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
    caplog: pytest.LogCaptureFixture,
) -> None:
    server, client = connected_pair

    def _explode(_message: dict) -> None:
        raise ValueError("bad payload")

    server.on_message = _explode
    with caplog.at_level(logging.ERROR, logger="localrpc.transport.base"):
        await client.send({"id": 1})
        await registry.drain()

    assert "Unhandled error in LocalServerTransport message handler" in caplog.text


@pytest.mark.asyncio
async def test_message_without_observer_is_dropped(
    registry: TransportRegistry,
    connected_pair: tuple[LocalServerTransport, LocalClientTransport],
) -> None:
    _server, client = connected_pair

    await client.send({"id": 1})
    await registry.drain()

    assert registry.pending == 0


@pytest.mark.asyncio
async def test_later_client_takes_over_reply_target(
    registry: TransportRegistry,
    server_transport: LocalServerTransport,
) -> None:
    await server_transport.start()
    first = LocalClientTransport(server_transport)
    second = LocalClientTransport(server_transport)
    first_rec = attach_recorder(first)
    second_rec = attach_recorder(second)

    await first.start()
    await second.start()
    await server_transport.send({"id": 1})
    await registry.drain()

    assert server_transport.client_id == second.session_id
    assert first_rec.messages == []
    assert second_rec.messages == [{"id": 1}]


@pytest.mark.asyncio
async def test_async_context_manager_starts_and_closes(registry: TransportRegistry) -> None:
    server, client = create_local_pair(registry, server_id="ctx-server")
    recorder = attach_recorder(client)

    async with server, client:
        assert server.session_id == "ctx-server"
        assert client.is_started

    assert recorder.close_count == 1
    assert len(registry) == 0


def test_create_local_pair_builds_registry_when_missing() -> None:
    server, client = create_local_pair()

    assert server.registry is client.registry
    assert server.session_id in server.registry
    assert client.server_id == server.session_id
