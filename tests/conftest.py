"""Pytest fixtures for localrpc tests."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

from localrpc.transport import LocalClientTransport, LocalServerTransport, TransportRegistry

_TEST_BASE_DIR = Path(tempfile.mkdtemp(prefix="localrpc-tests-"))
os.environ["LOCALRPC_CONFIG_DIR"] = str(_TEST_BASE_DIR / "config")

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _clean_config_dir() -> Generator[None, None, None]:
    """Ensure config files written by one test don't leak into the next."""
    yield
    shutil.rmtree(Path(os.environ["LOCALRPC_CONFIG_DIR"]), ignore_errors=True)


@pytest.fixture
def registry() -> Generator[TransportRegistry, None, None]:
    """Isolated routing registry, cleared after the test."""
    reg = TransportRegistry()
    yield reg
    reg.clear()


@pytest.fixture
def server_transport(registry: TransportRegistry) -> LocalServerTransport:
    return LocalServerTransport(registry=registry)


@pytest.fixture
def client_transport(server_transport: LocalServerTransport) -> LocalClientTransport:
    return LocalClientTransport(server_transport)


@pytest.fixture
async def connected_pair(
    server_transport: LocalServerTransport,
    client_transport: LocalClientTransport,
) -> AsyncGenerator[tuple[LocalServerTransport, LocalClientTransport]]:
    """Server started first, then client (which completes the handshake)."""
    await server_transport.start()
    await client_transport.start()
    yield server_transport, client_transport
    await client_transport.close()
    await server_transport.close()
