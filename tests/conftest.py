"""Shared test fixtures for regauth.

Provides in-memory credential stores, a config-isolation fixture, and
a fixture for building :class:`httpx.AsyncClient` instances backed by
:class:`httpx.MockTransport`. Fixtures are discovered by pytest
automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, AsyncIterator, Callable

import httpx
import pytest
import pytest_asyncio

from regauth.auth.storage import InMemoryMemento, InMemorySecretStorage

STORAGE_KEY = "test-registry"


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


MockClientFactory = Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]


@pytest_asyncio.fixture
async def mock_client() -> AsyncIterator[MockClientFactory]:
    """Factory for AsyncClients whose requests are answered by a handler.

    Every client it creates is closed when the test finishes.
    """
    clients: list[httpx.AsyncClient] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


def json_response(data: Any, status_code: int = 200, **kwargs: Any) -> httpx.Response:
    return httpx.Response(status_code=status_code, json=data, **kwargs)


def challenge_response(
    realm: str = "https://auth.example/token",
    service: str = "registry.example",
    scope: str = "repository:x:pull",
) -> httpx.Response:
    """A 401 carrying a Docker token authentication challenge."""
    return httpx.Response(
        status_code=401,
        headers={
            "WWW-Authenticate": f'Bearer realm="{realm}",service="{service}",scope="{scope}"',
        },
        json={"errors": [{"code": "UNAUTHORIZED"}]},
    )


# ---------------------------------------------------------------------------
# Credential store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memento() -> InMemoryMemento:
    """A memento holding the username ``alice`` under :data:`STORAGE_KEY`."""
    return InMemoryMemento({f"{STORAGE_KEY}.username": "alice"})


@pytest.fixture
def secret_storage() -> InMemorySecretStorage:
    """A secret store holding ``s3cr3t`` under :data:`STORAGE_KEY`."""
    return InMemorySecretStorage({f"{STORAGE_KEY}.secret": "s3cr3t"})


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and data to a temporary directory.

    Forces the XDG code path and points XDG_CONFIG_HOME and XDG_DATA_HOME
    at subdirectories of tmp_path so tests never touch real user files.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setattr("regauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path
