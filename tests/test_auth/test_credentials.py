"""Tests for credential lookup."""

from __future__ import annotations

import pytest

from regauth.auth.credentials import (
    delete_basic_credentials,
    get_basic_credentials,
    store_basic_credentials,
)
from regauth.auth.storage import InMemoryMemento, InMemorySecretStorage
from regauth.exceptions import AuthError, CredentialsNotFoundError
from regauth.models import Credentials


class TestGetBasicCredentials:
    @pytest.mark.asyncio
    async def test_returns_username_and_secret(self) -> None:
        memento = InMemoryMemento({"reg.username": "alice"})
        secrets = InMemorySecretStorage({"reg.secret": "s3cr3t"})

        creds = await get_basic_credentials(memento, secrets, "reg")
        assert creds == Credentials(username="alice", secret="s3cr3t")

    @pytest.mark.asyncio
    async def test_empty_secret_is_allowed(self) -> None:
        memento = InMemoryMemento({"reg.username": "alice"})
        secrets = InMemorySecretStorage({"reg.secret": ""})

        creds = await get_basic_credentials(memento, secrets, "reg")
        assert creds.secret == ""

    @pytest.mark.asyncio
    async def test_missing_secret_raises(self) -> None:
        memento = InMemoryMemento({"reg.username": "alice"})
        secrets = InMemorySecretStorage()

        with pytest.raises(CredentialsNotFoundError, match="Could not load secret for reg") as exc_info:
            await get_basic_credentials(memento, secrets, "reg")
        assert exc_info.value.storage_key == "reg"

    @pytest.mark.asyncio
    async def test_missing_username_raises(self) -> None:
        memento = InMemoryMemento()
        secrets = InMemorySecretStorage({"reg.secret": "s3cr3t"})

        with pytest.raises(CredentialsNotFoundError, match="Could not load username for reg"):
            await get_basic_credentials(memento, secrets, "reg")

    @pytest.mark.asyncio
    async def test_empty_username_raises(self) -> None:
        memento = InMemoryMemento({"reg.username": ""})
        secrets = InMemorySecretStorage({"reg.secret": "s3cr3t"})

        with pytest.raises(CredentialsNotFoundError):
            await get_basic_credentials(memento, secrets, "reg")

    @pytest.mark.asyncio
    async def test_username_checked_before_secret(self) -> None:
        with pytest.raises(CredentialsNotFoundError, match="username"):
            await get_basic_credentials(InMemoryMemento(), InMemorySecretStorage(), "reg")

    @pytest.mark.asyncio
    async def test_is_an_auth_error(self) -> None:
        with pytest.raises(AuthError):
            await get_basic_credentials(InMemoryMemento(), InMemorySecretStorage(), "reg")

    @pytest.mark.asyncio
    async def test_keys_are_namespaced(self) -> None:
        memento = InMemoryMemento({"other.username": "bob", "reg.username": "alice"})
        secrets = InMemorySecretStorage({"other.secret": "x", "reg.secret": "y"})

        creds = await get_basic_credentials(memento, secrets, "other")
        assert creds == Credentials(username="bob", secret="x")

    @pytest.mark.asyncio
    async def test_rotated_secret_is_read_fresh(self) -> None:
        memento = InMemoryMemento({"reg.username": "alice"})
        secrets = InMemorySecretStorage({"reg.secret": "old"})

        assert (await get_basic_credentials(memento, secrets, "reg")).secret == "old"
        await secrets.store("reg.secret", "new")
        assert (await get_basic_credentials(memento, secrets, "reg")).secret == "new"


class TestStoreAndDelete:
    @pytest.mark.asyncio
    async def test_store_then_get(self) -> None:
        memento = InMemoryMemento()
        secrets = InMemorySecretStorage()

        await store_basic_credentials(memento, secrets, "reg", "alice", "pw")
        assert memento.get("reg.username") == "alice"
        assert await secrets.get("reg.secret") == "pw"
        assert await get_basic_credentials(memento, secrets, "reg") == Credentials(
            username="alice", secret="pw"
        )

    @pytest.mark.asyncio
    async def test_delete_removes_both(self) -> None:
        memento = InMemoryMemento({"reg.username": "alice"})
        secrets = InMemorySecretStorage({"reg.secret": "pw"})

        await delete_basic_credentials(memento, secrets, "reg")
        assert memento.get("reg.username") is None
        assert await secrets.get("reg.secret") is None
