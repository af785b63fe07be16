"""Credential lookup for Basic and OAuth password-grant authentication.

Usernames live in a durable :class:`~regauth.auth.storage.Memento` under
``"<storage_key>.username"``; secrets live in a
:class:`~regauth.auth.storage.SecretStorage` under
``"<storage_key>.secret"``. Nothing is cached: every call reads both
stores, so a rotated secret is picked up by the very next request.
"""

from __future__ import annotations

from regauth.auth.storage import Memento, SecretStorage
from regauth.exceptions import CredentialsNotFoundError
from regauth.models import Credentials


def username_key(storage_key: str) -> str:
    return f"{storage_key}.username"


def secret_key(storage_key: str) -> str:
    return f"{storage_key}.secret"


async def get_basic_credentials(
    memento: Memento,
    secret_storage: SecretStorage,
    storage_key: str,
) -> Credentials:
    """Load the username and secret stored under *storage_key*.

    An empty username is never valid, but an empty-string secret is
    accepted: only a missing (``None``) secret is an error.

    Args:
        memento: Store holding the username.
        secret_storage: Store holding the secret.
        storage_key: Namespace for both keys.

    Returns:
        The loaded :class:`~regauth.models.Credentials`.

    Raises:
        CredentialsNotFoundError: If the username is missing or empty, or
            the secret is missing.
    """
    username = memento.get(username_key(storage_key))
    secret = await secret_storage.get(secret_key(storage_key))

    if not username:
        raise CredentialsNotFoundError(
            f"Could not load username for {storage_key}", storage_key
        )
    if secret is None:
        raise CredentialsNotFoundError(
            f"Could not load secret for {storage_key}", storage_key
        )

    return Credentials(username=username, secret=secret)


async def store_basic_credentials(
    memento: Memento,
    secret_storage: SecretStorage,
    storage_key: str,
    username: str,
    secret: str,
) -> None:
    """Write a username/secret pair under *storage_key*."""
    memento.update(username_key(storage_key), username)
    await secret_storage.store(secret_key(storage_key), secret)


async def delete_basic_credentials(
    memento: Memento,
    secret_storage: SecretStorage,
    storage_key: str,
) -> None:
    """Remove any username/secret pair stored under *storage_key*."""
    memento.update(username_key(storage_key), None)
    await secret_storage.delete(secret_key(storage_key))
