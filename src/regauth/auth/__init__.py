"""Authentication for container registries.

The main entry points are:

- :class:`AuthenticationProvider` -- abstract base class for providers.
- :class:`BasicOAuthProvider` -- starts with Basic credentials and switches
  to Docker token authentication when :meth:`~BasicOAuthProvider.fallback`
  is given a registry's ``WWW-Authenticate`` challenge.
- :func:`parse_challenge` -- parses ``Bearer realm=..., service=..., scope=...``.
- :func:`get_basic_credentials` -- reads a username/secret pair from a
  :class:`Memento` and a :class:`SecretStorage`.

Typical usage::

    from regauth.auth import BasicOAuthProvider, InMemoryMemento, InMemorySecretStorage

    provider = BasicOAuthProvider(InMemoryMemento(), InMemorySecretStorage(), "my-registry")
    session = await provider.get_session(["registry:catalog:*"])
"""

from regauth.auth.base import AuthenticationProvider
from regauth.auth.basic_oauth import (
    AuthMode,
    BasicMode,
    BasicOAuthProvider,
    OAuthMode,
    is_basic_oauth_provider,
)
from regauth.auth.challenge import parse_challenge
from regauth.auth.credentials import (
    delete_basic_credentials,
    get_basic_credentials,
    store_basic_credentials,
)
from regauth.auth.storage import (
    FileSecretStorage,
    InMemoryMemento,
    InMemorySecretStorage,
    JsonFileMemento,
    Memento,
    SecretStorage,
)

__all__ = [
    "AuthMode",
    "AuthenticationProvider",
    "BasicMode",
    "BasicOAuthProvider",
    "FileSecretStorage",
    "InMemoryMemento",
    "InMemorySecretStorage",
    "JsonFileMemento",
    "Memento",
    "OAuthMode",
    "SecretStorage",
    "delete_basic_credentials",
    "get_basic_credentials",
    "is_basic_oauth_provider",
    "parse_challenge",
    "store_basic_credentials",
]
