"""Catalog and tag listing for Docker Registry HTTP API v2 registries.

:class:`RegistryV2DataProvider` lists repositories (``/v2/_catalog``) and
tags (``/v2/<name>/tags/list``) through
:func:`~regauth.registry.v2_request.registry_v2_request`, following
``Link: <...>; rel="next"`` pagination. Subclasses decide which registries
exist by implementing :meth:`~RegistryV2DataProvider.get_registries`.

:class:`GenericRegistryV2DataProvider` is the ready-made subclass: it keeps
a list of user-added registry URIs in a
:class:`~regauth.auth.storage.Memento` and gives each registry its own
:class:`~regauth.auth.basic_oauth.BasicOAuthProvider`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import httpx

from regauth.auth.base import AuthenticationProvider
from regauth.auth.basic_oauth import BasicOAuthProvider
from regauth.auth.credentials import delete_basic_credentials, store_basic_credentials
from regauth.auth.storage import Memento, SecretStorage
from regauth.config import create_http_client
from regauth.models import V2Registry, V2RegistryRoot, V2Repository, V2Tag
from regauth.registry.v2_request import registry_v2_request

logger = logging.getLogger(__name__)

CATALOG_SCOPE = "registry:catalog:*"


def repository_pull_scope(name: str) -> str:
    return f"repository:{name}:pull"


class RegistryV2DataProvider(ABC):
    """Base data provider for registries speaking the v2 API.

    Args:
        label: Display name of this provider.
        authentication_provider: Provider used for every registry call.
        description: Optional longer description.
        http_client: Client to send requests through. When omitted, one
            client is built from the global configuration on first use and
            closed by :meth:`on_disconnect`.
    """

    def __init__(
        self,
        label: str,
        authentication_provider: Optional[AuthenticationProvider] = None,
        description: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.label = label
        self.description = description
        self._authentication_provider = authentication_provider
        self._http_client = http_client
        self._owns_http_client = False

    def get_root(self) -> V2RegistryRoot:
        return V2RegistryRoot(label=self.label)

    @abstractmethod
    async def get_registries(self, root: Optional[V2RegistryRoot] = None) -> list[V2Registry]:
        """Return the registries under *root*."""
        ...

    def get_authentication_provider(self, registry: V2Registry) -> AuthenticationProvider:
        """Return the provider that authenticates calls to *registry*."""
        if self._authentication_provider is None:
            raise ValueError(f"No authentication provider for {registry.registry_root_uri}")
        return self._authentication_provider

    async def get_repositories(self, registry: V2Registry) -> list[V2Repository]:
        """List every repository in *registry*'s catalog."""
        names = await self._list_paginated(
            registry,
            ["v2", "_catalog"],
            [CATALOG_SCOPE],
            "repositories",
        )
        return [
            V2Repository(
                label=name,
                registry_root_uri=registry.registry_root_uri,
                parent=registry,
            )
            for name in names
        ]

    async def get_tags(self, repository: V2Repository) -> list[V2Tag]:
        """List every tag of *repository*."""
        names = await self._list_paginated(
            repository.parent,
            ["v2", repository.label, "tags", "list"],
            [repository_pull_scope(repository.label)],
            "tags",
        )
        return [
            V2Tag(
                label=name,
                registry_root_uri=repository.registry_root_uri,
                parent=repository,
            )
            for name in names
        ]

    def get_login_information(self) -> Any:
        raise NotImplementedError("Login information is not implemented")

    async def on_disconnect(self) -> None:
        if self._authentication_provider is not None:
            await self._authentication_provider.on_disconnect()
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = create_http_client()
            self._owns_http_client = True
        return self._http_client

    async def _list_paginated(
        self,
        registry: V2Registry,
        path: Sequence[str],
        scopes: Sequence[str],
        field: str,
    ) -> list[str]:
        """Collect ``body[field]`` across all ``rel="next"`` pages."""
        provider = self.get_authentication_provider(registry)
        results: list[str] = []
        next_url: Optional[str] = None

        while True:
            response = await registry_v2_request(
                provider,
                "GET",
                registry.registry_root_uri,
                path,
                scopes,
                url=next_url,
                http_client=self._get_http_client(),
            )
            body = response.body if isinstance(response.body, dict) else {}
            results.extend(body.get(field) or [])

            next_url = response.next_url
            if not next_url:
                return results
            logger.debug("Following next page %s", next_url)


class GenericRegistryV2DataProvider(RegistryV2DataProvider):
    """Data provider for arbitrary user-added v2 registries.

    Tracked registry URIs are stored in *memento* under
    :attr:`TRACKED_REGISTRIES_KEY`. Credentials for each registry are kept
    under the storage key ``"GenericV2ContainerRegistry.<uri>"``.

    Args:
        memento: Durable store for usernames and the tracked registries.
        secret_storage: Store for registry secrets.
        http_client: Client shared by every tracked registry, for registry
            calls and token requests alike.

    Example::

        provider = GenericRegistryV2DataProvider(JsonFileMemento(), FileSecretStorage())
        await provider.add_registry("https://registry.example", "alice", "s3cr3t")
        registries = await provider.get_registries()
        repositories = await provider.get_repositories(registries[0])
    """

    STORAGE_PREFIX = "GenericV2ContainerRegistry"
    TRACKED_REGISTRIES_KEY = f"{STORAGE_PREFIX}.TrackedRegistries"

    def __init__(
        self,
        memento: Memento,
        secret_storage: SecretStorage,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            "Generic Registry V2",
            description="Any registry implementing the Docker Registry HTTP API v2",
            http_client=http_client,
        )
        self._memento = memento
        self._secret_storage = secret_storage
        self._providers: dict[str, BasicOAuthProvider] = {}

    def tracked_registries(self) -> list[str]:
        return list(self._memento.get(self.TRACKED_REGISTRIES_KEY, []) or [])

    def storage_key(self, registry_root_uri: str) -> str:
        return f"{self.STORAGE_PREFIX}.{_normalise_uri(registry_root_uri)}"

    async def get_registries(self, root: Optional[V2RegistryRoot] = None) -> list[V2Registry]:
        parent = root or self.get_root()
        return [
            V2Registry(label=httpx.URL(uri).host or uri, registry_root_uri=uri, parent=parent)
            for uri in self.tracked_registries()
        ]

    async def add_registry(self, registry_root_uri: str, username: str, secret: str) -> V2Registry:
        """Store credentials for a registry and start tracking it.

        Re-adding a tracked registry replaces its credentials and resets its
        authentication provider to Basic mode.
        """
        uri = _normalise_uri(registry_root_uri)
        key = self.storage_key(uri)
        await store_basic_credentials(self._memento, self._secret_storage, key, username, secret)

        tracked = self.tracked_registries()
        if uri not in tracked:
            tracked.append(uri)
            self._memento.update(self.TRACKED_REGISTRIES_KEY, tracked)
        self._providers.pop(uri, None)

        logger.debug("Tracking registry %s", uri)
        return V2Registry(label=httpx.URL(uri).host or uri, registry_root_uri=uri, parent=self.get_root())

    async def remove_registry(self, registry_root_uri: str) -> None:
        """Forget a registry and delete its stored credentials."""
        uri = _normalise_uri(registry_root_uri)
        tracked = [item for item in self.tracked_registries() if item != uri]
        self._memento.update(self.TRACKED_REGISTRIES_KEY, tracked)
        await delete_basic_credentials(self._memento, self._secret_storage, self.storage_key(uri))

        provider = self._providers.pop(uri, None)
        if provider is not None:
            await provider.on_disconnect()
        logger.debug("Stopped tracking registry %s", uri)

    def get_authentication_provider(self, registry: V2Registry) -> BasicOAuthProvider:
        uri = _normalise_uri(registry.registry_root_uri)
        provider = self._providers.get(uri)
        if provider is None:
            provider = BasicOAuthProvider(
                self._memento,
                self._secret_storage,
                self.storage_key(uri),
                http_client=self._get_http_client(),
            )
            self._providers[uri] = provider
        return provider

    async def on_disconnect(self) -> None:
        for provider in self._providers.values():
            await provider.on_disconnect()
        self._providers.clear()
        await super().on_disconnect()


def _normalise_uri(uri: str) -> str:
    return uri.rstrip("/")
