"""Basic authentication with on-demand upgrade to Docker token auth.

This module provides :class:`BasicOAuthProvider`. A provider starts in
:class:`BasicMode` and hands out ``Basic`` sessions built from the stored
username and secret. Registries that implement Docker token
authentication reject those requests with 401 and a challenge such as::

    WWW-Authenticate: Bearer realm="https://auth.example/token",service="registry.example",scope="repository:x:pull"

The caller passes that header to :meth:`BasicOAuthProvider.fallback`,
which moves the provider into :class:`OAuthMode`. From then on every
session is a ``Bearer`` token obtained by a password-grant exchange
against the challenge's realm, using the same stored credentials. There is
no way back to Basic mode for the life of the instance.

Retrying the rejected request is the caller's job; see
:func:`regauth.registry.v2_request.registry_v2_request`.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import httpx

from regauth.auth.base import AuthenticationProvider
from regauth.auth.challenge import parse_challenge
from regauth.auth.credentials import get_basic_credentials
from regauth.auth.storage import Memento, SecretStorage
from regauth.client.request import RequestLike, http_request
from regauth.config import create_http_client
from regauth.exceptions import BodyParseError, RegistryHttpError
from regauth.models import Account, AuthSession, Credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasicMode:
    """Initial mode: sessions carry Basic credentials, no network involved."""


@dataclass(frozen=True)
class OAuthMode:
    """Token mode entered after a successful :meth:`BasicOAuthProvider.fallback`.

    Attributes:
        endpoint: Token endpoint (the challenge ``realm``).
        service: Service name sent with every token request.
        default_scopes: Scopes from the challenge, requested ahead of the
            caller's own scopes.
    """

    endpoint: str
    service: str
    default_scopes: tuple[str, ...] = ()


AuthMode = Union[BasicMode, OAuthMode]


def basic_auth_token(username: str, secret: str) -> str:
    """Return ``base64("<username>:<secret>")``."""
    return base64.b64encode(f"{username}:{secret}".encode("utf-8")).decode("ascii")


class BasicOAuthProvider(AuthenticationProvider):
    """Authentication provider that negotiates between Basic and token auth.

    Credentials are read from storage on every :meth:`get_session` call.

    Args:
        memento: Durable store holding ``"<storage_key>.username"``.
        secret_storage: Secret store holding ``"<storage_key>.secret"``.
        storage_key: Namespace of this registry's credentials.
        http_client: Client used for token requests. When omitted, one
            client is built from the global configuration on the first token
            request, reused after that, and closed by :meth:`on_disconnect`.

    Example::

        provider = BasicOAuthProvider(memento, secrets, "my-registry")
        session = await provider.get_session(["registry:catalog:*"])
        # session.type == "Basic" until provider.fallback(...) is called
    """

    def __init__(
        self,
        memento: Memento,
        secret_storage: SecretStorage,
        storage_key: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._memento = memento
        self._secret_storage = secret_storage
        self._storage_key = storage_key
        self._http_client = http_client
        self._owns_http_client = False
        self._mode: AuthMode = BasicMode()
        self._did_fallback = False

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def mode(self) -> AuthMode:
        """The current authentication mode."""
        return self._mode

    @property
    def did_fallback(self) -> bool:
        """``True`` once :meth:`fallback` has succeeded at least once."""
        return self._did_fallback

    async def get_basic_credentials(self) -> Credentials:
        return await get_basic_credentials(
            self._memento, self._secret_storage, self._storage_key
        )

    async def get_session(
        self,
        scopes: Sequence[str],
        options: Optional[dict[str, Any]] = None,
    ) -> AuthSession:
        """Return a Basic session, or a Bearer session once in OAuth mode.

        Args:
            scopes: Scopes the upcoming request needs.
            options: Unused; accepted for interface compatibility.

        Returns:
            An :class:`~regauth.models.AuthSession` with ``id="basic"`` or
            ``id="oauth"``.

        Raises:
            CredentialsNotFoundError: If the stored credentials are missing.
            UnauthorizedError: If the token endpoint answers 401.
            RegistryHttpError: If the token endpoint answers another
                non-2xx status.
            BodyParseError: If the token response carries no token.
        """
        # Snapshot once so a concurrent fallback cannot mix old and new state.
        mode = self._mode
        credentials = await self.get_basic_credentials()
        account = Account(label=credentials.username, id=credentials.username)
        basic_token = basic_auth_token(credentials.username, credentials.secret)

        if isinstance(mode, BasicMode):
            return AuthSession(
                id="basic",
                type="Basic",
                account=account,
                access_token=basic_token,
                scopes=list(scopes),
            )

        request = RequestLike(
            method="GET",
            headers={
                "Authorization": f"Basic {basic_token}",
                "grant_type": "password",
                "service": mode.service,
                "scope": " ".join([*mode.default_scopes, *scopes]),
            },
        )
        logger.debug(
            "Requesting token from %s for service %s", mode.endpoint, mode.service
        )
        response = await http_request(
            mode.endpoint, request, client=self._get_http_client()
        )
        if not response.succeeded:
            raise RegistryHttpError(mode.endpoint, response.status, response.status_text)

        return AuthSession(
            id="oauth",
            type="Bearer",
            account=account,
            access_token=_extract_token(response.json(), mode.endpoint),
            scopes=list(scopes),
        )

    async def remove_session(self, session_id: Optional[str] = None) -> None:
        raise NotImplementedError("Removing sessions is not implemented")

    async def on_disconnect(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = create_http_client()
            self._owns_http_client = True
        return self._http_client

    def fallback(self, www_authenticate_header: str) -> None:
        """Switch to OAuth mode using a registry's ``WWW-Authenticate`` challenge.

        Calling this again replaces the endpoint, service and scopes with
        those of the newer challenge.

        Args:
            www_authenticate_header: The raw header value from a 401
                response.

        Raises:
            ChallengeParseError: If the header cannot be parsed. The
                provider's state is left unchanged.
        """
        challenge = parse_challenge(www_authenticate_header)
        self._mode = OAuthMode(
            endpoint=challenge.realm,
            service=challenge.service,
            default_scopes=challenge.scope,
        )
        self._did_fallback = True
        logger.debug(
            "Switched %s to token authentication via %s",
            self._storage_key,
            challenge.realm,
        )


def _extract_token(body: Any, endpoint: str) -> str:
    """Pull the bearer token out of a token endpoint response body.

    Docker token servers return ``token``; some also (or only) return the
    OAuth2 ``access_token`` alias. A string ``token`` is returned as sent,
    even when empty; ``access_token`` is only consulted when ``token`` is
    absent or not a string.
    """
    if isinstance(body, dict):
        for field in ("token", "access_token"):
            if isinstance(body.get(field), str):
                return body[field]
    raise BodyParseError(f"Token response from '{endpoint}' has no 'token' field")


def is_basic_oauth_provider(obj: object) -> bool:
    """Return ``True`` if *obj* is a :class:`BasicOAuthProvider`."""
    return isinstance(obj, BasicOAuthProvider)
