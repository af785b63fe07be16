"""Pydantic data models for regauth.

Configuration models:
    :class:`RequestConfig` and :class:`RegauthConfig`.

Authentication models:
    :class:`Credentials`, :class:`Challenge`, :class:`Account`, and
    :class:`AuthSession`.

Registry models:
    :class:`V2RegistryRoot`, :class:`V2Registry`, :class:`V2Repository`,
    and :class:`V2Tag`.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP transport settings used when regauth creates its own client."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: Optional[str] = Field(
        default=None, description="Override for the User-Agent header"
    )


class RegauthConfig(BaseModel):
    """Top-level configuration stored in ``<config_dir>/config.json``."""

    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Authentication ---


class Credentials(BaseModel):
    """A username/secret pair read from storage.

    The secret may be an empty string (an anonymous token, for instance)
    but is never ``None``.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    secret: str


class Challenge(BaseModel):
    """A parsed ``WWW-Authenticate: Bearer`` challenge.

    Attributes:
        realm: Token endpoint URL, verbatim from the header.
        service: Service name the token is requested for.
        scope: Scopes requested by the registry, in header order.
    """

    model_config = ConfigDict(frozen=True)

    realm: str
    service: str
    scope: tuple[str, ...]


class Account(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    id: str


class AuthSession(BaseModel):
    """A session produced by an authentication provider.

    ``type`` and ``access_token`` combine into the ``Authorization`` header
    value of registry requests (``"<type> <access_token>"``).
    """

    id: Literal["basic", "oauth"]
    type: Literal["Basic", "Bearer"]
    account: Account
    access_token: str
    scopes: list[str] = Field(default_factory=list)

    @property
    def authorization_header(self) -> str:
        return f"{self.type} {self.access_token}"


# --- Registry items ---


class V2RegistryRoot(BaseModel):
    label: str


class V2Registry(BaseModel):
    """A single registry reachable at ``registry_root_uri``."""

    label: str
    registry_root_uri: str
    parent: Optional[V2RegistryRoot] = None


class V2Repository(BaseModel):
    label: str
    registry_root_uri: str
    parent: V2Registry


class V2Tag(BaseModel):
    label: str
    registry_root_uri: str
    parent: V2Repository
