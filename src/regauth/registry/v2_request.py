"""Authenticated requests against the Docker Registry HTTP API v2.

:func:`registry_v2_request` issues one registry call and owns the
caller-side half of the Basic to token negotiation:

1. Ask the authentication provider for a session and send the request with
   ``Authorization: <type> <token>``.
2. If the registry answers 401 and the provider is a
   :class:`~regauth.auth.basic_oauth.BasicOAuthProvider` that has not yet
   fallen back, hand the ``WWW-Authenticate`` header to
   :meth:`~regauth.auth.basic_oauth.BasicOAuthProvider.fallback` and send
   the request again, once.
3. Map the final response to a :class:`RegistryV2Response` or an
   exception.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Generic, Optional, Sequence, TypeVar

import httpx

from regauth.auth.base import AuthenticationProvider
from regauth.auth.basic_oauth import BasicOAuthProvider
from regauth.client.request import HeadersLike, RequestLike, ResponseLike, http_request
from regauth.exceptions import RegistryHttpError, UnauthorizedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LINK_RE = re.compile(r'<(?P<url>[^>]*)>\s*;\s*rel="?(?P<rel>[^";,]+)"?')


class RegistryV2Response(Generic[T]):
    """A successful registry response.

    Attributes:
        url: The URL that produced this response.
        status: Numeric status code.
        status_text: Reason phrase.
        succeeded: Always ``True``; failures raise instead.
        headers: Flattened response headers.
        body: The decoded JSON body, or ``None`` when the body is empty.
        links: ``Link`` header targets keyed by ``rel``, resolved to
            absolute URLs.
    """

    def __init__(
        self,
        url: str,
        status: int,
        status_text: str,
        headers: HeadersLike,
        body: Optional[T],
        links: dict[str, str],
    ) -> None:
        self.url = url
        self.status = status
        self.status_text = status_text
        self.succeeded = True
        self.headers = headers
        self.body = body
        self.links = links

    @property
    def next_url(self) -> Optional[str]:
        return self.links.get("next")


def parse_link_header(value: Optional[str], base_url: str) -> dict[str, str]:
    """Parse an RFC 8288 ``Link`` header into ``{rel: absolute_url}``.

    Registries paginate ``/v2/_catalog`` and ``tags/list`` with
    ``Link: </v2/_catalog?last=foo&n=100>; rel="next"``.
    """
    if not value:
        return {}
    links: dict[str, str] = {}
    base = httpx.URL(base_url)
    for match in _LINK_RE.finditer(value):
        links[match.group("rel").strip()] = str(base.join(match.group("url")))
    return links


def build_registry_url(
    registry_root_uri: str,
    path: Sequence[str],
    query: Optional[dict[str, Any]] = None,
) -> str:
    """Join *path* segments onto the registry root and append *query*."""
    root = registry_root_uri.rstrip("/")
    url = httpx.URL(f"{root}/{'/'.join(segment.strip('/') for segment in path)}")
    if query:
        url = url.copy_merge_params(query)
    return str(url)


async def registry_v2_request(
    authentication_provider: AuthenticationProvider,
    method: str,
    registry_root_uri: str,
    path: Sequence[str],
    scopes: Sequence[str],
    *,
    query: Optional[dict[str, Any]] = None,
    url: Optional[str] = None,
    headers: Optional[HeadersLike] = None,
    session_options: Optional[dict[str, Any]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> RegistryV2Response[Any]:
    """Send an authenticated request to a registry.

    Args:
        authentication_provider: Supplies the session for every attempt.
        method: HTTP method.
        registry_root_uri: Registry root, e.g. ``https://registry.example``.
        path: Path segments, e.g. ``["v2", "_catalog"]``.
        scopes: Scopes to request the session for.
        query: Optional query parameters.
        url: Absolute URL to request instead of the one built from
            *registry_root_uri*, *path* and *query*, e.g. a ``rel="next"``
            link from an earlier response. Sent as given.
        headers: Extra request headers.
        session_options: Passed through to
            :meth:`~regauth.auth.base.AuthenticationProvider.get_session`.
        http_client: Client to send through.

    Returns:
        A :class:`RegistryV2Response` for a 2xx answer.

    Raises:
        UnauthorizedError: If the registry still answers 401 after any
            fallback.
        RegistryHttpError: For any other non-2xx answer.
        ChallengeParseError: If the 401 challenge cannot be parsed.
    """
    if url is None:
        url = build_registry_url(registry_root_uri, path, query)

    response = await _send(
        authentication_provider, method, url, scopes, headers, session_options, http_client
    )

    if (
        response.status == 401
        and isinstance(authentication_provider, BasicOAuthProvider)
        and not authentication_provider.did_fallback
    ):
        logger.debug("Registry %s requested token authentication", registry_root_uri)
        authentication_provider.fallback(response.headers.get("www-authenticate", ""))
        response = await _send(
            authentication_provider, method, url, scopes, headers, session_options, http_client
        )

    if response.status == 401:
        raise UnauthorizedError(url)
    if not response.succeeded:
        raise RegistryHttpError(url, response.status, response.status_text)

    return RegistryV2Response(
        url=url,
        status=response.status,
        status_text=response.status_text,
        headers=response.headers,
        body=response.json() if response.text.strip() else None,
        links=parse_link_header(response.headers.get("link"), url),
    )


async def _send(
    authentication_provider: AuthenticationProvider,
    method: str,
    url: str,
    scopes: Sequence[str],
    headers: Optional[HeadersLike],
    session_options: Optional[dict[str, Any]],
    http_client: Optional[httpx.AsyncClient],
) -> ResponseLike:
    session = await authentication_provider.get_session(scopes, session_options)
    request = RequestLike(
        method=method,
        headers={**(headers or {}), "Authorization": session.authorization_header},
    )
    return await http_request(url, request, throw_on_failure=False, client=http_client)
