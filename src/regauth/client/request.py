"""Thin HTTP request wrapper over :class:`httpx.AsyncClient`.

:func:`http_request` executes a single request and returns a
:class:`ResponseLike` with flattened headers, a ``succeeded`` flag, and a
lazy :meth:`ResponseLike.json` accessor. HTTP 401 is the only status it
raises for (as :class:`~regauth.exceptions.UnauthorizedError`), because
it is the only status that changes control flow: the caller reacts by
re-authenticating. Every other status is returned for the caller to
inspect.

Transport failures are not caught: :class:`httpx.ConnectError`,
:class:`httpx.TimeoutException` and friends reach the caller unmodified.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from regauth.config import create_http_client
from regauth.exceptions import BodyParseError, UnauthorizedError
from regauth.models import RegauthConfig

logger = logging.getLogger(__name__)

HeadersLike = dict[str, str]


class RequestLike(BaseModel):
    """Description of an outgoing request.

    Attributes:
        method: HTTP method.
        headers: Request headers. Registry token endpoints read
            ``grant_type``, ``service`` and ``scope`` from here too.
        content: Optional raw request body.
    """

    method: str = "GET"
    headers: HeadersLike = Field(default_factory=dict)
    content: Optional[bytes] = None


class ResponseLike:
    """Normalised view of an HTTP response.

    Args:
        response: The underlying :class:`httpx.Response`. Its body must
            already be read.
        url: The URL the request was sent to.

    Attributes:
        url: The request URL.
        headers: Response headers with lower-cased names. When a header
            occurs more than once, the last value wins.
        status: Numeric status code.
        status_text: Reason phrase.
        succeeded: ``True`` for 2xx statuses.
    """

    def __init__(self, response: httpx.Response, url: str) -> None:
        self._response = response
        self.url = url
        self.headers: HeadersLike = flatten_headers(response.headers)
        self.status: int = response.status_code
        self.status_text: str = response.reason_phrase
        self.succeeded: bool = 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self._response.text

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            BodyParseError: If the body is not valid JSON.
        """
        try:
            return json.loads(self._response.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BodyParseError(
                f"Response from '{self.url}' is not valid JSON: {exc}"
            ) from exc

    def __repr__(self) -> str:
        return f"<ResponseLike [{self.status} {self.status_text}] {self.url}>"


def flatten_headers(headers: httpx.Headers) -> HeadersLike:
    """Collapse *headers* into a plain dict, later duplicates winning."""
    flattened: HeadersLike = {}
    for name, value in headers.multi_items():
        flattened[name.lower()] = value
    return flattened


async def http_request(
    url: str,
    request: RequestLike,
    throw_on_failure: bool = True,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RegauthConfig] = None,
) -> ResponseLike:
    """Execute *request* against *url*.

    Args:
        url: Absolute request URL.
        request: Method, headers and optional body.
        throw_on_failure: When ``True``, a 401 response raises
            :class:`~regauth.exceptions.UnauthorizedError`.
        client: Client to send through. When omitted a temporary client is
            built by :func:`~regauth.config.create_http_client` from
            *config* and closed afterwards.
        config: Settings for the temporary client.

    Returns:
        The normalised :class:`ResponseLike`.

    Raises:
        UnauthorizedError: On 401 when *throw_on_failure* is set.
        httpx.HTTPError: On transport failures, unmodified.
    """
    if client is None:
        async with create_http_client(config) as owned_client:
            return await http_request(url, request, throw_on_failure, client=owned_client)

    logger.debug("%s %s", request.method, url)
    response = await client.request(
        request.method,
        url,
        headers=request.headers,
        content=request.content,
    )
    logger.debug("%s %s -> %s", request.method, url, response.status_code)

    if throw_on_failure and response.status_code == 401:
        raise UnauthorizedError(url)

    return ResponseLike(response, url)
