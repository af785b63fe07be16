"""HTTP client layer for regauth.

Provides :func:`http_request`, a thin wrapper over :mod:`httpx` that
normalises responses into :class:`ResponseLike` and raises
:class:`~regauth.exceptions.UnauthorizedError` for HTTP 401.

Example::

    from regauth.client import RequestLike, http_request

    response = await http_request(url, RequestLike(method="GET"), throw_on_failure=False)
    if response.succeeded:
        body = response.json()
"""

from regauth.client.request import (
    HeadersLike,
    RequestLike,
    ResponseLike,
    flatten_headers,
    http_request,
)

__all__ = [
    "HeadersLike",
    "RequestLike",
    "ResponseLike",
    "flatten_headers",
    "http_request",
]
