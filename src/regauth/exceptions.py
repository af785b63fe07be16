"""Exception hierarchy for regauth.

All exceptions raised by this package inherit from :class:`RegauthError`.
Errors that originate in the HTTP transport itself (DNS failures, refused
connections, TLS problems, timeouts) are *not* wrapped: they surface as the
:class:`httpx.HTTPError` subclass that :mod:`httpx` raised.

Subclass hierarchy::

    RegauthError
    +-- AuthError
    |   +-- CredentialsNotFoundError
    |   +-- UnauthorizedError
    +-- ChallengeParseError
    +-- BodyParseError
    +-- RegistryHttpError
    +-- ConfigError

Unsupported operations raise the built-in :class:`NotImplementedError`.
"""

from __future__ import annotations


class RegauthError(Exception):
    """Base exception for all regauth errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(RegauthError):
    """Raised when authentication or authorisation fails."""


class CredentialsNotFoundError(AuthError):
    """Raised when a username or secret cannot be loaded from storage.

    Args:
        message: Human-readable error description.
        storage_key: The storage namespace that was queried.
    """

    def __init__(self, message: str, storage_key: str):
        super().__init__(message)
        self.storage_key = storage_key


class UnauthorizedError(AuthError):
    """Raised when a request is answered with HTTP 401.

    This is the signal registry callers use to decide whether to switch a
    :class:`~regauth.auth.basic_oauth.BasicOAuthProvider` into OAuth mode.

    Args:
        url: The URL of the rejected request.
    """

    def __init__(self, url: str):
        super().__init__(f"Request to '{url}' failed with status code 401: Unauthorized")
        self.url = url


class ChallengeParseError(RegauthError):
    """Raised when a ``WWW-Authenticate`` header cannot be parsed.

    Args:
        header: The raw header value that failed to parse.
    """

    def __init__(self, header: str):
        super().__init__(f'Unable to parse WWW-Authenticate header: "{header}"')
        self.header = header


class BodyParseError(RegauthError):
    """Raised when a response body is not the JSON document we expected."""


class RegistryHttpError(RegauthError):
    """Raised when a registry answers with a non-2xx status other than 401.

    Args:
        url: The request URL.
        status: The HTTP status code.
        status_text: The HTTP reason phrase.
    """

    def __init__(self, url: str, status: int, status_text: str = ""):
        detail = f"{status} {status_text}".strip()
        super().__init__(f"Request to '{url}' failed with status code {detail}")
        self.url = url
        self.status = status
        self.status_text = status_text


class ConfigError(RegauthError):
    """Raised for configuration problems (invalid JSON, failed validation)."""
