"""Abstract base class for authentication providers.

An authentication provider turns stored credentials into an
:class:`~regauth.models.AuthSession` whose ``type`` and ``access_token``
form the ``Authorization`` header of registry requests.

To implement a new provider, subclass :class:`AuthenticationProvider` and
implement :meth:`~AuthenticationProvider.get_session` and
:meth:`~AuthenticationProvider.remove_session`. Optionally override
:meth:`~AuthenticationProvider.on_disconnect` to clean up when a registry
is removed.

See Also:
    :class:`regauth.auth.basic_oauth.BasicOAuthProvider` for the Basic to
    OAuth negotiating provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from regauth.models import AuthSession


class AuthenticationProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    async def get_session(
        self,
        scopes: Sequence[str],
        options: Optional[dict[str, Any]] = None,
    ) -> AuthSession:
        """Return a session usable for a request needing *scopes*.

        Args:
            scopes: Registry scopes the request needs, e.g.
                ``["registry:catalog:*"]``.
            options: Provider-specific options.

        Returns:
            An :class:`~regauth.models.AuthSession`.
        """
        ...

    @abstractmethod
    async def remove_session(self, session_id: Optional[str] = None) -> None:
        """Revoke the session identified by *session_id*."""
        ...

    async def on_disconnect(self) -> None:
        """Hook called when the owning registry is disconnected.

        The default implementation does nothing.
        """
        return None
