"""``WWW-Authenticate`` challenge parsing.

Registries using Docker token authentication reject anonymous or Basic
requests with::

    WWW-Authenticate: Bearer realm="https://auth.example/token",service="registry.example",scope="repository:x:pull"

:func:`parse_challenge` turns that header into a
:class:`~regauth.models.Challenge`. Values are taken verbatim from between
the double quotes; nothing is URL-decoded.
"""

from __future__ import annotations

import re

from regauth.exceptions import ChallengeParseError
from regauth.models import Challenge

_CHALLENGE_RE = re.compile(
    r'Bearer\s+realm="(?P<realm>[^"]+)",\s*service="(?P<service>[^"]+)",\s*scope="(?P<scope>[^"]+)"',
    re.IGNORECASE,
)


def parse_challenge(header_value: str) -> Challenge:
    """Parse a ``Bearer realm=..., service=..., scope=...`` header value.

    Args:
        header_value: The raw ``WWW-Authenticate`` header value.

    Returns:
        The parsed :class:`~regauth.models.Challenge`. ``scope`` is split on
        single spaces.

    Raises:
        ChallengeParseError: If the value does not match the expected
            pattern.

    Example::

        challenge = parse_challenge(
            'Bearer realm="https://auth.example/token", '
            'service="registry.example", scope="repository:x:pull"'
        )
        assert challenge.scope == ("repository:x:pull",)
    """
    match = _CHALLENGE_RE.search(header_value or "")
    if match is None:
        raise ChallengeParseError(header_value)

    return Challenge(
        realm=match.group("realm"),
        service=match.group("service"),
        scope=tuple(match.group("scope").split(" ")),
    )
