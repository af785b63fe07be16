"""Docker Registry HTTP API v2 consumers.

- :func:`registry_v2_request` -- one authenticated call, including the
  401 -> ``fallback`` -> retry step for
  :class:`~regauth.auth.basic_oauth.BasicOAuthProvider`.
- :class:`RegistryV2DataProvider` -- catalog and tag listing.
- :class:`GenericRegistryV2DataProvider` -- tracks user-added registries.
"""

from regauth.registry.data_provider import (
    GenericRegistryV2DataProvider,
    RegistryV2DataProvider,
)
from regauth.registry.v2_request import (
    RegistryV2Response,
    build_registry_url,
    parse_link_header,
    registry_v2_request,
)

__all__ = [
    "GenericRegistryV2DataProvider",
    "RegistryV2DataProvider",
    "RegistryV2Response",
    "build_registry_url",
    "parse_link_header",
    "registry_v2_request",
]
