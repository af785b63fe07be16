"""regauth -- container registry authentication negotiation.

This package talks to registries implementing the Docker Registry HTTP API
v2. Every registry starts out with HTTP Basic credentials; when a registry
answers with a ``WWW-Authenticate: Bearer`` challenge, the caller hands
that header to the provider, which switches to the Docker token flow and
exchanges the same credentials for bearer tokens from then on.

Typical workflow::

    provider = BasicOAuthProvider(memento, secrets, "my-registry")
    data = GenericRegistryV2DataProvider(memento, secrets)
    for repo in await data.get_repositories(registry):
        ...

Modules:
    auth: Credential lookup, challenge parsing, the Basic/OAuth provider.
    client: The HTTP request wrapper.
    registry: Registry V2 request helper and catalog/tag data providers.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and HTTP client factory.
    exceptions: Exception hierarchy.
"""

__version__ = "0.1.0"
