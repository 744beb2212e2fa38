"""Infrastructure adapters package.

Contains adapters for external service integrations:
- OnBehalfOfIdentityProvider: Silent token acquisition for a client application
- DefaultClientIdProvider: Default client id lookup from the tenant storage entity
"""

from .identity_provider import IdentityProvider, IdentityProviderError, IdentityProviderFactory, OnBehalfOfIdentityProvider, RedirectHandler
from .storage_entity_client import ChainedDataSourceError, DefaultClientIdNotFoundError, DefaultClientIdProvider

__all__ = [
    "IdentityProvider",
    "IdentityProviderError",
    "IdentityProviderFactory",
    "OnBehalfOfIdentityProvider",
    "RedirectHandler",
    "ChainedDataSourceError",
    "DefaultClientIdNotFoundError",
    "DefaultClientIdProvider",
]
