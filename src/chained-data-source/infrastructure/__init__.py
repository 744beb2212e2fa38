"""Infrastructure layer for identity, storage and configuration access."""

from .adapters import (
    ChainedDataSourceError,
    DefaultClientIdNotFoundError,
    DefaultClientIdProvider,
    IdentityProvider,
    IdentityProviderError,
    IdentityProviderFactory,
    OnBehalfOfIdentityProvider,
    RedirectHandler,
)
from .configuration import ChainDefinitionStore

__all__ = [
    # Identity
    "IdentityProvider",
    "IdentityProviderError",
    "IdentityProviderFactory",
    "OnBehalfOfIdentityProvider",
    "RedirectHandler",
    # Default client id lookup
    "ChainedDataSourceError",
    "DefaultClientIdNotFoundError",
    "DefaultClientIdProvider",
    # Configuration
    "ChainDefinitionStore",
]
