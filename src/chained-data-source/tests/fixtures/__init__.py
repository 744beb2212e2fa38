"""Test fixtures package."""

from .factories import (
    ChainLinkFactory,
    IdentityContextFactory,
    MockUpstream,
    StubIdentityProvider,
    StubProviderFactory,
    TokenFactory,
)

__all__ = [
    "ChainLinkFactory",
    "IdentityContextFactory",
    "MockUpstream",
    "StubIdentityProvider",
    "StubProviderFactory",
    "TokenFactory",
]
