"""Domain value objects for the Chained Data Source.

All configuration value objects use @dataclass(frozen=True) for immutability.
"""

from .chain_link import ChainDefinition, ChainLink
from .chain_result import ChainResult
from .identity import AccessToken, AuthorityConfig, IdentityContext, LoginRequest

__all__ = [
    "AccessToken",
    "AuthorityConfig",
    "ChainDefinition",
    "ChainLink",
    "ChainResult",
    "IdentityContext",
    "LoginRequest",
]
