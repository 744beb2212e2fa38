"""Application services package.

Contains the chain execution engine and its authentication phase.
"""

from .authentication_phase import AcquisitionOutcome, AuthenticationContext, AuthenticationPhase
from .chain_executor import ChainExecutor
from .chained_data_source import ChainedDataSource, DefaultClientIdLookup
from .identity_config_builder import IdentityConfigBuilder, IdentityConfiguration
from .scope_resolver import ScopeResolver
from .template_resolver import MISSING, TemplateResolution, TemplateResolver, lookup_path, parse_path
from .token_cache import TokenCache

__all__ = [
    # Resolvers
    "ScopeResolver",
    "TemplateResolver",
    "TemplateResolution",
    "MISSING",
    "lookup_path",
    "parse_path",
    # Authentication phase
    "TokenCache",
    "IdentityConfigBuilder",
    "IdentityConfiguration",
    "AuthenticationPhase",
    "AuthenticationContext",
    "AcquisitionOutcome",
    # Execution
    "ChainExecutor",
    "ChainedDataSource",
    "DefaultClientIdLookup",
]
