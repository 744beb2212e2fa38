"""Authentication phase of a chain execution.

Resolves every identity a chain needs before any link is executed:
1. Builds one authority configuration per client id and one login request
   per (client id, scope) pair
2. Creates one identity provider per client id
3. Acquires a token silently for every scope of that client id

Acquisition is best-effort. A failure for one scope is logged and recorded
and never stops acquisition for sibling scopes or other client ids; links
needing a scope without a token are later treated as unauthenticated.

A fresh AuthenticationContext is built for every run, so tokens never leak
from one top-level invocation into another.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx
from opentelemetry import trace

from domain.models import ChainLink, IdentityContext, LoginRequest
from infrastructure.adapters import IdentityProvider, IdentityProviderError, IdentityProviderFactory
from observability import token_acquisition_failures, token_acquisitions

from .identity_config_builder import DEFAULT_AUTHORITY_URL, LOAD_FRAME_TIMEOUT_SECONDS, IdentityConfigBuilder, IdentityConfiguration
from .scope_resolver import ScopeResolver
from .token_cache import TokenCache, TokenKey

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class AcquisitionOutcome:
    """Result of one silent acquisition attempt."""

    client_id: str
    scope: str
    succeeded: bool
    error: str | None = None


@dataclass
class AuthenticationContext:
    """Tokens and acquisition outcomes owned by one chain execution."""

    configuration: IdentityConfiguration = field(default_factory=IdentityConfiguration)
    token_cache: TokenCache = field(default_factory=TokenCache)
    outcomes: dict[TokenKey, AcquisitionOutcome] = field(default_factory=dict)

    def get_access_token(self, client_id: str, scope: str) -> str | None:
        return self.token_cache.get_access_token(client_id, scope)

    @property
    def acquired_any(self) -> bool:
        return len(self.token_cache) > 0

    def failed_pairs(self) -> list[TokenKey]:
        return [key for key, outcome in self.outcomes.items() if not outcome.succeeded]

    def record_success(self, client_id: str, scope: str) -> None:
        self.outcomes[(client_id, scope)] = AcquisitionOutcome(client_id=client_id, scope=scope, succeeded=True)

    def record_failure(self, client_id: str, scope: str, error: str) -> None:
        self.outcomes[(client_id, scope)] = AcquisitionOutcome(client_id=client_id, scope=scope, succeeded=False, error=error)


class AuthenticationPhase:
    """Acquires every token a chain needs, up front and best-effort."""

    def __init__(
        self,
        provider_factory: IdentityProviderFactory,
        scope_resolver: ScopeResolver | None = None,
        authority_url: str = DEFAULT_AUTHORITY_URL,
        tenant_scoped_auth: bool = True,
        load_frame_timeout: float = LOAD_FRAME_TIMEOUT_SECONDS,
        parallel_client_acquisition: bool = False,
    ):
        """Initialize the authentication phase.

        Args:
            provider_factory: Creates an identity provider for one client application
            scope_resolver: Scope resolver shared with the chain executor
            authority_url: Identity provider base URL
            tenant_scoped_auth: Use the tenant authority instead of "common"
            load_frame_timeout: Seconds allowed for a single silent acquisition
            parallel_client_acquisition: Acquire tokens for distinct client ids concurrently
        """
        self._provider_factory = provider_factory
        self._scope_resolver = scope_resolver or ScopeResolver()
        self._authority_url = authority_url
        self._tenant_scoped_auth = tenant_scoped_auth
        self._load_frame_timeout = load_frame_timeout
        self._parallel = parallel_client_acquisition

    async def run(
        self,
        links: Iterable[ChainLink],
        default_client_id: str,
        identity: IdentityContext,
    ) -> AuthenticationContext:
        """Build identity configurations and acquire tokens.

        Args:
            links: Chain links in configured order
            default_client_id: Client id used by links without an override
            identity: Caller identity and tenant context

        Returns:
            A new AuthenticationContext holding every token that was acquired
        """
        builder = IdentityConfigBuilder(
            scope_resolver=self._scope_resolver,
            authority_url=self._authority_url,
            tenant_scoped_auth=self._tenant_scoped_auth,
            load_frame_timeout=self._load_frame_timeout,
        )
        context = AuthenticationContext(configuration=builder.build(links, default_client_id, identity))
        client_ids = list(context.configuration.login_requests)

        with tracer.start_as_current_span("authentication_phase.run") as span:
            span.set_attribute("auth.client_count", len(client_ids))
            span.set_attribute("auth.scope_count", len(context.configuration.pairs()))
            span.set_attribute("auth.parallel", self._parallel)

            if self._parallel:
                await asyncio.gather(*(self._acquire_for_client(context, client_id, identity) for client_id in client_ids))
            else:
                for client_id in client_ids:
                    await self._acquire_for_client(context, client_id, identity)

            span.set_attribute("auth.tokens_acquired", len(context.token_cache))

        logger.info(f"Authentication phase completed: {len(context.token_cache)} token(s) acquired, {len(context.failed_pairs())} failure(s)")
        return context

    async def _acquire_for_client(self, context: AuthenticationContext, client_id: str, identity: IdentityContext) -> None:
        config = context.configuration.authorities[client_id]
        login_requests = context.configuration.login_requests[client_id]

        try:
            provider = self._provider_factory(config, identity)
        except Exception as e:
            logger.exception(f"Failed to create identity provider for client {client_id}")
            for scope in login_requests:
                context.record_failure(client_id, scope, f"Identity provider unavailable: {e}")
            return

        provider.register_redirect_handler(self._log_redirect_outcome)

        logger.debug(f"Calling acquire_token_silent() for client {client_id} ({len(login_requests)} scope(s))")
        for scope, request in login_requests.items():
            await self._acquire_scope(context, provider, client_id, scope, request)

    async def _acquire_scope(self, context: AuthenticationContext, provider: IdentityProvider, client_id: str, scope: str, request: LoginRequest) -> None:
        try:
            token = await provider.acquire_token_silent(request)
        except IdentityProviderError as e:
            logger.warning(f"Silent token acquisition failed for client {client_id}, scope {scope}: {e}")
            token_acquisition_failures.add(1, {"client_id": client_id, "error": e.error_code or "unknown"})
            context.record_failure(client_id, scope, str(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected error acquiring token for client {client_id}, scope {scope}")
            token_acquisition_failures.add(1, {"client_id": client_id, "error": "internal_error"})
            context.record_failure(client_id, scope, str(e))
            return

        context.token_cache.add_if_absent(client_id, scope, token)
        context.record_success(client_id, scope)
        token_acquisitions.add(1, {"client_id": client_id})
        logger.debug(f"Token acquired for client {client_id}, scope {scope}")

    @staticmethod
    def _log_redirect_outcome(error: str | None, response: httpx.Response | None) -> None:
        if error:
            logger.info(f"Identity redirect reported an error: {error}")
        elif response is not None:
            logger.info(f"Identity redirect response: {response.status_code} -> {response.headers.get('location', '')}")
