"""Chained data source: the top-level chain operation.

Ties the phases of one invocation together:
1. Resolves the default client id (fatal when missing)
2. Runs the authentication phase once for the whole chain
3. Executes the chain against the resulting authentication context
"""

import logging
from typing import TYPE_CHECKING, Protocol

from opentelemetry import trace

from domain.models import ChainDefinition, ChainResult, IdentityContext
from infrastructure.adapters import IdentityProviderFactory, OnBehalfOfIdentityProvider

from .authentication_phase import AuthenticationPhase
from .chain_executor import ChainExecutor
from .scope_resolver import ScopeResolver
from .template_resolver import TemplateResolver

if TYPE_CHECKING:
    from application.settings import Settings

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class DefaultClientIdLookup(Protocol):
    """Consumed capability: resolves the process-wide default client id."""

    async def get_default_client_id(self) -> str: ...


class ChainedDataSource:
    """Executes a statically configured chain once per call to `get_data()`.

    Nothing is shared between invocations: every call builds its own
    authentication context and accumulator.
    """

    def __init__(
        self,
        definition: ChainDefinition,
        identity: IdentityContext,
        client_id_lookup: DefaultClientIdLookup,
        authentication_phase: AuthenticationPhase,
        chain_executor: ChainExecutor,
    ):
        self._definition = definition
        self._identity = identity
        self._client_id_lookup = client_id_lookup
        self._authentication_phase = authentication_phase
        self._chain_executor = chain_executor

    @property
    def definition(self) -> ChainDefinition:
        return self._definition

    async def get_data(self) -> ChainResult:
        """Run the chain.

        Returns:
            ChainResult with one item per configured link

        Raises:
            DefaultClientIdNotFoundError: If the default client id cannot be resolved
        """
        with tracer.start_as_current_span("chained_data_source.get_data") as span:
            span.set_attribute("chain.length", len(self._definition))

            default_client_id = await self._client_id_lookup.get_default_client_id()

            if not len(self._definition):
                logger.debug("Chain definition is empty, nothing to execute")
                return ChainResult(items=[])

            auth_context = await self._authentication_phase.run(self._definition, default_client_id, self._identity)
            if not auth_context.acquired_any:
                logger.info("No authentication performed")

            return await self._chain_executor.execute(self._definition, auth_context, default_client_id)

    execute = get_data

    @staticmethod
    def from_settings(
        settings: "Settings",
        definition: ChainDefinition,
        identity: IdentityContext,
        client_id_lookup: DefaultClientIdLookup,
        provider_factory: IdentityProviderFactory | None = None,
    ) -> "ChainedDataSource":
        """Wire a chained data source from application settings.

        Args:
            settings: Application settings
            definition: Chain to execute
            identity: Caller identity and tenant context
            client_id_lookup: Default client id lookup
            provider_factory: Identity provider factory (defaults to on-behalf-of providers)
        """
        scope_resolver = ScopeResolver()
        authentication_phase = AuthenticationPhase(
            provider_factory=provider_factory or OnBehalfOfIdentityProvider.factory(settings.client_secrets),
            scope_resolver=scope_resolver,
            authority_url=settings.identity_authority_url,
            tenant_scoped_auth=settings.tenant_scoped_auth,
            load_frame_timeout=settings.identity_load_frame_timeout,
            parallel_client_acquisition=settings.parallel_client_acquisition,
        )
        chain_executor = ChainExecutor(
            scope_resolver=scope_resolver,
            template_resolver=TemplateResolver(multi_placeholder=settings.template_multi_placeholder),
            http_timeout=settings.chain_http_timeout,
            template_unauthenticated_links=settings.template_unauthenticated_links,
        )
        return ChainedDataSource(
            definition=definition,
            identity=identity,
            client_id_lookup=client_id_lookup,
            authentication_phase=authentication_phase,
            chain_executor=chain_executor,
        )
