"""Execute chain command with handler.

This command runs a chain once on behalf of the caller described by the
identity context, and returns every link's result in link order.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from neuroglia.core import OperationResult
from neuroglia.mediation import Command, CommandHandler
from opentelemetry import trace

from application.services import ChainedDataSource, DefaultClientIdLookup
from application.settings import Settings, app_settings
from domain.models import ChainDefinition, IdentityContext
from infrastructure.adapters import DefaultClientIdNotFoundError, DefaultClientIdProvider, IdentityProviderFactory
from infrastructure.configuration import ChainDefinitionStore

log = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ClientIdLookupFactory = Callable[[IdentityContext], DefaultClientIdLookup]


@dataclass
class ExecuteChainCommand(Command[OperationResult[dict[str, Any]]]):
    """Command to execute a chain for the calling user."""

    identity: dict[str, Any] = field(default_factory=dict)
    """Identity and tenant context (tenantId, siteAbsoluteUrl, loginHint, userAssertion...)."""

    chain: list[dict[str, Any]] | None = None
    """Chain links to execute; None uses the configured chain definition file."""


class ExecuteChainCommandHandler(CommandHandler[ExecuteChainCommand, OperationResult[dict[str, Any]]]):
    """Handler for executing a chain.

    This handler:
    1. Parses the identity context and the chain definition
    2. Resolves the default client id from the tenant storage entity
    3. Runs the authentication phase and the chain
    4. Returns `{"items": [...]}` as an OperationResult
    """

    def __init__(
        self,
        settings: Settings | None = None,
        provider_factory: IdentityProviderFactory | None = None,
        client_id_lookup_factory: ClientIdLookupFactory | None = None,
    ):
        self._settings = settings or app_settings
        self._provider_factory = provider_factory
        self._client_id_lookup_factory = client_id_lookup_factory or self._create_client_id_lookup

    async def handle_async(self, request: ExecuteChainCommand) -> OperationResult[dict[str, Any]]:
        """Handle the execute chain command."""
        command = request

        with tracer.start_as_current_span("execute_chain_command") as span:
            try:
                identity = IdentityContext.from_dict(command.identity)
                definition = self._load_definition(command.chain)
            except ValueError as e:
                log.warning(f"Invalid chain request: {e}")
                return self.bad_request(str(e))

            span.set_attribute("chain.length", len(definition))

            data_source = ChainedDataSource.from_settings(
                settings=self._settings,
                definition=definition,
                identity=identity,
                client_id_lookup=self._client_id_lookup_factory(identity),
                provider_factory=self._provider_factory,
            )

            try:
                result = await data_source.get_data()
            except DefaultClientIdNotFoundError as e:
                log.error(f"{e} ({e.reason})")
                return self.bad_request(str(e))

            return self.ok(result.to_dict())

    def _load_definition(self, chain: list[dict[str, Any]] | None) -> ChainDefinition:
        if chain is not None:
            return ChainDefinition.from_list(chain)
        return ChainDefinitionStore(self._settings.chain_definition_path).get_definition()

    def _create_client_id_lookup(self, identity: IdentityContext) -> DefaultClientIdLookup:
        return DefaultClientIdProvider(
            web_url=identity.web_url,
            storage_key=self._settings.default_client_id_storage_key,
            http_timeout=self._settings.storage_entity_timeout,
        )
