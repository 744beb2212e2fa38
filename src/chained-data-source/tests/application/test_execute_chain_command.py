"""Tests for ExecuteChainCommand handler."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from neuroglia.core import OperationResult

from application.commands import ExecuteChainCommand, ExecuteChainCommandHandler
from application.settings import Settings
from domain.models import AuthorityConfig, IdentityContext
from infrastructure.adapters import DefaultClientIdNotFoundError, DefaultClientIdProvider, IdentityProvider
from tests.fixtures.factories import DEFAULT_CLIENT_ID, StubIdentityProvider, StubProviderFactory

IDENTITY = {
    "tenantId": "tenant-1",
    "siteAbsoluteUrl": "https://contoso.sharepoint.com/sites/intranet",
    "loginHint": "adele.vance@contoso.com",
    "userAssertion": "assertion",
}


def lookup_returning(value: str) -> MagicMock:
    lookup = MagicMock()
    lookup.get_default_client_id = AsyncMock(return_value=value)
    return lookup


@pytest.mark.command
class TestExecuteChainCommand:
    """Test ExecuteChainCommand handler."""

    @pytest.fixture
    def provider_factory(self) -> StubProviderFactory:
        return StubProviderFactory()

    @pytest.fixture
    def handler(self, settings: Settings, provider_factory: StubProviderFactory) -> ExecuteChainCommandHandler:
        return ExecuteChainCommandHandler(
            settings=settings,
            provider_factory=provider_factory,
            client_id_lookup_factory=lambda identity: lookup_returning(DEFAULT_CLIENT_ID),
        )

    @pytest.mark.asyncio
    async def test_chain_without_reachable_links_returns_placeholders(self, handler: ExecuteChainCommandHandler) -> None:
        """Links with relative URLs fail at the HTTP layer and degrade to empty objects."""
        command = ExecuteChainCommand(identity=IDENTITY, chain=[{"apiUrl": "/relative/1"}, {"apiUrl": "/relative/2"}])

        result: OperationResult[Any] = await handler.handle_async(command)

        assert result.is_success
        assert result.status_code == 200
        assert result.data == {"items": [{}, {}]}

    @pytest.mark.asyncio
    async def test_empty_chain(self, handler: ExecuteChainCommandHandler) -> None:
        result = await handler.handle_async(ExecuteChainCommand(identity=IDENTITY, chain=[]))

        assert result.is_success
        assert result.data == {"items": []}

    @pytest.mark.asyncio
    async def test_uses_configured_chain_file(self, tmp_path, provider_factory: StubProviderFactory) -> None:
        chain_file = tmp_path / "chain.yaml"
        chain_file.write_text("chain:\n  - apiUrl: /relative/1\n    authenticated: true\n    resource: api://hr/.default\n")
        handler = ExecuteChainCommandHandler(
            settings=Settings(chain_definition_path=str(chain_file)),
            provider_factory=provider_factory,
            client_id_lookup_factory=lambda identity: lookup_returning(DEFAULT_CLIENT_ID),
        )

        result = await handler.handle_async(ExecuteChainCommand(identity=IDENTITY))

        assert result.is_success
        assert result.data == {"items": [{}]}
        assert provider_factory.providers[DEFAULT_CLIENT_ID].calls[0].scopes == ("api://hr/.default",)

    @pytest.mark.asyncio
    async def test_invalid_identity_is_a_bad_request(self, handler: ExecuteChainCommandHandler) -> None:
        result = await handler.handle_async(ExecuteChainCommand(identity={"siteAbsoluteUrl": "https://s"}, chain=[]))

        assert not result.is_success
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_chain_is_a_bad_request(self, handler: ExecuteChainCommandHandler) -> None:
        result = await handler.handle_async(ExecuteChainCommand(identity=IDENTITY, chain=[{"apiUrl": "https://a", "method": "TRACE"}]))

        assert not result.is_success
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_default_client_id_is_a_bad_request(self, settings: Settings) -> None:
        lookup = MagicMock()
        lookup.get_default_client_id = AsyncMock(side_effect=DefaultClientIdNotFoundError("ValoAadClientId", reason="status 404"))
        handler = ExecuteChainCommandHandler(settings=settings, provider_factory=StubProviderFactory(), client_id_lookup_factory=lambda identity: lookup)

        result = await handler.handle_async(ExecuteChainCommand(identity=IDENTITY, chain=[{"apiUrl": "https://a/x"}]))

        assert not result.is_success
        assert result.status_code == 400
        assert "Storage entity ValoAadClientId was not found" in (result.error_message or "")

    @pytest.mark.asyncio
    async def test_provider_receives_caller_identity(self, settings: Settings) -> None:
        received: list[IdentityContext] = []

        def factory(config: AuthorityConfig, identity: IdentityContext) -> IdentityProvider:
            received.append(identity)
            return StubIdentityProvider(config)

        handler = ExecuteChainCommandHandler(settings=settings, provider_factory=factory, client_id_lookup_factory=lambda identity: lookup_returning("c1"))

        await handler.handle_async(ExecuteChainCommand(identity=IDENTITY, chain=[{"apiUrl": "/me", "authenticated": True, "resource": "api://graph/.default"}]))

        assert received[0].user_assertion == "assertion"
        assert received[0].tenant_id == "tenant-1"

    def test_default_client_id_lookup_targets_web_storage_entity(self, settings: Settings) -> None:
        handler = ExecuteChainCommandHandler(settings=settings)
        identity = IdentityContext.from_dict({**IDENTITY, "webAbsoluteUrl": "https://contoso.sharepoint.com/sites/intranet/news"})

        lookup = handler._create_client_id_lookup(identity)

        assert isinstance(lookup, DefaultClientIdProvider)
        assert lookup.storage_entity_url == "https://contoso.sharepoint.com/sites/intranet/news/_api/web/GetStorageEntity('ValoAadClientId')"
