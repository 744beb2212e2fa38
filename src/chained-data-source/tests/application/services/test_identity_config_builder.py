"""Tests for IdentityConfigBuilder."""

import pytest

from application.services import IdentityConfigBuilder
from domain.models import IdentityContext, LoginRequest
from tests.fixtures.factories import DEFAULT_CLIENT_ID, TENANT_ID, ChainLinkFactory

GRAPH_SCOPE = "https://graph.example.com/user_impersonation"


class TestIdentityConfigBuilder:
    """Test authority and login request registration."""

    @pytest.fixture
    def builder(self) -> IdentityConfigBuilder:
        return IdentityConfigBuilder()

    def test_registers_authority_and_login_request(self, builder: IdentityConfigBuilder, identity: IdentityContext) -> None:
        links = [ChainLinkFactory.create_authenticated()]

        configuration = builder.build(links, DEFAULT_CLIENT_ID, identity)

        authority = configuration.authorities[DEFAULT_CLIENT_ID]
        assert authority.client_id == DEFAULT_CLIENT_ID
        assert authority.authority == f"https://login.microsoftonline.com/{TENANT_ID}"
        assert authority.redirect_uri == "https://contoso.sharepoint.com/_layouts/images/blank.gif"
        assert authority.load_frame_timeout == 6.0
        assert configuration.login_requests[DEFAULT_CLIENT_ID][GRAPH_SCOPE] == LoginRequest(scopes=(GRAPH_SCOPE,), login_hint=identity.login_hint)

    def test_deduplicates_by_client_and_scope(self, builder: IdentityConfigBuilder, identity: IdentityContext) -> None:
        links = [
            ChainLinkFactory.create_authenticated("https://graph.example.com/v1/me"),
            ChainLinkFactory.create_authenticated("https://graph.example.com/v1/me/manager"),
            ChainLinkFactory.create_authenticated("https://api.contoso.com/items"),
        ]

        configuration = builder.build(links, DEFAULT_CLIENT_ID, identity)

        assert list(configuration.authorities) == [DEFAULT_CLIENT_ID]
        assert configuration.pairs() == [
            (DEFAULT_CLIENT_ID, GRAPH_SCOPE),
            (DEFAULT_CLIENT_ID, "https://api.contoso.com/user_impersonation"),
        ]

    def test_building_twice_is_idempotent(self, builder: IdentityConfigBuilder, identity: IdentityContext) -> None:
        links = [ChainLinkFactory.create_authenticated(), ChainLinkFactory.create_authenticated(client_id="hr-client")]

        first = builder.build(links, DEFAULT_CLIENT_ID, identity)
        first_authority = first.authorities[DEFAULT_CLIENT_ID]
        second = builder.build(links, DEFAULT_CLIENT_ID, identity)

        assert second is first
        assert len(second.authorities) == 2
        assert len(second.pairs()) == 2
        assert second.authorities[DEFAULT_CLIENT_ID] is first_authority

    def test_client_id_override_gets_its_own_authority(self, builder: IdentityConfigBuilder, identity: IdentityContext) -> None:
        links = [
            ChainLinkFactory.create_authenticated(),
            ChainLinkFactory.create_authenticated(client_id="hr-client", resource="api://contoso-hr/.default"),
        ]

        configuration = builder.build(links, DEFAULT_CLIENT_ID, identity)

        assert set(configuration.authorities) == {DEFAULT_CLIENT_ID, "hr-client"}
        assert list(configuration.login_requests["hr-client"]) == ["api://contoso-hr/.default"]

    def test_links_without_scope_are_skipped(self, builder: IdentityConfigBuilder, identity: IdentityContext) -> None:
        links = [ChainLinkFactory.create_authenticated("http://intranet/api")]

        configuration = builder.build(links, DEFAULT_CLIENT_ID, identity)

        assert configuration.authorities == {}
        assert configuration.pairs() == []

    def test_common_authority_when_not_tenant_scoped(self, identity: IdentityContext) -> None:
        builder = IdentityConfigBuilder(authority_url="https://login.example.com/", tenant_scoped_auth=False, load_frame_timeout=2.5)

        configuration = builder.build([ChainLinkFactory.create_authenticated()], DEFAULT_CLIENT_ID, identity)

        authority = configuration.authorities[DEFAULT_CLIENT_ID]
        assert authority.authority == "https://login.example.com/common"
        assert authority.load_frame_timeout == 2.5
