"""Tests for identity value objects."""

import pytest

from domain.models import AccessToken, IdentityContext
from tests.fixtures.factories import IdentityContextFactory


class TestIdentityContext:
    """Test IdentityContext URL derivation and parsing."""

    def test_tenant_url_is_scheme_and_host(self) -> None:
        identity = IdentityContextFactory.create(site_absolute_url="https://contoso.sharepoint.com/sites/intranet/")

        assert identity.tenant_url == "https://contoso.sharepoint.com"

    def test_web_url_defaults_to_site_url(self) -> None:
        identity = IdentityContextFactory.create(site_absolute_url="https://contoso.sharepoint.com/sites/intranet/")

        assert identity.web_url == "https://contoso.sharepoint.com/sites/intranet"

    def test_web_url_prefers_web_absolute_url(self) -> None:
        identity = IdentityContextFactory.create(web_absolute_url="https://contoso.sharepoint.com/sites/intranet/news")

        assert identity.web_url == "https://contoso.sharepoint.com/sites/intranet/news"

    def test_from_dict_camel_case(self) -> None:
        identity = IdentityContext.from_dict(
            {
                "tenantId": "tenant-1",
                "siteAbsoluteUrl": "https://contoso.sharepoint.com/sites/a",
                "loginHint": "user@contoso.com",
                "userAssertion": "assertion",
            }
        )

        assert identity.tenant_id == "tenant-1"
        assert identity.login_hint == "user@contoso.com"
        assert identity.user_assertion == "assertion"
        assert identity.web_absolute_url is None

    def test_from_dict_empty_optional_values_become_none(self) -> None:
        identity = IdentityContext.from_dict({"tenant_id": "t", "site_absolute_url": "https://s", "web_absolute_url": "", "user_assertion": ""})

        assert identity.login_hint == ""
        assert identity.web_absolute_url is None
        assert identity.user_assertion is None

    def test_from_dict_requires_tenant_id(self) -> None:
        with pytest.raises(ValueError, match="tenant id"):
            IdentityContext.from_dict({"siteAbsoluteUrl": "https://s"})

    def test_from_dict_requires_site_url(self) -> None:
        with pytest.raises(ValueError, match="site absolute URL"):
            IdentityContext.from_dict({"tenantId": "t"})


class TestAccessToken:
    """Test AccessToken value object."""

    def test_defaults(self) -> None:
        token = AccessToken(access_token="t")

        assert token.token_type == "Bearer"
        assert token.scope is None

    def test_token_is_immutable(self) -> None:
        token = AccessToken(access_token="t")

        with pytest.raises(AttributeError):
            token.access_token = "other"  # type: ignore[misc]
