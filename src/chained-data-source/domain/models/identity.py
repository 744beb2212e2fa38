"""Identity value objects used by the authentication phase."""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit


@dataclass(frozen=True)
class IdentityContext:
    """Caller identity and tenant context supplied by the hosting shell.

    Attributes:
        tenant_id: Directory (tenant) identifier
        site_absolute_url: Absolute URL of the current site
        login_hint: Login name of the current user
        web_absolute_url: Absolute URL of the current web (defaults to the site URL)
        user_assertion: The caller's own access token, used for silent
            on-behalf-of acquisition
    """

    tenant_id: str
    site_absolute_url: str
    login_hint: str
    web_absolute_url: Optional[str] = None
    user_assertion: Optional[str] = None

    @property
    def tenant_url(self) -> str:
        """Scheme and host of the site, e.g. `https://contoso.sharepoint.com`."""
        parts = urlsplit(self.site_absolute_url)
        if not parts.scheme or not parts.netloc:
            return self.site_absolute_url.rstrip("/")
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def web_url(self) -> str:
        return (self.web_absolute_url or self.site_absolute_url).rstrip("/")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IdentityContext":
        """Deserialize from a mapping (camelCase or snake_case keys).

        Raises:
            ValueError: If the tenant id or site URL is missing
        """
        tenant_id = data.get("tenantId", data.get("tenant_id"))
        site_url = data.get("siteAbsoluteUrl", data.get("site_absolute_url"))
        if not tenant_id:
            raise ValueError("Identity context requires a tenant id")
        if not site_url:
            raise ValueError("Identity context requires a site absolute URL")
        return cls(
            tenant_id=tenant_id,
            site_absolute_url=site_url,
            login_hint=data.get("loginHint", data.get("login_hint")) or "",
            web_absolute_url=data.get("webAbsoluteUrl", data.get("web_absolute_url")) or None,
            user_assertion=data.get("userAssertion", data.get("user_assertion")) or None,
        )


@dataclass(frozen=True)
class AuthorityConfig:
    """Configuration needed to create an identity provider for one client application."""

    client_id: str
    authority: str
    redirect_uri: str
    load_frame_timeout: float = 6.0  # seconds


@dataclass(frozen=True)
class LoginRequest:
    """Silent token request for one (client id, scope) pair."""

    scopes: tuple[str, ...]
    login_hint: str = ""


@dataclass(frozen=True)
class AccessToken:
    """Access token returned by an identity provider.

    Held for the duration of one chain invocation.

    Attributes:
        access_token: The bearer credential
        token_type: Token type (usually "Bearer")
        scope: Granted scopes (space-separated string)
    """

    access_token: str
    token_type: str = "Bearer"
    scope: str | None = None
