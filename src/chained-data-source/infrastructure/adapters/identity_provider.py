"""Identity providers for silent token acquisition.

An identity provider is bound to a single client application registration
(one AuthorityConfig) and acquires access tokens for it without user
interaction.

The shipped implementation uses the OAuth2 on-behalf-of flow: the caller's
own access token (the user assertion supplied by the hosting shell) is
exchanged at the tenant's token endpoint for a token scoped to the
requested resource.

Usage:
    provider = OnBehalfOfIdentityProvider(
        config=AuthorityConfig(
            client_id="11111111-2222-3333-4444-555555555555",
            authority="https://login.microsoftonline.com/<tenant-id>",
            redirect_uri="https://contoso.sharepoint.com/_layouts/images/blank.gif",
        ),
        user_assertion="eyJ...",
    )
    token = await provider.acquire_token_silent(
        LoginRequest(scopes=("https://graph.microsoft.com/user_impersonation",), login_hint="user@contoso.com"),
    )
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from opentelemetry import trace

from domain.models import AccessToken, AuthorityConfig, IdentityContext, LoginRequest

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

RedirectHandler = Callable[[str | None, httpx.Response | None], None]
IdentityProviderFactory = Callable[[AuthorityConfig, IdentityContext], "IdentityProvider"]

# Error codes meaning the user must interact with the identity provider
INTERACTION_REQUIRED_ERRORS = ("interaction_required", "login_required", "consent_required")


@dataclass
class IdentityProviderError(Exception):
    """Error during silent token acquisition.

    Attributes:
        message: Human-readable error message
        client_id: Client application the acquisition was made for
        error_code: OAuth2 error code (e.g., "invalid_grant", "interaction_required")
        error_description: Detailed error description from the identity provider
        status_code: HTTP status code
    """

    message: str
    client_id: str
    error_code: str | None = None
    error_description: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.append(f"[{self.error_code}]")
        if self.error_description:
            parts.append(f": {self.error_description}")
        parts.append(f"(client: {self.client_id})")
        return " ".join(parts)


class IdentityProvider(ABC):
    """Silent token acquisition for one client application."""

    def __init__(self, config: AuthorityConfig):
        self._config = config
        self._redirect_handler: RedirectHandler | None = None

    @property
    def config(self) -> AuthorityConfig:
        return self._config

    def register_redirect_handler(self, handler: RedirectHandler) -> None:
        """Register a callback for redirect / interaction outcomes.

        The handler receives `(error, response)`. Exceptions it raises are
        logged and never propagate into token acquisition.
        """
        self._redirect_handler = handler

    def _notify_redirect(self, error: str | None, response: httpx.Response | None) -> None:
        if self._redirect_handler is None:
            return
        try:
            self._redirect_handler(error, response)
        except Exception:
            logger.warning(f"Redirect handler failed for client {self._config.client_id}", exc_info=True)

    @abstractmethod
    async def acquire_token_silent(self, request: LoginRequest) -> AccessToken:
        """Acquire a token without user interaction.

        Args:
            request: Scopes and login hint for the token

        Returns:
            AccessToken for the requested scopes

        Raises:
            IdentityProviderError: If the token cannot be acquired silently
        """
        pass


class OnBehalfOfIdentityProvider(IdentityProvider):
    """Identity provider using the OAuth2 on-behalf-of (jwt-bearer) grant."""

    GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"

    def __init__(
        self,
        config: AuthorityConfig,
        user_assertion: str | None,
        client_secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            config: Authority configuration of the client application
            user_assertion: The caller's access token to exchange
            client_secret: Client secret for confidential client applications
            transport: Optional httpx transport (used to substitute the network in tests)
        """
        super().__init__(config)
        self._user_assertion = user_assertion
        self._client_secret = client_secret
        self._transport = transport

    @classmethod
    def factory(
        cls,
        client_secrets: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "IdentityProviderFactory":
        """Return a factory creating one provider per client application.

        Args:
            client_secrets: Client secrets keyed by client id
            transport: Optional httpx transport shared by created providers
        """
        secrets = dict(client_secrets or {})

        def create(config: AuthorityConfig, identity: IdentityContext) -> IdentityProvider:
            return cls(
                config=config,
                user_assertion=identity.user_assertion,
                client_secret=secrets.get(config.client_id),
                transport=transport,
            )

        return create

    @property
    def token_endpoint(self) -> str:
        return f"{self._config.authority.rstrip('/')}/oauth2/v2.0/token"

    async def acquire_token_silent(self, request: LoginRequest) -> AccessToken:
        client_id = self._config.client_id
        scope = " ".join(request.scopes)

        with tracer.start_as_current_span("identity_provider.acquire_token_silent") as span:
            span.set_attribute("identity.client_id", client_id)
            span.set_attribute("identity.scope", scope)

            if not self._user_assertion:
                raise IdentityProviderError(
                    message="No user assertion available for silent acquisition",
                    client_id=client_id,
                    error_code="login_required",
                )
            if not scope.strip():
                raise IdentityProviderError(message="No scope requested", client_id=client_id, error_code="invalid_scope")

            data: dict[str, str] = {
                "grant_type": self.GRANT_TYPE,
                "client_id": client_id,
                "assertion": self._user_assertion,
                "scope": scope,
                "requested_token_use": "on_behalf_of",
            }
            if self._client_secret:
                data["client_secret"] = self._client_secret

            logger.debug(f"Acquiring token silently: client_id={client_id}, scope={scope}, login_hint={request.login_hint}")

            try:
                async with httpx.AsyncClient(
                    timeout=self._config.load_frame_timeout,
                    transport=self._transport,
                    follow_redirects=False,
                    event_hooks={"response": [self._on_response]},
                ) as client:
                    response = await client.post(
                        self.token_endpoint,
                        data=data,
                        headers={"Content-Type": "application/x-www-form-urlencoded"},
                    )
            except httpx.TimeoutException:
                raise IdentityProviderError(
                    message=f"Silent token acquisition timed out after {self._config.load_frame_timeout}s",
                    client_id=client_id,
                )
            except httpx.RequestError as e:
                raise IdentityProviderError(
                    message=f"Token request failed: {e}",
                    client_id=client_id,
                )

            span.set_attribute("identity.status_code", response.status_code)
            if response.status_code == 200:
                return self._parse_token(response, client_id)

            error_data = self._parse_error(response)
            error_code = error_data.get("error")
            if error_code in INTERACTION_REQUIRED_ERRORS:
                self._notify_redirect(error_code, response)

            logger.warning(f"Silent token acquisition failed: status={response.status_code}, error={error_code}, client_id={client_id}")
            raise IdentityProviderError(
                message="Silent token acquisition failed",
                client_id=client_id,
                error_code=error_code,
                error_description=error_data.get("error_description"),
                status_code=response.status_code,
            )

    async def _on_response(self, response: httpx.Response) -> None:
        if response.is_redirect:
            self._notify_redirect(None, response)

    def _parse_token(self, response: httpx.Response, client_id: str) -> AccessToken:
        try:
            token_data = response.json()
            return AccessToken(
                access_token=token_data["access_token"],
                token_type=token_data.get("token_type", "Bearer"),
                scope=token_data.get("scope"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise IdentityProviderError(
                message=f"Invalid token response: {e}",
                client_id=client_id,
                status_code=response.status_code,
            )

    def _parse_error(self, response: httpx.Response) -> dict[str, Any]:
        try:
            error_data = response.json()
        except ValueError:
            logger.info("Failed to parse error response as JSON", exc_info=True)
            return {}
        return error_data if isinstance(error_data, dict) else {}
