"""Identity configuration for the authentication phase.

Derives, for every (client id, scope) pair a chain needs, the authority
configuration and the silent login request used to acquire its token.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from domain.models import AuthorityConfig, ChainLink, IdentityContext, LoginRequest

from .scope_resolver import ScopeResolver

logger = logging.getLogger(__name__)

DEFAULT_AUTHORITY_URL = "https://login.microsoftonline.com"
REDIRECT_PAGE_PATH = "/_layouts/images/blank.gif"
LOAD_FRAME_TIMEOUT_SECONDS = 6.0


@dataclass
class IdentityConfiguration:
    """Authority configs per client id and login requests per (client id, scope)."""

    authorities: dict[str, AuthorityConfig] = field(default_factory=dict)
    login_requests: dict[str, dict[str, LoginRequest]] = field(default_factory=dict)

    def pairs(self) -> list[tuple[str, str]]:
        """All registered (client id, scope) pairs, in registration order."""
        return [(client_id, scope) for client_id, requests in self.login_requests.items() for scope in requests]


class IdentityConfigBuilder:
    """Builds a de-duplicated identity configuration for a chain.

    Entries are keyed by client id and scope, so building repeatedly with
    the same inputs never creates duplicates.
    """

    def __init__(
        self,
        scope_resolver: ScopeResolver | None = None,
        authority_url: str = DEFAULT_AUTHORITY_URL,
        tenant_scoped_auth: bool = True,
        load_frame_timeout: float = LOAD_FRAME_TIMEOUT_SECONDS,
    ):
        self._scope_resolver = scope_resolver or ScopeResolver()
        self._authority_url = authority_url.rstrip("/")
        self._tenant_scoped_auth = tenant_scoped_auth
        self._load_frame_timeout = load_frame_timeout
        self._configuration = IdentityConfiguration()

    @property
    def configuration(self) -> IdentityConfiguration:
        return self._configuration

    def build(
        self,
        links: Iterable[ChainLink],
        default_client_id: str,
        identity: IdentityContext,
    ) -> IdentityConfiguration:
        """Register the authority and login request every link needs.

        Args:
            links: Chain links in configured order
            default_client_id: Client id used by links without an override
            identity: Caller identity and tenant context

        Returns:
            The builder's identity configuration
        """
        for link in links:
            client_id = link.effective_client_id(default_client_id)
            scope = self._scope_resolver.resolve(link)
            if not scope:
                logger.debug(f"No scope can be derived for {link.api_url}, skipping identity configuration")
                continue

            self._ensure_authority(client_id, identity)
            self._ensure_login_request(client_id, scope, identity.login_hint)
            logger.debug(f"Identity scope registered: client_id={client_id}, scope={scope}, login_hint={identity.login_hint}")

        return self._configuration

    def _ensure_authority(self, client_id: str, identity: IdentityContext) -> AuthorityConfig:
        tenant = identity.tenant_id if self._tenant_scoped_auth else "common"
        return self._configuration.authorities.setdefault(
            client_id,
            AuthorityConfig(
                client_id=client_id,
                authority=f"{self._authority_url}/{tenant}",
                redirect_uri=f"{identity.tenant_url}{REDIRECT_PAGE_PATH}",
                load_frame_timeout=self._load_frame_timeout,
            ),
        )

    def _ensure_login_request(self, client_id: str, scope: str, login_hint: str) -> LoginRequest:
        requests = self._configuration.login_requests.setdefault(client_id, {})
        return requests.setdefault(scope, LoginRequest(scopes=(scope,), login_hint=login_hint))
