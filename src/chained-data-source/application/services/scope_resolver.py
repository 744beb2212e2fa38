"""Scope resolution for chain links."""

from domain.models import ChainLink

HTTPS_SCHEME = "https://"
DEFAULT_SCOPE_SUFFIX = "user_impersonation"


class ScopeResolver:
    """Derives the OAuth scope a chain link needs.

    An explicit `resource` wins. Otherwise an absolute HTTPS URL yields
    `https://<host>/user_impersonation`. Anything else yields an empty
    string, which callers treat as "cannot authenticate this link".
    """

    def resolve(self, link: ChainLink) -> str:
        if link.resource:
            return link.resource

        api_url = link.api_url or ""
        if not api_url.lower().startswith(HTTPS_SCHEME):
            return ""

        path_start = api_url.find("/", len(HTTPS_SCHEME))
        origin = api_url if path_start == -1 else api_url[:path_start]
        if len(origin) == len(HTTPS_SCHEME):
            return ""
        return f"{origin}/{DEFAULT_SCOPE_SUFFIX}"
