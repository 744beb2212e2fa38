"""ChainLink and ChainDefinition value objects.

A chain link is one configured API call. The chain definition is the
ordered sequence of links; its order defines both execution order and the
positions later links use to reference earlier results.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

from domain.enums import HttpMethod


@dataclass(frozen=True)
class ChainLink:
    """One configured step of a chain.

    Immutable once loaded. `method` is recorded for the configuration
    surface but execution always issues a GET.
    """

    api_url: str  # May contain {{path}} placeholders
    method: HttpMethod = HttpMethod.GET
    authenticated: bool = False

    # Optional overrides; fall back to the default client id / derived scope
    client_id: Optional[str] = None
    resource: Optional[str] = None

    def effective_client_id(self, default_client_id: str) -> str:
        """Return the link's client id override or the default."""
        return self.client_id or default_client_id

    def to_dict(self) -> dict:
        """Serialize using the configuration surface's key names."""
        return {
            "apiUrl": self.api_url,
            "method": self.method.value,
            "authenticated": self.authenticated,
            "clientId": self.client_id,
            "resource": self.resource,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChainLink":
        """Deserialize from a configuration mapping.

        Accepts both the camelCase keys written by the configuration UI
        (`apiUrl`, `clientId`) and snake_case equivalents.

        Raises:
            ValueError: If the API URL is missing, the method is unknown or
                `authenticated` is not a boolean
        """
        api_url = data.get("apiUrl", data.get("api_url"))
        if not api_url or not isinstance(api_url, str):
            raise ValueError("Chain link requires a non-empty 'apiUrl'")

        method_value = data.get("method") or HttpMethod.GET.value
        try:
            method = HttpMethod(str(method_value).upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method: {method_value}")

        authenticated = data.get("authenticated")
        if authenticated is None:
            authenticated = False
        if not isinstance(authenticated, bool):
            raise ValueError(f"Chain link 'authenticated' must be a boolean, got {authenticated!r}")

        return cls(
            api_url=api_url,
            method=method,
            authenticated=authenticated,
            client_id=data.get("clientId", data.get("client_id")) or None,
            resource=data.get("resource") or None,
        )


@dataclass(frozen=True)
class ChainDefinition:
    """Ordered, read-only sequence of chain links."""

    links: tuple[ChainLink, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[ChainLink]:
        return iter(self.links)

    def __len__(self) -> int:
        return len(self.links)

    def __getitem__(self, index: int) -> ChainLink:
        return self.links[index]

    def to_list(self) -> list[dict]:
        return [link.to_dict() for link in self.links]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]] | None) -> "ChainDefinition":
        """Build a definition from a list of link mappings.

        Raises:
            ValueError: If an entry is not a mapping or is not a valid link
        """
        links: list[ChainLink] = []
        for index, item in enumerate(data or []):
            if not isinstance(item, dict):
                raise ValueError(f"Chain link #{index} must be a mapping, got {type(item).__name__}")
            try:
                links.append(ChainLink.from_dict(item))
            except ValueError as e:
                raise ValueError(f"Chain link #{index} is invalid: {e}")
        return cls(links=tuple(links))
