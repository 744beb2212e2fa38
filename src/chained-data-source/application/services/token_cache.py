"""Per-invocation token cache keyed by (client id, scope)."""

from collections.abc import Iterator

from domain.models import AccessToken

TokenKey = tuple[str, str]


class TokenCache:
    """Mapping from (client id, scope) to an acquired access token.

    Insert-if-absent: the first token stored for a key is kept. Inserts
    never await, so they are atomic per key within one event loop.
    """

    def __init__(self) -> None:
        self._tokens: dict[TokenKey, AccessToken] = {}

    def add_if_absent(self, client_id: str, scope: str, token: AccessToken) -> bool:
        """Store a token unless one already exists for the key.

        Returns:
            True if the token was stored
        """
        key = (client_id, scope)
        if key in self._tokens:
            return False
        self._tokens[key] = token
        return True

    def get(self, client_id: str, scope: str) -> AccessToken | None:
        return self._tokens.get((client_id, scope))

    def get_access_token(self, client_id: str, scope: str) -> str | None:
        """Return the bearer string for a key, or None if no token was acquired."""
        token = self.get(client_id, scope)
        return token.access_token if token else None

    def keys(self) -> list[TokenKey]:
        return list(self._tokens)

    def __contains__(self, key: object) -> bool:
        return key in self._tokens

    def __iter__(self) -> Iterator[TokenKey]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)
