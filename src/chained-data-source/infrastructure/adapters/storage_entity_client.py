"""Default client id lookup from the tenant storage entity.

The default client application id used by chain links without an explicit
override is stored as a tenant property (storage entity) on the site.
"""

import logging

import httpx
from opentelemetry import trace

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_STORAGE_KEY = "ValoAadClientId"


class ChainedDataSourceError(Exception):
    """Base error for fatal chained data source failures."""


class DefaultClientIdNotFoundError(ChainedDataSourceError):
    """The default client id storage entity is missing or empty."""

    def __init__(self, storage_key: str, reason: str | None = None):
        self.storage_key = storage_key
        self.reason = reason
        super().__init__(f"Storage entity {storage_key} was not found")


class DefaultClientIdProvider:
    """Reads the default client application id from a web's storage entity."""

    def __init__(
        self,
        web_url: str,
        storage_key: str = DEFAULT_STORAGE_KEY,
        access_token: str | None = None,
        http_timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the lookup.

        Args:
            web_url: Absolute URL of the web holding the storage entity
            storage_key: Storage entity key
            access_token: Optional bearer token for the site
            http_timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (used to substitute the network in tests)
        """
        self._web_url = web_url.rstrip("/")
        self._storage_key = storage_key
        self._access_token = access_token
        self._http_timeout = http_timeout
        self._transport = transport

    @property
    def storage_entity_url(self) -> str:
        return f"{self._web_url}/_api/web/GetStorageEntity('{self._storage_key}')"

    async def get_default_client_id(self) -> str:
        """Look up the default client id.

        Returns:
            The storage entity value

        Raises:
            DefaultClientIdNotFoundError: If the entity is missing, empty or unreadable
        """
        with tracer.start_as_current_span("storage_entity.get_default_client_id") as span:
            span.set_attribute("storage_entity.key", self._storage_key)

            headers = {"Accept": "application/json;odata=nometadata"}
            if self._access_token:
                headers["Authorization"] = f"Bearer {self._access_token}"

            try:
                async with httpx.AsyncClient(timeout=self._http_timeout, transport=self._transport) as client:
                    response = await client.get(self.storage_entity_url, headers=headers)
            except httpx.HTTPError as e:
                raise DefaultClientIdNotFoundError(self._storage_key, reason=f"request failed: {e}")

            if not response.is_success:
                raise DefaultClientIdNotFoundError(self._storage_key, reason=f"status {response.status_code}")

            try:
                entity = response.json()
            except ValueError:
                raise DefaultClientIdNotFoundError(self._storage_key, reason="response is not JSON")

            value = entity.get("Value") if isinstance(entity, dict) else None
            if not value:
                raise DefaultClientIdNotFoundError(self._storage_key, reason="entity has no value")

            logger.debug(f"Default client id resolved from storage entity {self._storage_key}")
            return str(value)
