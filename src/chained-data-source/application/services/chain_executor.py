"""Chain Executor service.

Executes a chain definition link by link:
1. Looks up the link's token when it is authenticated
2. Resolves `{{path}}` placeholders against the results accumulated so far
3. Issues an HTTP GET to the resolved URL, following redirects
4. Appends the decoded JSON body, or an empty object when anything failed

Links run strictly in order because a link's URL may depend on the
results of every link before it. A failing link never aborts the chain.
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

import httpx
from opentelemetry import trace

from domain.models import ChainLink, ChainResult
from observability import chain_execution_time, chain_executions, chain_links_executed

from .authentication_phase import AuthenticationContext
from .scope_resolver import ScopeResolver
from .template_resolver import TemplateResolver

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Maximum length for logged response bodies
MAX_LOG_BODY_LENGTH = 500

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class ChainExecutor:
    """Runs the execution phase of a chain against an authentication context.

    Example Usage:
        executor = ChainExecutor()
        result = await executor.execute(
            links=definition,
            auth_context=context,
            default_client_id="11111111-2222-3333-4444-555555555555",
        )
        result.items  # one entry per link
    """

    def __init__(
        self,
        scope_resolver: ScopeResolver | None = None,
        template_resolver: TemplateResolver | None = None,
        http_timeout: float = 30.0,
        template_unauthenticated_links: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the chain executor.

        Args:
            scope_resolver: Resolves the scope whose token a link needs
            template_resolver: Resolves placeholders in link URLs
            http_timeout: HTTP timeout per link in seconds
            template_unauthenticated_links: Template unauthenticated link URLs too;
                when False they are sent exactly as configured
            transport: Optional httpx transport (used to substitute the network in tests)
        """
        self._scope_resolver = scope_resolver or ScopeResolver()
        self._template_resolver = template_resolver or TemplateResolver()
        self._http_timeout = http_timeout
        self._template_unauthenticated_links = template_unauthenticated_links
        self._transport = transport

    async def execute(
        self,
        links: Iterable[ChainLink],
        auth_context: AuthenticationContext,
        default_client_id: str,
    ) -> ChainResult:
        """Execute every link in order.

        Args:
            links: Chain links in configured order
            auth_context: Tokens acquired by the authentication phase
            default_client_id: Client id used by links without an override

        Returns:
            ChainResult with one item per link
        """
        start_time = time.time()
        items: list[Any] = []

        with tracer.start_as_current_span("execute_chain") as span:
            chain_executions.add(1)

            async with httpx.AsyncClient(timeout=self._http_timeout, transport=self._transport, follow_redirects=True) as client:
                for index, link in enumerate(links):
                    item = await self._execute_link(client, index, link, items, auth_context, default_client_id)
                    items.append(item)

            execution_time_ms = (time.time() - start_time) * 1000
            span.set_attribute("chain.link_count", len(items))
            span.set_attribute("chain.execution_time_ms", execution_time_ms)
            chain_execution_time.record(execution_time_ms)

        logger.info(f"Chain executed: {len(items)} link(s) in {execution_time_ms:.1f}ms")
        return ChainResult(items=items)

    async def _execute_link(
        self,
        client: httpx.AsyncClient,
        index: int,
        link: ChainLink,
        accumulator: list[Any],
        auth_context: AuthenticationContext,
        default_client_id: str,
    ) -> Any:
        with tracer.start_as_current_span("execute_chain_link") as span:
            span.set_attribute("chain.link_index", index)
            span.set_attribute("chain.link_authenticated", link.authenticated)

            headers = dict(JSON_HEADERS)
            if link.authenticated:
                client_id = link.effective_client_id(default_client_id)
                scope = self._scope_resolver.resolve(link)
                bearer = auth_context.get_access_token(client_id, scope)
                if not bearer:
                    logger.info(f"Link #{index} needs a token for client {client_id}, scope '{scope}' but none was acquired")
                    return self._placeholder(span, "missing_token")
                headers["Authorization"] = f"Bearer {bearer}"

            url = link.api_url
            if link.authenticated or self._template_unauthenticated_links:
                resolution = self._template_resolver.resolve_with_status(link.api_url, accumulator)
                if not resolution.complete:
                    logger.info(f"Link #{index} depends on a value that earlier links did not return: {link.api_url}")
                    return self._placeholder(span, "unresolved_template")
                url = resolution.value

            return await self._fetch(client, index, url, headers, span)

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        index: int,
        url: str,
        headers: dict[str, str],
        span: trace.Span,
    ) -> Any:
        self._log_request(url, headers)

        try:
            response = await client.get(url, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Link #{index} request failed: {e}")
            return self._placeholder(span, "request_error")

        self._log_response(response)
        span.set_attribute("chain.link_status_code", response.status_code)

        if not response.is_success:
            logger.info(f"Link #{index} returned status {response.status_code}")
            return self._placeholder(span, "http_error")

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Link #{index} returned a body that is not JSON")
            return self._placeholder(span, "invalid_json")

        chain_links_executed.add(1, {"outcome": "success"})
        span.set_attribute("chain.link_outcome", "success")
        return data

    @staticmethod
    def _placeholder(span: trace.Span, outcome: str) -> dict:
        chain_links_executed.add(1, {"outcome": outcome})
        span.set_attribute("chain.link_outcome", outcome)
        return {}

    def _log_request(self, url: str, headers: dict[str, str]) -> None:
        """Log request details at DEBUG level, masking the bearer token."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        safe_headers = {k: ("Bearer ***" if k.lower() == "authorization" else v) for k, v in headers.items()}
        logger.debug(f"Chain request: GET {url}\nHeaders: {safe_headers}")

    def _log_response(self, response: httpx.Response) -> None:
        """Log response details at DEBUG level with truncation."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        body = response.text
        truncated_body = body[:MAX_LOG_BODY_LENGTH]
        if len(body) > MAX_LOG_BODY_LENGTH:
            truncated_body += f"... ({len(body)} bytes total)"

        logger.debug(f"Chain response: {response.status_code} {response.url}\nBody: {truncated_body}")
