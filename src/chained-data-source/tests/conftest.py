"""Pytest configuration and shared fixtures for all tests.

This module provides:
- Test configuration and markers
- Shared fixtures for chain links, identity contexts and settings
"""

import pytest
from _pytest.config import Config

from application.services import AuthenticationContext, TokenCache
from application.settings import Settings
from domain.models import IdentityContext
from tests.fixtures.factories import DEFAULT_CLIENT_ID, IdentityContextFactory, TokenFactory

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config: Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (may use external services)")
    config.addinivalue_line("markers", "asyncio: Async tests")
    config.addinivalue_line("markers", "auth: Authentication/token acquisition tests")
    config.addinivalue_line("markers", "command: Command handler tests")


# ============================================================================
# IDENTITY FIXTURES
# ============================================================================


@pytest.fixture
def identity() -> IdentityContext:
    """Provide a caller identity for a SharePoint tenant."""
    return IdentityContextFactory.create()


@pytest.fixture
def default_client_id() -> str:
    return DEFAULT_CLIENT_ID


@pytest.fixture
def empty_auth_context() -> AuthenticationContext:
    """Authentication context in which no token was acquired."""
    return AuthenticationContext()


@pytest.fixture
def auth_context_with_token() -> AuthenticationContext:
    """Authentication context holding one token for the Graph scope of the default client."""
    cache = TokenCache()
    cache.add_if_absent(DEFAULT_CLIENT_ID, "https://graph.example.com/user_impersonation", TokenFactory.create(access_token="graph-token"))
    return AuthenticationContext(token_cache=cache)


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment's chain file."""
    return Settings(chain_definition_path="does-not-exist.yaml")
