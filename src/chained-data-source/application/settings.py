"""Application settings configuration."""

import logging
import sys

from neuroglia.hosting.abstractions import ApplicationSettings


class Settings(ApplicationSettings):
    """Application settings with identity provider and chain execution configuration."""

    # Logging Configuration
    log_level: str = "INFO"

    # Application Configuration
    app_name: str = "Chained Data Source"
    app_version: str = "1.0.0"

    # Identity Provider Configuration
    identity_authority_url: str = "https://login.microsoftonline.com"
    tenant_scoped_auth: bool = True  # False uses the "common" authority
    identity_load_frame_timeout: float = 6.0  # Seconds allowed for one silent acquisition
    parallel_client_acquisition: bool = False  # Acquire tokens for distinct client ids concurrently
    # Client secrets keyed by client id, required by confidential client applications
    client_secrets: dict[str, str] = {}  # pragma: allowlist secret

    # Default client id lookup (tenant storage entity)
    default_client_id_storage_key: str = "ValoAadClientId"
    storage_entity_timeout: float = 10.0

    # Chain Execution Configuration
    chain_definition_path: str = "chain.yaml"
    chain_http_timeout: float = 30.0
    template_unauthenticated_links: bool = True  # False sends unauthenticated link URLs untemplated
    template_multi_placeholder: bool = False  # False substitutes only the leading placeholder

    # Identity context for command-line runs (normally supplied by the hosting shell)
    tenant_id: str = ""
    site_absolute_url: str = ""
    web_absolute_url: str = ""
    login_hint: str = ""
    user_assertion: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


app_settings = Settings()


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
