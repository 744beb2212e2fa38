"""Command-line entry point: executes the configured chain once.

The identity context normally comes from the hosting shell; here it is
read from settings (environment variables or `.env`).

Usage:
    CHAIN_DEFINITION_PATH=chain.yaml TENANT_ID=... SITE_ABSOLUTE_URL=... python main.py
"""

import asyncio
import json
import logging
import sys

from application.commands import ExecuteChainCommand, ExecuteChainCommandHandler
from application.settings import app_settings, configure_logging

configure_logging(log_level=app_settings.log_level)
log = logging.getLogger(__name__)


async def run() -> int:
    """Execute the chain and print its items as JSON."""
    log.info(f"🚀 Running {app_settings.app_name} v{app_settings.app_version}")

    command = ExecuteChainCommand(
        identity={
            "tenant_id": app_settings.tenant_id,
            "site_absolute_url": app_settings.site_absolute_url,
            "web_absolute_url": app_settings.web_absolute_url,
            "login_hint": app_settings.login_hint,
            "user_assertion": app_settings.user_assertion,
        },
    )
    result = await ExecuteChainCommandHandler(settings=app_settings).handle_async(command)

    if not result.is_success:
        log.error(f"❌ Chain execution failed: {result.error_message}")
        return 1

    print(json.dumps(result.data, indent=2))
    log.info("✅ Chain executed successfully")
    return 0


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
