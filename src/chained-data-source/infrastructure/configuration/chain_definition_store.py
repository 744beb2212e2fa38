"""File-based store for the chain definition.

The chain is authored externally (normally through the configuration UI)
and is read-only at execution time. This store loads it from a YAML file.

Usage:
    # chain.yaml
    chain:
      - apiUrl: https://graph.microsoft.com/v1.0/me
        method: GET
        authenticated: true
      - apiUrl: https://api.contoso.com/employees/{{0.employeeId}}
        authenticated: true
        clientId: 11111111-2222-3333-4444-555555555555
        resource: api://contoso-hr/user_impersonation
"""

import logging
import os
from pathlib import Path

import yaml

from domain.models import ChainDefinition

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_PATH = "chain.yaml"


class ChainDefinitionStore:
    """Loads the chain definition from a YAML file at startup."""

    def __init__(self, chain_path: str | Path | None = None):
        """Initialize the store.

        Args:
            chain_path: Path to the chain YAML file.
                        Can also be set via CHAIN_DEFINITION_PATH env var.
                        Defaults to chain.yaml relative to CWD.

        Raises:
            ValueError: If a configured link is invalid
        """
        if chain_path:
            self._path = Path(chain_path)
        elif os.environ.get("CHAIN_DEFINITION_PATH"):
            self._path = Path(os.environ["CHAIN_DEFINITION_PATH"])
        else:
            self._path = Path(DEFAULT_CHAIN_PATH)

        self._definition = ChainDefinition()
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get_definition(self) -> ChainDefinition:
        return self._definition

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning(f"Chain definition file not found: {self._path}. The chain will be empty.")
            return

        try:
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse chain definition file {self._path}: {e}")
            return

        if not isinstance(data, dict) or not isinstance(data.get("chain"), list):
            logger.warning(f"Chain definition file {self._path} has no 'chain' list or is empty")
            return

        self._definition = ChainDefinition.from_list(data["chain"])
        logger.info(f"Loaded {len(self._definition)} chain link(s) from {self._path}")
