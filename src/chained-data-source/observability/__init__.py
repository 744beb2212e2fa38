"""Observability utilities and metrics."""

from .metrics import chain_execution_time, chain_executions, chain_links_executed, token_acquisition_failures, token_acquisitions

__all__ = [
    # Chain metrics
    "chain_executions",
    "chain_links_executed",
    "chain_execution_time",
    # Authentication metrics
    "token_acquisitions",
    "token_acquisition_failures",
]
