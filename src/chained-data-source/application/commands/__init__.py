from .execute_chain_command import ExecuteChainCommand, ExecuteChainCommandHandler

__all__ = [
    "ExecuteChainCommand",
    "ExecuteChainCommandHandler",
]
