from .chain_definition_store import ChainDefinitionStore

__all__ = ["ChainDefinitionStore"]
