"""Application layer: chain execution services and commands."""
