"""Domain layer for the Chained Data Source service."""
