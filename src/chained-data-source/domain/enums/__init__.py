"""Domain enumerations package."""

from .chain import HttpMethod

__all__ = [
    "HttpMethod",
]
