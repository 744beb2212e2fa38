"""Chain related enumerations."""

from enum import Enum


class HttpMethod(str, Enum):
    """HTTP method recorded on a chain link.

    The method is part of the chain configuration but execution always
    issues a GET.
    """

    GET = "GET"
    POST = "POST"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"
