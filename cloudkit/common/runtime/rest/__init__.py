"""REST transport abstractions."""

from .response import ApiResponse
from .transport import AuthenticatedTransport, HTTPTransport, TokenProvider

__all__ = [
    "ApiResponse",
    "AuthenticatedTransport",
    "HTTPTransport",
    "TokenProvider",
]
