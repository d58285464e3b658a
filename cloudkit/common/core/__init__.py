"""Core components."""

from .exceptions import (
    NOT_FOUND,
    ApiError,
    CloudError,
    ConfigurationError,
    MissingProjectIdError,
)
from .interceptors import (
    FunctionInterceptor,
    Interceptor,
    apply_interceptors,
    compose_interceptors,
)
from .request import RequestOptions, deep_merge
from .uri import collapse_colon_verbs, join_segments, trim_slashes

__all__ = [
    "NOT_FOUND",
    "ApiError",
    "CloudError",
    "ConfigurationError",
    "MissingProjectIdError",
    "FunctionInterceptor",
    "Interceptor",
    "apply_interceptors",
    "compose_interceptors",
    "RequestOptions",
    "deep_merge",
    "collapse_colon_verbs",
    "join_segments",
    "trim_slashes",
]
