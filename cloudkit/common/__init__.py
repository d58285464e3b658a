"""cloudkit.common - shared runtime for cloud service API clients."""

from .api import CloudClient
from .config import ClientConfig
from .core import (
    ApiError,
    CloudError,
    ConfigurationError,
    FunctionInterceptor,
    Interceptor,
    MissingProjectIdError,
    RequestOptions,
)
from .runtime import (
    ApiResponse,
    AuthenticatedTransport,
    HTTPTransport,
    MethodConfig,
    Page,
    PageStream,
    ParsedArguments,
    Service,
    ServiceConfig,
    ServiceObject,
    ServiceObjectConfig,
    extend,
    paginated,
    parse_arguments,
    router,
    run_as_stream,
)

__version__ = "0.1.0"

__all__ = [
    "CloudClient",
    "ClientConfig",
    "ApiError",
    "CloudError",
    "ConfigurationError",
    "MissingProjectIdError",
    "FunctionInterceptor",
    "Interceptor",
    "RequestOptions",
    "ApiResponse",
    "AuthenticatedTransport",
    "HTTPTransport",
    "MethodConfig",
    "Page",
    "PageStream",
    "ParsedArguments",
    "Service",
    "ServiceConfig",
    "ServiceObject",
    "ServiceObjectConfig",
    "extend",
    "paginated",
    "parse_arguments",
    "router",
    "run_as_stream",
]
