"""Runtime components: services, resources and pagination routing."""

from .rest import ApiResponse, AuthenticatedTransport, HTTPTransport
from .service import Service, ServiceConfig
from .service_object import (
    SHARED_METHODS,
    MethodConfig,
    ServiceObject,
    ServiceObjectConfig,
)
from .stream_router import (
    Page,
    PageStream,
    ParsedArguments,
    extend,
    paginated,
    parse_arguments,
    router,
    run_as_stream,
)

__all__ = [
    "ApiResponse",
    "AuthenticatedTransport",
    "HTTPTransport",
    "Service",
    "ServiceConfig",
    "SHARED_METHODS",
    "MethodConfig",
    "ServiceObject",
    "ServiceObjectConfig",
    "Page",
    "PageStream",
    "ParsedArguments",
    "extend",
    "paginated",
    "parse_arguments",
    "router",
    "run_as_stream",
]
