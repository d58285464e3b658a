"""ServiceObject base class.

A ServiceObject is a remote resource owned by a Service (or by another
ServiceObject): a BigQuery dataset, a Storage bucket, a Pub/Sub topic. Most
resources share the same lifecycle, so this class provides create, delete,
exists, get, get_metadata and set_metadata on top of a URI-joining
``request`` that delegates to the parent.

Design Decisions:
    - Opt-out per instance: when ``methods`` is given, shared methods missing
      from it are set to None on the instance, unless a subclass overrides
      them. ``request`` is always kept.
    - ``request`` may be overridden by subclasses; the shared methods call
      ``ServiceObject.base_request`` directly so their URIs never depend on
      such overrides.
    - ``metadata`` caches the last representation returned by the server. It
      is not guarded against concurrent mutation from the same instance.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..core.exceptions import ApiError, ConfigurationError
from ..core.request import RequestOptions
from ..core.uri import join_segments
from .rest import ApiResponse

logger = logging.getLogger(__name__)

SHARED_METHODS = ("create", "delete", "exists", "get", "get_metadata", "set_metadata")

# camelCase method names accepted in ``methods``
_METHOD_ALIASES = {"getMetadata": "get_metadata", "setMetadata": "set_metadata"}

CreateMethod = Callable[..., Awaitable[Any]]


class Requester(Protocol):
    """Anything a ServiceObject can delegate requests to."""

    async def request(self, req_opts: RequestOptions) -> ApiResponse: ...


@dataclass(frozen=True)
class MethodConfig:
    """Per-method defaults.

    Attributes:
        req_opts: Request options merged over the method's built-in defaults
    """

    req_opts: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, name: str, value: Any) -> MethodConfig | None:
        """Normalize a ``methods`` entry; falsy values mean "disabled"."""
        if isinstance(value, MethodConfig):
            return value
        if not value:
            return None
        if value is True:
            return cls()
        if isinstance(value, Mapping):
            req_opts = value.get("req_opts", value.get("reqOpts")) or {}
            return cls(req_opts=dict(req_opts))
        raise ConfigurationError(
            f"Method config for {name!r} must be a bool, a mapping or MethodConfig, "
            f"got {type(value).__name__}"
        )


@dataclass
class ServiceObjectConfig:
    """Construction settings for a ServiceObject.

    Attributes:
        parent: Service or ServiceObject requests are delegated to
        id: Name or ID of the resource (dataset ID, bucket name, ...)
        base_url: Path of the resource collection relative to the parent
        create_method: ``async (id, options=None) -> (instance, *rest)``
        methods: Shared methods to keep, with optional per-method defaults.
            None keeps every shared method.
    """

    parent: Requester
    id: str | None = None
    base_url: str = ""
    create_method: CreateMethod | None = None
    methods: Mapping[str, Any] | None = None


class ServiceObject:
    """Base class for remote resources with shared CRUD behavior."""

    def __init__(self, config: ServiceObjectConfig) -> None:
        self.metadata: Any = {}

        self.base_url = config.base_url
        self.parent = config.parent
        self.id = config.id
        self.create_method = config.create_method
        self.interceptors: list[Any] = []

        self.methods: dict[str, MethodConfig] = {}
        for raw_name, value in (config.methods or {}).items():
            name = _METHOD_ALIASES.get(raw_name, raw_name)
            if name not in SHARED_METHODS:
                raise ConfigurationError(
                    f"Unknown method {raw_name!r} in methods; expected one of {', '.join(SHARED_METHODS)}"
                )
            method_config = MethodConfig.from_value(name, value)
            if method_config is not None:
                self.methods[name] = method_config

        if config.methods is not None:
            for name in SHARED_METHODS:
                overridden = getattr(type(self), name) is not getattr(ServiceObject, name)
                if not overridden and name not in self.methods:
                    setattr(self, name, None)

    @property
    def available_methods(self) -> list[str]:
        """Shared methods still enabled on this instance."""
        return [name for name in SHARED_METHODS if getattr(self, name) is not None]

    def _method_req_opts(self, name: str) -> Mapping[str, Any]:
        method_config = self.methods.get(name)
        return method_config.req_opts if method_config else {}

    async def create(self, options: Mapping[str, Any] | None = None) -> tuple[Any, ...]:
        """Create the resource through ``create_method``.

        Returns:
            ``(self, *rest)``: this instance (not the one ``create_method``
            built) with its metadata refreshed, followed by whatever else
            ``create_method`` returned, typically the API response

        Raises:
            ConfigurationError: If no create_method was configured
        """
        if self.create_method is None:
            raise ConfigurationError(f"{type(self).__name__} has no create_method")

        args: list[Any] = [self.id]
        if options:
            args.append(options)

        result = await self.create_method(*args)
        if isinstance(result, tuple):
            instance, *rest = result
        else:
            instance, rest = result, []

        self.metadata = getattr(instance, "metadata", self.metadata)
        logger.debug("Resource created", extra={"resource": self.id})
        return (self, *rest)

    async def delete(self) -> ApiResponse:
        """Delete the resource."""
        req_opts = RequestOptions(method="DELETE", uri="").merged(self._method_req_opts("delete"))
        return await ServiceObject.base_request(self, req_opts)

    async def exists(self) -> bool:
        """Check whether the resource exists.

        Raises:
            ApiError: For any error other than "not found"
        """
        try:
            await self.get()
        except ApiError as e:
            if e.not_found:
                return False
            raise
        return True

    async def get(self, *, auto_create: bool = False, **create_options: Any) -> tuple[Any, ...]:
        """Fetch the resource, optionally creating it when it does not exist.

        Args:
            auto_create: Create the resource on "not found" when ``create``
                is available
            **create_options: Options forwarded to ``create``

        Returns:
            ``(self, metadata)``, or the result of ``create`` when the
            resource was created

        Raises:
            ApiError: If the lookup (or creation) fails
        """
        auto_create = auto_create and callable(self.create)

        try:
            metadata, _ = await self.get_metadata()
        except ApiError as e:
            if e.not_found and auto_create:
                logger.debug("Resource not found, creating", extra={"resource": self.id})
                return await self.create(create_options or None)
            raise

        return self, metadata

    async def get_metadata(self) -> tuple[Any, ApiResponse]:
        """Fetch and cache the resource metadata.

        Returns:
            ``(metadata, response)``
        """
        req_opts = RequestOptions(uri="").merged(self._method_req_opts("get_metadata"))
        response = await ServiceObject.base_request(self, req_opts)
        self.metadata = response.body
        return self.metadata, response

    async def set_metadata(self, metadata: Mapping[str, Any]) -> ApiResponse:
        """Update the resource metadata.

        The default verb is PATCH; method defaults may override it (e.g. PUT).
        """
        req_opts = RequestOptions(method="PATCH", uri="", json=metadata).merged(
            self._method_req_opts("set_metadata"), deep=True
        )
        response = await ServiceObject.base_request(self, req_opts)
        self.metadata = response.body
        return response

    async def base_request(self, req_opts: RequestOptions | Mapping[str, Any]) -> ApiResponse:
        """Join this resource's URI and delegate to the parent.

        This instance's interceptors are placed ahead of any call-scoped
        interceptors already on the request.
        """
        opts = RequestOptions.from_value(req_opts).copy()
        opts.uri = join_segments([self.base_url, self.id, opts.uri], skip_blank=True)
        opts.scoped_interceptors = list(self.interceptors) + opts.scoped_interceptors
        return await self.parent.request(opts)

    async def request(self, req_opts: RequestOptions | Mapping[str, Any]) -> ApiResponse:
        """Make an authenticated API request relative to this resource."""
        return await ServiceObject.base_request(self, req_opts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
