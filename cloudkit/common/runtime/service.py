"""Service base class.

A Service represents one API family (BigQuery, Storage, ...) behind one set of
credentials. It owns the base URL, the project-scoping convention and the
authenticated transport, and is the point where every request issued by its
ServiceObjects is resolved to an absolute URI and run through the
interceptor chain.

Request Flow:
    1. URI assembly: base_url [+ projects/<project_id>] + opts.uri
    2. Interceptors: global -> service -> object(s) -> call-scoped
    3. Transport: make_authenticated_request(opts)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config import ClientConfig
from ..core.exceptions import MissingProjectIdError
from ..core.interceptors import apply_interceptors, compose_interceptors
from ..core.request import RequestOptions
from ..core.uri import collapse_colon_verbs, join_segments
from .rest import ApiResponse, AuthenticatedTransport, HTTPTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceConfig:
    """Static description of an API family.

    Attributes:
        base_url: Root URL every request is resolved against
        scopes: Auth scopes the transport requests tokens for
        project_id_required: Whether URIs are scoped under ``projects/<id>``
    """

    base_url: str
    scopes: tuple[str, ...] = ()
    project_id_required: bool = True


class Service:
    """Base class for API families."""

    def __init__(
        self,
        config: ServiceConfig,
        options: ClientConfig | Mapping[str, Any] | None = None,
        *,
        transport: AuthenticatedTransport | None = None,
    ) -> None:
        options = ClientConfig.coerce(options)

        self.make_authenticated_request = transport or HTTPTransport(
            scopes=config.scopes,
            token_provider=options.token_provider,
            timeout=options.timeout,
        )
        self.base_url = config.base_url
        self.scopes = config.scopes
        self.project_id = options.project_id
        self.project_id_required = config.project_id_required
        # Shared with the owning client; appends there apply here too
        self.global_interceptors = options.interceptors
        self.interceptors: list[Any] = []

    def resolve_uri(self, uri: str | None) -> str:
        """Build the absolute URI for a service-relative ``uri``.

        Raises:
            MissingProjectIdError: If the service is project-scoped and no
                project ID is configured
        """
        segments = [self.base_url]
        if self.project_id_required:
            if not self.project_id:
                raise MissingProjectIdError(
                    f"A project ID is required to call {self.base_url}. "
                    "Pass project_id or set the GCLOUD_PROJECT environment variable."
                )
            segments.extend(["projects", self.project_id])
        segments.append(uri or "")
        # Some URIs use colon verbs: .../projects:list, not .../projects/:list
        return collapse_colon_verbs(join_segments(segments))

    def prepare_request(self, req_opts: RequestOptions | Mapping[str, Any]) -> RequestOptions:
        """Resolve the URI and run the interceptor chain.

        The caller's options are not modified. The returned options no longer
        carry any call-scoped interceptors.
        """
        opts = RequestOptions.from_value(req_opts).copy()
        opts.uri = self.resolve_uri(opts.uri)

        # Interceptors run in the order they were assigned
        chain = compose_interceptors(
            self.global_interceptors,
            self.interceptors,
            opts.scoped_interceptors,
        )
        return apply_interceptors(opts, chain)

    async def request(self, req_opts: RequestOptions | Mapping[str, Any]) -> ApiResponse:
        """Make an authenticated API request.

        Args:
            req_opts: Request options with a URI relative to ``base_url``

        Returns:
            ApiResponse from the transport

        Raises:
            ApiError: Surfaced verbatim from the transport
        """
        opts = self.prepare_request(req_opts)
        logger.debug("Service request", extra={"method": opts.method or "GET", "uri": opts.uri})
        return await self.make_authenticated_request(opts)

    async def authorize_request(self, req_opts: RequestOptions | Mapping[str, Any]) -> RequestOptions:
        """Prepare a request and return authenticated options without sending it."""
        opts = self.prepare_request(req_opts)
        return await self.make_authenticated_request.authorize(opts)

    async def close(self) -> None:
        """Close the transport if it holds resources."""
        close = getattr(self.make_authenticated_request, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> Service:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
