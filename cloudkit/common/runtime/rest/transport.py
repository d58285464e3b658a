"""Authenticated aiohttp transport.

This is the default implementation of the ``make_authenticated_request``
capability that a Service delegates to. It resolves an access token through
an injected ``token_provider`` (credential acquisition itself lives outside
this library), attaches it to the request and executes it with aiohttp.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

import aiohttp

from ...core.exceptions import ApiError
from ...core.request import RequestOptions
from .response import ApiResponse

logger = logging.getLogger(__name__)

TokenProvider = Callable[[Sequence[str]], str | Awaitable[str]]

# ``RequestOptions.extra`` keys forwarded to ``ClientSession.request``
SESSION_REQUEST_OPTIONS = frozenset(
    {
        "allow_redirects",
        "auth",
        "auto_decompress",
        "chunked",
        "compress",
        "cookies",
        "expect100",
        "max_field_size",
        "max_line_size",
        "max_redirects",
        "proxy",
        "proxy_auth",
        "proxy_headers",
        "raise_for_status",
        "read_bufsize",
        "read_until_eof",
        "server_hostname",
        "skip_auto_headers",
        "ssl",
        "timeout",
        "trace_request_ctx",
    }
)


@runtime_checkable
class AuthenticatedTransport(Protocol):
    """Capability a Service uses to execute requests.

    ``__call__`` sends the request and returns the response (raising
    ApiError on failure). ``authorize`` returns authenticated options without
    sending them, for callers that execute the request themselves.
    """

    async def __call__(self, opts: RequestOptions) -> ApiResponse: ...

    async def authorize(self, opts: RequestOptions) -> RequestOptions: ...


class HTTPTransport:
    """Async HTTP transport backed by a lazily created aiohttp session."""

    def __init__(
        self,
        *,
        scopes: Sequence[str] = (),
        token_provider: TokenProvider | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.scopes = tuple(scopes)
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._token_provider = token_provider
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def get_token(self) -> str | None:
        """Resolve an access token for the configured scopes."""
        if self._token_provider is None:
            return None
        token = self._token_provider(self.scopes)
        if inspect.isawaitable(token):
            token = await token
        return token

    async def authorize(self, opts: RequestOptions) -> RequestOptions:
        """Return a copy of ``opts`` carrying the Authorization header."""
        authorized = opts.copy()
        token = await self.get_token()
        if token:
            authorized.headers["Authorization"] = f"Bearer {token}"
        return authorized

    async def __call__(self, opts: RequestOptions) -> ApiResponse:
        authorized = await self.authorize(opts)
        method = (authorized.method or "GET").upper()

        logger.debug("Sending request", extra={"method": method, "uri": authorized.uri})

        kwargs = self._session_options(authorized.extra)
        if authorized.qs:
            kwargs["params"] = authorized.qs
        if authorized.headers:
            kwargs["headers"] = authorized.headers
        if authorized.json is not None:
            kwargs["json"] = authorized.json
        elif authorized.body is not None:
            kwargs["data"] = authorized.body

        async with self.session.request(method, authorized.uri, **kwargs) as response:
            body = await self._read_body(response)
            result = ApiResponse(
                status=response.status,
                body=body,
                headers=dict(response.headers),
                url=str(response.url),
            )

        if response.status >= 400:
            logger.debug(
                "Request failed",
                extra={"method": method, "uri": authorized.uri, "status": response.status},
            )
            raise ApiError.from_body(response.status, body, response=result)

        return result

    def _session_options(self, extra: dict[str, Any]) -> dict[str, Any]:
        """Keep the ``extra`` entries aiohttp accepts; log and drop the rest."""
        ignored = sorted(key for key in extra if key not in SESSION_REQUEST_OPTIONS)
        if ignored:
            logger.debug("Ignoring non-transport request options", extra={"options": ignored})
        return {key: value for key, value in extra.items() if key in SESSION_REQUEST_OPTIONS}

    async def _read_body(self, response: aiohttp.ClientResponse) -> Any:
        if response.status == 204:
            return None
        if "json" in (response.content_type or ""):
            return await response.json()
        text = await response.text()
        return text or None

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
