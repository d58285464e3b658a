"""Pagination routing for list-style API methods.

Every paginated method shares one call shape: an optional query and an
optional callback. This module normalizes that shape and routes the call:

    - no callback               -> PageStream (lazy async iterator)
    - callback, auto-paginating -> every page collected, callback(None, results)
    - callback, manual paging   -> one page, callback(None, results, next_query, response)

Architecture:
    Callback mode is built on top of the stream, so both share the same
    paging discipline: a page is fetched only when the consumer asks for an
    item and the buffer is empty, at most one fetch is in flight, items come
    out in page order, and ``max_results`` stops emission (and fetching) even
    when the server still returns a cursor.

Example:
    >>> class Storage(Service):
    ...     async def get_buckets(self, query):
    ...         response = await self.request({"uri": "/b", "qs": query})
    ...         body = response.body or {}
    ...         next_query = None
    ...         if body.get("nextPageToken"):
    ...             next_query = {**query, "pageToken": body["nextPageToken"]}
    ...         return Page(body.get("items", []), next_query, response)
    >>> extend(Storage, "get_buckets")
    >>> async for bucket in storage.get_buckets():
    ...     ...
"""

from __future__ import annotations

import copy
import inspect
import logging
import math
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial, wraps
from typing import Any

logger = logging.getLogger(__name__)

UNBOUNDED = -1

# Query options read for the result cap, in priority order. The camelCase
# spellings are the API query parameters; snake_case ones are aliases.
MAX_RESULTS_KEYS = (
    ("maxResults", "max_results"),
    ("limitVal", "limit_val"),
    ("pageSize", "page_size"),
)
AUTO_PAGINATE_KEYS = ("autoPaginate", "auto_paginate", "autoPaginateVal", "auto_paginate_val")


@dataclass
class ParsedArguments:
    """Canonical arguments of a paginated call.

    Attributes:
        query: Query passed to the first page fetch
        callback: Error-first callback; None selects stream mode
        max_results: Cap on emitted results (-1 means unbounded)
        auto_paginate: Follow ``next_query`` cursors automatically
    """

    query: Any = field(default_factory=dict)
    callback: Callable[..., Any] | None = None
    max_results: int = UNBOUNDED
    auto_paginate: bool = True


@dataclass(frozen=True)
class Page:
    """One page of results.

    Attributes:
        results: Items on this page
        next_query: Query for the following page; None when there is none
        response: Raw API response for the page
    """

    results: Sequence[Any] = ()
    next_query: Any = None
    response: Any = None

    @classmethod
    def from_value(cls, value: Any) -> Page:
        """Accept a Page, a ``(results, next_query?, response?)`` tuple, a bare list, or None."""
        if isinstance(value, Page):
            return value
        if value is None:
            return cls()
        if isinstance(value, tuple):
            results, next_query, response = (list(value[:3]) + [None, None, None])[:3]
            return cls(results or (), next_query, response)
        return cls(results=value)


FetchPage = Callable[[Any], Awaitable[Any]]


def _read_option(query: Any, name: str) -> Any:
    if isinstance(query, Mapping):
        return query.get(name)
    try:
        return getattr(query, name, None)
    except Exception:
        return None


def _as_cap(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value):
        return None
    if math.isinf(value) or value < 0:
        return UNBOUNDED
    return int(value)


def _first_cap(query: Any, keys: Sequence[str]) -> int | None:
    for key in keys:
        cap = _as_cap(_read_option(query, key))
        if cap is not None:
            return cap
    return None


def parse_arguments(args: Sequence[Any] = (), **kwargs: Any) -> ParsedArguments:
    """Normalize the ``(query?, callback?)`` call shape.

    Never raises: unrecognized shapes fall back to defaults.

    Args:
        args: Positional arguments of the paginated call
        **kwargs: ``callback=`` sets the callback; other keywords are merged
            into a mapping query

    Returns:
        ParsedArguments
    """
    try:
        args = list(args or [])
    except TypeError:
        args = [args]

    parsed = ParsedArguments()

    first = args[0] if args else None
    last = args[-1] if args else None

    query: Any = None
    if callable(first):
        parsed.callback = first
    else:
        query = first
        if callable(last):
            parsed.callback = last

    callback_kwarg = kwargs.pop("callback", None)
    if callable(callback_kwarg):
        parsed.callback = callback_kwarg

    if query is None:
        query = {}
    if isinstance(query, Mapping):
        try:
            query = copy.deepcopy(dict(query))
        except Exception:
            query = dict(query)
        query.update(kwargs)
    parsed.query = query

    for keys in MAX_RESULTS_KEYS:
        cap = _first_cap(query, keys)
        if cap is not None:
            parsed.max_results = cap
            break

    if parsed.max_results != UNBOUNDED:
        parsed.auto_paginate = False
    elif any(_read_option(query, key) is False for key in AUTO_PAGINATE_KEYS):
        parsed.auto_paginate = False

    return parsed


class PageStream(AsyncIterator[Any]):
    """Lazy, single-use async iterator over paginated results.

    Nothing is fetched until the first ``__anext__``. Closing the stream
    drops the rest of the current page and prevents any further fetch; a
    fetch already in flight completes but its results are discarded.
    """

    def __init__(self, fetch_page: FetchPage, query: Any, max_results: int = UNBOUNDED) -> None:
        self._fetch_page = fetch_page
        self._cursor = query
        self._has_more = True
        self._max_results = max_results
        self._buffer: deque[Any] = deque()
        self._fetching = False
        self._closed = False
        self.pages_fetched = 0
        self.items_emitted = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _cap_reached(self) -> bool:
        return self._max_results >= 0 and self.items_emitted >= self._max_results

    def __aiter__(self) -> PageStream:
        return self

    async def __anext__(self) -> Any:
        while True:
            if self._closed:
                raise StopAsyncIteration
            if self._cap_reached():
                self._finish("max_results reached")
                raise StopAsyncIteration
            if self._buffer:
                self.items_emitted += 1
                return self._buffer.popleft()
            if not self._has_more:
                self._finish("no more pages")
                raise StopAsyncIteration
            await self._fetch_next()

    async def _fetch_next(self) -> None:
        if self._fetching:
            raise RuntimeError("PageStream already has a page fetch in flight")

        self._fetching = True
        query = self._cursor
        logger.debug("Fetching page", extra={"page": self.pages_fetched + 1})
        try:
            page = Page.from_value(await self._fetch_page(query))
        except BaseException:
            # raised to the consumer once; the stream is over
            self._finish("error")
            raise
        finally:
            self._fetching = False

        self.pages_fetched += 1
        if self._closed:
            logger.debug("Discarding page fetched after close", extra={"page": self.pages_fetched})
            return

        self._buffer.extend(page.results)
        if page.next_query is not None:
            self._cursor = page.next_query
        else:
            self._has_more = False

    def _finish(self, reason: str) -> None:
        if not self._closed:
            logger.debug(
                "Stream ended",
                extra={
                    "reason": reason,
                    "pages_fetched": self.pages_fetched,
                    "items_emitted": self.items_emitted,
                },
            )
        self._closed = True
        self._has_more = False
        self._buffer.clear()

    async def aclose(self) -> None:
        """End the stream early."""
        self._finish("closed by consumer")

    close = aclose

    async def collect(self) -> list[Any]:
        """Drain the stream into a list."""
        return [item async for item in self]

    async def __aenter__(self) -> PageStream:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


async def _invoke(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def _collect_into_callback(parsed: ParsedArguments, fetch_page: FetchPage) -> list[Any] | None:
    stream = run_as_stream(parsed, fetch_page)
    try:
        results = await stream.collect()
    except Exception as e:
        await _invoke(parsed.callback, e)
        return None
    await _invoke(parsed.callback, None, results)
    return results


async def _single_page(parsed: ParsedArguments, fetch_page: FetchPage) -> Page | None:
    try:
        page = Page.from_value(await fetch_page(parsed.query))
    except Exception as e:
        await _invoke(parsed.callback, e)
        return None
    await _invoke(parsed.callback, None, list(page.results), page.next_query, page.response)
    return page


def run_as_stream(parsed: ParsedArguments, fetch_page: FetchPage) -> PageStream:
    """Create a PageStream over ``fetch_page`` starting at ``parsed.query``."""
    return PageStream(fetch_page, parsed.query, parsed.max_results)


def router(parsed: ParsedArguments, fetch_page: FetchPage) -> PageStream | Awaitable[Any]:
    """Route a paginated call to stream or callback mode.

    Returns:
        A PageStream when no callback was given; otherwise an awaitable that
        drives the fetch, invokes the callback error-first and resolves to
        the delivered results (None when an error was delivered)
    """
    if parsed.callback is None:
        return run_as_stream(parsed, fetch_page)
    if parsed.auto_paginate:
        return _collect_into_callback(parsed, fetch_page)
    return _single_page(parsed, fetch_page)


def paginated(method: Callable[..., Awaitable[Any]]) -> Callable[..., Any]:
    """Decorate an ``async (self, query) -> Page`` method with pagination routing."""

    @wraps(method)
    def routed(self: Any, *args: Any, **kwargs: Any) -> Any:
        parsed = parse_arguments(args, **kwargs)
        return router(parsed, partial(method, self))

    routed.__paginated__ = True  # type: ignore[attr-defined]
    return routed


def extend(cls: type, method_names: str | Iterable[str]) -> None:
    """Retrofit pagination routing onto existing methods of ``cls``."""
    if isinstance(method_names, str):
        method_names = [method_names]
    for name in method_names:
        setattr(cls, name, paginated(getattr(cls, name)))
