"""Request interceptors and chain composition.

An interceptor is any object with a ``request(opts) -> opts`` method. Chains
are composed from ordered scopes at call time (global, service, object,
call) and folded left to right over the outgoing RequestOptions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from .request import RequestOptions

logger = logging.getLogger(__name__)


@runtime_checkable
class Interceptor(Protocol):
    """Protocol for request interceptors."""

    def request(self, opts: RequestOptions) -> RequestOptions:
        """Return the (possibly rewritten) request options."""
        ...


class FunctionInterceptor:
    """Adapt a plain function into an Interceptor."""

    def __init__(self, fn: Callable[[RequestOptions], RequestOptions | None]) -> None:
        self._fn = fn

    def request(self, opts: RequestOptions) -> RequestOptions | None:
        return self._fn(opts)

    def __repr__(self) -> str:
        return f"FunctionInterceptor({getattr(self._fn, '__name__', self._fn)!r})"


def compose_interceptors(*scopes: Iterable[object] | None) -> list[object]:
    """Concatenate interceptor scopes, outermost first.

    Each scope is copied, so appends made after composition do not affect
    the returned chain.
    """
    chain: list[object] = []
    for scope in scopes:
        if scope:
            chain.extend(list(scope))
    return chain


def apply_interceptors(opts: RequestOptions, chain: Iterable[object]) -> RequestOptions:
    """Fold ``chain`` over ``opts`` and strip the call-scoped interceptors.

    Interceptors without a callable ``request`` are skipped. An interceptor
    that returns None is taken to have edited ``opts`` in place.
    """
    applied = 0
    for interceptor in chain:
        hook = getattr(interceptor, "request", None)
        if not callable(hook):
            logger.debug("Skipping interceptor without request()", extra={"interceptor": repr(interceptor)})
            continue
        result = hook(opts)
        if result is not None:
            opts = result
        applied += 1

    opts.scoped_interceptors = []
    if applied:
        logger.debug("Interceptors applied", extra={"count": applied})
    return opts
