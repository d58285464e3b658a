"""Outgoing request options.

Architecture:
    RequestOptions is the single value that flows from a ServiceObject,
    through its parents and the interceptor chain, down to the transport.
    Each layer rewrites ``uri`` and may append interceptors for this one call;
    the transport only ever sees ``to_dict()``, which never carries
    ``scoped_interceptors``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

# camelCase spellings accepted when coercing plain mappings
_ALIASES = {
    "scopedInterceptors": "scoped_interceptors",
    "interceptors_": "scoped_interceptors",
}


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value replaces the base
    value outright.
    """
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


@dataclass
class RequestOptions:
    """Options for a single API request.

    Attributes:
        uri: Request URI; relative until a Service resolves it
        method: HTTP verb (None means the transport default, GET)
        json: JSON body
        qs: Query string parameters
        headers: Request headers
        body: Raw body (bytes or str)
        extra: Additional transport options passed through untouched
        scoped_interceptors: Interceptors attached for this call only
    """

    uri: str = ""
    method: str | None = None
    json: Any = None
    qs: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    extra: dict[str, Any] = field(default_factory=dict)
    scoped_interceptors: list[Any] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_value(cls, value: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
        """Coerce a mapping (or None) into RequestOptions."""
        if isinstance(value, RequestOptions):
            return value
        if value is None:
            return cls()
        return cls().merged(value)

    def copy(self) -> RequestOptions:
        """Return an independent copy (interceptor objects are shared, not copied)."""
        return replace(
            self,
            json=copy.deepcopy(self.json),
            qs=dict(self.qs),
            headers=dict(self.headers),
            extra=dict(self.extra),
            scoped_interceptors=list(self.scoped_interceptors),
        )

    def merged(self, overrides: Mapping[str, Any] | None, *, deep: bool = False) -> RequestOptions:
        """Return a copy with a partial mapping of options applied.

        Args:
            overrides: Partial options; unknown keys land in ``extra``
            deep: Merge nested mappings recursively instead of replacing them

        Returns:
            New RequestOptions
        """
        result = self.copy()
        if not overrides:
            return result

        known = {f.name for f in fields(self)}
        for raw_key, value in overrides.items():
            key = _ALIASES.get(raw_key, raw_key)
            if key not in known:
                result.extra = _merge_value(result.extra, {key: value}, deep)
                continue
            if key == "scoped_interceptors":
                result.scoped_interceptors = list(value or [])
                continue
            current = getattr(result, key)
            if deep and isinstance(current, Mapping) and isinstance(value, Mapping):
                setattr(result, key, deep_merge(current, value))
            elif isinstance(current, dict):
                setattr(result, key, dict(value or {}))
            else:
                setattr(result, key, copy.deepcopy(value))
        return result

    def to_dict(self) -> dict[str, Any]:
        """Transport-facing view of the options.

        Empty containers and unset values are omitted; ``scoped_interceptors``
        is never included.
        """
        data: dict[str, Any] = {"uri": self.uri}
        if self.method is not None:
            data["method"] = self.method
        if self.json is not None:
            data["json"] = self.json
        if self.qs:
            data["qs"] = dict(self.qs)
        if self.headers:
            data["headers"] = dict(self.headers)
        if self.body is not None:
            data["body"] = self.body
        data.update(self.extra)
        return data


def _merge_value(base: dict[str, Any], overrides: Mapping[str, Any], deep: bool) -> dict[str, Any]:
    if deep:
        return deep_merge(base, overrides)
    merged = dict(base)
    merged.update(overrides)
    return merged
