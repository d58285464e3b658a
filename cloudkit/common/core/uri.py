"""URI assembly helpers shared by Service and ServiceObject."""

from __future__ import annotations

import re
from collections.abc import Iterable

_EDGE_SLASHES = re.compile(r"^/*|/*$")


def trim_slashes(segment: str) -> str:
    """Strip leading and trailing ``/`` from a path segment."""
    return _EDGE_SLASHES.sub("", segment)


def join_segments(segments: Iterable[str | None], *, skip_blank: bool = False) -> str:
    """Join path segments with ``/`` after trimming each one.

    Args:
        segments: Path segments in order
        skip_blank: Drop segments that are None, empty or whitespace-only

    Returns:
        Joined path
    """
    parts = []
    for segment in segments:
        if segment is None:
            if skip_blank:
                continue
            segment = ""
        segment = str(segment)
        if skip_blank and not segment.strip():
            continue
        parts.append(trim_slashes(segment))
    return "/".join(parts)


def collapse_colon_verbs(uri: str) -> str:
    """Rewrite ``.../resource/:verb`` as ``.../resource:verb``."""
    return uri.replace("/:", ":")
