"""Raw API response wrapper."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ApiResponse:
    """Response returned by the authenticated transport.

    Attributes:
        status: HTTP status code
        body: Parsed body (JSON when the server sent JSON, text otherwise)
        headers: Response headers
        url: Final request URL
    """

    status: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
