"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..runtime.rest.response import ApiResponse

NOT_FOUND = 404


class CloudError(Exception):
    """Base exception for all library errors."""

    pass


class ApiError(CloudError):
    """Error reported by a remote API.

    Raised by the transport when the service answers with an error status.
    The core only inspects ``code``; everything else is carried for callers.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        errors: list[dict[str, Any]] | None = None,
        response: ApiResponse | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.errors = errors or []
        self.response = response

    @property
    def not_found(self) -> bool:
        """Whether this error carries the conventional "not found" status."""
        return self.code == NOT_FOUND

    @classmethod
    def from_body(
        cls,
        status: int,
        body: Any,
        response: ApiResponse | None = None,
    ) -> ApiError:
        """Build an error from a JSON error envelope.

        Understands ``{"error": {"code": ..., "message": ..., "errors": [...]}}``
        and falls back to the raw body (or the status) for anything else.
        """
        message = f"HTTP {status}"
        errors: list[dict[str, Any]] = []

        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            envelope = body["error"]
            message = str(envelope.get("message") or message)
            if isinstance(envelope.get("errors"), list):
                errors = envelope["errors"]
        elif isinstance(body, str) and body.strip():
            message = body.strip()

        return cls(message, code=status, errors=errors, response=response)


class MissingProjectIdError(CloudError):
    """A project-scoped service was asked to build a URI without a project ID."""

    pass


class ConfigurationError(CloudError):
    """Invalid client or service configuration."""

    pass
