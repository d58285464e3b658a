"""Client configuration model."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.exceptions import ConfigurationError

PROJECT_ENV_VAR = "GCLOUD_PROJECT"


def _project_from_env() -> str | None:
    return os.environ.get(PROJECT_ENV_VAR) or None


class ClientConfig(BaseModel):
    """Settings shared by every service created from one client.

    Attributes:
        project_id: Project that project-scoped URIs are built against
            (defaults to the ``GCLOUD_PROJECT`` environment variable)
        token_provider: Callable receiving the service scopes and returning
            an access token, sync or async
        interceptors: Global interceptors, applied before any service or
            object interceptor
        timeout: Total request timeout in seconds for the default transport
    """

    project_id: str | None = Field(default_factory=_project_from_env)
    token_provider: Callable[..., Any] | None = None
    interceptors: list[Any] = Field(default_factory=list)
    timeout: float = Field(default=30.0, gt=0)

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True, str_strip_whitespace=True)

    @field_validator("project_id")
    @classmethod
    def validate_project_id(cls, v: str | None) -> str | None:
        """Treat blank project IDs as missing."""
        return v or None

    @classmethod
    def coerce(cls, value: ClientConfig | Mapping[str, Any] | None = None, **overrides: Any) -> ClientConfig:
        """Build a ClientConfig from an instance, a mapping or keyword overrides.

        An existing instance without overrides is returned as is, so the
        global interceptor list keeps its identity.

        Raises:
            ConfigurationError: If the settings do not validate
        """
        if isinstance(value, ClientConfig):
            if not overrides:
                return value
            data: dict[str, Any] = dict(value.__dict__)
        else:
            data = dict(value or {})
        data.update(overrides)

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

        # keep the caller's list object so later appends stay visible
        if isinstance(data.get("interceptors"), list):
            config.interceptors = data["interceptors"]
        return config
