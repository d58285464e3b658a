"""Top-level client facade.

CloudClient holds the configuration shared by every API family created from
it, most importantly the global interceptor list. Services created through
``service()`` share that list by reference, so interceptors appended to the
client later still apply to them.

Example:
    >>> client = CloudClient(project_id="grape-spaceship-123", token_provider=get_token)
    >>> client.interceptors.append(FunctionInterceptor(add_user_agent))
    >>> storage = client.service(Storage)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from ..config import ClientConfig
from ..core.exceptions import ConfigurationError
from ..runtime.service import Service

logger = logging.getLogger(__name__)

ServiceT = TypeVar("ServiceT", bound=Service)


class CloudClient:
    """Entry point owning global configuration and interceptors."""

    def __init__(self, config: ClientConfig | Mapping[str, Any] | None = None, **overrides: Any) -> None:
        self.config = ClientConfig.coerce(config, **overrides)

    @property
    def interceptors(self) -> list[Any]:
        """Global interceptors, applied first on every request."""
        return self.config.interceptors

    def service(self, service_cls: type[ServiceT], **options: Any) -> ServiceT:
        """Instantiate an API family with this client's configuration.

        Args:
            service_cls: Service subclass accepting the options as its
                first argument
            **options: Per-service overrides (project_id, timeout, ...)

        Raises:
            ConfigurationError: If options try to replace the global interceptors
        """
        if "interceptors" in options:
            raise ConfigurationError(
                "Global interceptors belong to the client; append to client.interceptors "
                "or to the service's own interceptors instead"
            )
        service_options = ClientConfig.coerce(self.config, **options)

        logger.debug("Creating service", extra={"service": service_cls.__name__})
        return service_cls(service_options)
