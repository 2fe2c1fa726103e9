"""
Service registry.

The bootstrapper registers the application's singleton services here in a
fixed order; the registry is stored on ``app.state.services`` and consulted
by the dispatcher for every request.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)

# Well-known service names
DB_CONTEXT = "db_context"
IDENTITY = "identity"
CONTROLLERS = "controllers"
VIEWS = "views"
PAGES = "pages"
ENDPOINTS = "endpoints"


class ServiceNotRegisteredError(LookupError):
    """Raised when a service is requested before it was registered."""


class ServiceRegistry:
    """Ordered name → instance map of application services."""

    def __init__(self) -> None:
        self._services: Dict[str, Any] = {}

    def add(self, name: str, instance: Any) -> Any:
        if name in self._services:
            raise ValueError(f"Service {name!r} is already registered")
        self._services[name] = instance
        logger.debug(f"Registered service {name!r}: {type(instance).__name__}")
        return instance

    def get(self, name: str) -> Any:
        try:
            return self._services[name]
        except KeyError:
            raise ServiceNotRegisteredError(f"Service {name!r} is not registered") from None

    def names(self) -> List[str]:
        return list(self._services)

    def __contains__(self, name: object) -> bool:
        return name in self._services

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)
