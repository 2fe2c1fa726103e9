"""
Controller and page discovery.

``ControllerRegistry.discover`` imports every module of a package and
collects the ``Controller`` subclasses it defines. ``PageRegistry.discover``
walks a package the same way and derives each page's URL from where its
module sits:

    pages/identity/account/login.py          → /Identity/Account/Login
    pages/identity/account/manage/index.py   → /Identity/Account/Manage
                                               (and .../Manage/Index)

Module names are snake_case and become PascalCase URL segments.
"""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from dataclasses import dataclass, field
from types import ModuleType
from typing import Dict, Iterable, Iterator, List, Optional

from bestregi.core.logging_config import get_logger
from bestregi.server.mvc.attributes import get_metadata
from bestregi.server.mvc.controller import Controller
from bestregi.server.mvc.page import PageModel

from .endpoints import CONTROLLER_ENDPOINT, PAGE_ENDPOINT, Endpoint, EndpointMatch, EndpointMetadata

logger = get_logger(__name__)

CONTROLLER_SUFFIX = "Controller"


def to_pascal(name: str) -> str:
    """``register_confirmation`` → ``RegisterConfirmation``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def _iter_modules(package: ModuleType) -> Iterator[ModuleType]:
    yield package
    if not hasattr(package, "__path__"):
        return
    for info in pkgutil.walk_packages(package.__path__, prefix=f"{package.__name__}."):
        yield importlib.import_module(info.name)


# ======================================================================
# Controllers
# ======================================================================


@dataclass(frozen=True)
class ActionDescriptor:
    """One action method of a controller."""

    name: str
    method_name: str
    endpoint: Endpoint


@dataclass
class ControllerDescriptor:
    """A controller class and its actions."""

    name: str
    controller_type: type
    actions: List[ActionDescriptor] = field(default_factory=list)

    def find_action(self, name: str) -> Optional[ActionDescriptor]:
        wanted = name.lower()
        for action in self.actions:
            if action.name.lower() == wanted:
                return action
        return None

    def select_action(self, name: str, method: str) -> Optional[ActionDescriptor]:
        """Pick the action named ``name`` that accepts ``method``.

        Actions restricted to specific HTTP methods win over unrestricted ones.
        """
        wanted = name.lower()
        candidates = [a for a in self.actions if a.name.lower() == wanted and a.endpoint.metadata.allows_method(method)]
        candidates.sort(key=lambda a: a.endpoint.metadata.http_methods is None)
        return candidates[0] if candidates else None


class ControllerRegistry:
    """All known controllers, looked up case-insensitively by name."""

    def __init__(self, controllers: Iterable[type] = ()) -> None:
        self._controllers: Dict[str, ControllerDescriptor] = {}
        for controller_type in controllers:
            self.add(controller_type)

    @classmethod
    def discover(cls, package: ModuleType) -> "ControllerRegistry":
        registry = cls()
        for module in _iter_modules(package):
            for _, candidate in inspect.getmembers(module, inspect.isclass):
                if (
                    candidate.__module__ == module.__name__
                    and issubclass(candidate, Controller)
                    and candidate.__name__.endswith(CONTROLLER_SUFFIX)
                ):
                    registry.add(candidate)
        logger.info(f"Discovered controllers: {sorted(registry.names())}")
        return registry

    def add(self, controller_type: type) -> ControllerDescriptor:
        name = controller_type.__name__
        if name.endswith(CONTROLLER_SUFFIX):
            name = name[: -len(CONTROLLER_SUFFIX)]
        if not name:
            raise ValueError(f"{controller_type!r} has no usable controller name")
        if name.lower() in self._controllers:
            raise ValueError(f"Controller {name!r} is registered twice")

        descriptor = ControllerDescriptor(name=name, controller_type=controller_type)
        class_metadata = get_metadata(controller_type)
        for method_name, method in inspect.getmembers(controller_type, inspect.iscoroutinefunction):
            if method_name.startswith("_") or hasattr(Controller, method_name):
                continue
            action_metadata = get_metadata(method)
            action_name = action_metadata.get("action_name") or to_pascal(method_name)
            endpoint = Endpoint(
                display_name=f"{controller_type.__module__}.{controller_type.__name__}.{method_name}",
                kind=CONTROLLER_ENDPOINT,
                target=controller_type,
                handler_name=method_name,
                metadata=EndpointMetadata.combine(class_metadata, action_metadata),
                route_values=(("controller", name), ("action", action_name)),
            )
            descriptor.actions.append(ActionDescriptor(action_name, method_name, endpoint))

        self._controllers[name.lower()] = descriptor
        return descriptor

    def get(self, name: str) -> Optional[ControllerDescriptor]:
        return self._controllers.get(name.lower())

    def names(self) -> List[str]:
        return [descriptor.name for descriptor in self._controllers.values()]

    def __iter__(self) -> Iterator[ControllerDescriptor]:
        return iter(self._controllers.values())

    def __len__(self) -> int:
        return len(self._controllers)


# ======================================================================
# Pages
# ======================================================================


@dataclass(frozen=True)
class PageDescriptor:
    """A page model and the route it answers."""

    route: str
    page_type: type
    endpoint: Endpoint


class PageRegistry:
    """Page routes, matched as case-insensitive literal paths."""

    def __init__(self) -> None:
        self._pages: Dict[str, PageDescriptor] = {}
        self._paths: Dict[str, PageDescriptor] = {}

    @classmethod
    def discover(cls, package: ModuleType) -> "PageRegistry":
        registry = cls()
        for module in _iter_modules(package):
            relative = module.__name__[len(package.__name__):].lstrip(".")
            if not relative:
                continue
            page_types = [
                candidate
                for _, candidate in inspect.getmembers(module, inspect.isclass)
                if candidate.__module__ == module.__name__ and issubclass(candidate, PageModel)
            ]
            if not page_types:
                continue
            if len(page_types) > 1:
                raise ValueError(f"Module {module.__name__} defines more than one page model")
            registry.add(relative.split("."), page_types[0])
        logger.info(f"Discovered pages: {sorted(registry.routes())}")
        return registry

    def add(self, module_parts: List[str], page_type: type) -> PageDescriptor:
        segments = [to_pascal(part) for part in module_parts]
        paths = ["/" + "/".join(segments)]
        if segments[-1] == "Index":
            paths.insert(0, "/" + "/".join(segments[:-1]))
        route = paths[0]

        page_type.route = route
        endpoint = Endpoint(
            display_name=f"Page {route}",
            kind=PAGE_ENDPOINT,
            target=page_type,
            metadata=EndpointMetadata.combine(get_metadata(page_type)),
            route_values=(("page", route),),
        )
        descriptor = PageDescriptor(route=route, page_type=page_type, endpoint=endpoint)

        if route.lower() in self._pages:
            raise ValueError(f"Page route {route!r} is registered twice")
        self._pages[route.lower()] = descriptor
        for path in paths:
            self._paths[path.lower()] = descriptor
        return descriptor

    def get(self, route: str) -> Optional[PageDescriptor]:
        return self._paths.get("/" + route.strip("/").lower())

    def match(self, path: str) -> Optional[EndpointMatch]:
        descriptor = self.get(path)
        if descriptor is None:
            return None
        return EndpointMatch(endpoint=descriptor.endpoint, route_values={"page": descriptor.route})

    def routes(self) -> List[str]:
        return [descriptor.route for descriptor in self._pages.values()]

    def __iter__(self) -> Iterator[PageDescriptor]:
        return iter(self._pages.values())

    def __len__(self) -> int:
        return len(self._pages)
