"""
Endpoints and the endpoint table.

An ``Endpoint`` is something a request can be dispatched to: a controller
action or a page. The ``EndpointTable`` holds the page routes and the
conventional controller routes and answers two questions: which endpoint
handles a request (``match``) and which URL reaches an endpoint
(``url_for_action`` / ``url_for_page``).

Page routes are literal paths and are tried before the conventional routes,
so ``/Identity/Account/Login`` always reaches the Login page even though
the default route could read it as controller ``Identity``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from bestregi.core.logging_config import get_logger

from .template import RouteTemplate

if TYPE_CHECKING:
    from .discovery import ControllerRegistry, PageRegistry

logger = get_logger(__name__)

CONTROLLER_ENDPOINT = "controller"
PAGE_ENDPOINT = "page"


@dataclass(frozen=True)
class EndpointMetadata:
    """Routing and authorization metadata of an endpoint."""

    authorize: bool = False
    roles: Tuple[str, ...] = ()
    allow_anonymous: bool = False
    http_methods: Optional[FrozenSet[str]] = None
    cache_control: Optional[str] = None

    @classmethod
    def combine(cls, *layers: Mapping[str, Any]) -> "EndpointMetadata":
        """Merge metadata layers, later layers (the action) overriding earlier ones (the class)."""
        merged: Dict[str, Any] = {}
        for layer in layers:
            merged.update({k: v for k, v in layer.items() if k in cls.__dataclass_fields__})
        return cls(**merged)

    def allows_method(self, method: str) -> bool:
        return self.http_methods is None or method.upper() in self.http_methods


@dataclass(frozen=True)
class Endpoint:
    """A dispatch target."""

    display_name: str
    kind: str
    target: type
    handler_name: Optional[str] = None
    metadata: EndpointMetadata = field(default_factory=EndpointMetadata)
    route_values: Tuple[Tuple[str, str], ...] = ()

    @property
    def requires_authorization(self) -> bool:
        return self.metadata.authorize and not self.metadata.allow_anonymous

    @property
    def is_page(self) -> bool:
        return self.kind == PAGE_ENDPOINT


@dataclass(frozen=True)
class EndpointMatch:
    """Result of routing a request."""

    endpoint: Endpoint
    route_values: Dict[str, str]
    route_name: Optional[str] = None


class ControllerRoute:
    """A named conventional route over the registered controllers."""

    def __init__(self, name: str, pattern: str, controllers: "ControllerRegistry") -> None:
        self.name = name
        self.template = RouteTemplate.parse(pattern)
        self.controllers = controllers
        missing = {"controller", "action"} - {n.lower() for n in self.template.parameter_names}
        missing -= {k.lower() for k in self.template.defaults}
        if missing:
            raise ValueError(f"Route {name!r} does not define {sorted(missing)}")

    def match(self, method: str, path: str) -> Optional[EndpointMatch]:
        values = self.template.match(path)
        if values is None:
            return None
        lookup = {k.lower(): v for k, v in values.items()}
        controller = self.controllers.get(lookup.get("controller", ""))
        if controller is None:
            return None
        action = controller.select_action(lookup.get("action", ""), method)
        if action is None:
            return None
        values["controller"] = controller.name
        values["action"] = action.name
        return EndpointMatch(endpoint=action.endpoint, route_values=values, route_name=self.name)

    def build(self, controller: str, action: str, values: Mapping[str, Any]) -> Optional[str]:
        descriptor = self.controllers.get(controller)
        if descriptor is None or descriptor.find_action(action) is None:
            return None
        route_values: Dict[str, Optional[str]] = {"controller": controller, "action": action}
        extra: Dict[str, str] = {}
        names = {n.lower() for n in self.template.parameter_names}
        for key, value in values.items():
            if value is None:
                continue
            if key.lower() in names:
                route_values[key] = str(value)
            else:
                extra[key] = str(value)
        path = self.template.build(route_values)
        if path is None:
            return None
        return path + (f"?{urlencode(extra)}" if extra else "")


class EndpointTable:
    """All routable endpoints of the application."""

    def __init__(self) -> None:
        self.controller_routes: List[ControllerRoute] = []
        self.pages: Optional["PageRegistry"] = None

    def map_controller_route(self, name: str, pattern: str, controllers: "ControllerRegistry") -> ControllerRoute:
        route = ControllerRoute(name, pattern, controllers)
        self.controller_routes.append(route)
        logger.debug(f"Mapped controller route {name!r}: {pattern}")
        return route

    def map_pages(self, pages: "PageRegistry") -> None:
        self.pages = pages
        logger.debug(f"Mapped {len(pages)} page routes")

    def match(self, method: str, path: str) -> Optional[EndpointMatch]:
        if self.pages is not None:
            page_match = self.pages.match(path)
            if page_match is not None:
                return page_match
        for route in self.controller_routes:
            found = route.match(method, path)
            if found is not None:
                return found
        return None

    def url_for_action(self, action: str, controller: str, **values: Any) -> Optional[str]:
        for route in self.controller_routes:
            url = route.build(controller, action, values)
            if url is not None:
                return url
        return None

    def url_for_page(self, page: str, **values: Any) -> Optional[str]:
        if self.pages is None:
            return None
        descriptor = self.pages.get(page)
        if descriptor is None:
            return None
        query = {k: str(v) for k, v in values.items() if v is not None}
        return descriptor.route + (f"?{urlencode(query)}" if query else "")

    def endpoints(self) -> List[Endpoint]:
        found: List[Endpoint] = []
        if self.pages is not None:
            found.extend(page.endpoint for page in self.pages)
        seen = set()
        for route in self.controller_routes:
            for controller in route.controllers:
                for action in controller.actions:
                    if id(action.endpoint) not in seen:
                        seen.add(id(action.endpoint))
                        found.append(action.endpoint)
        return found
