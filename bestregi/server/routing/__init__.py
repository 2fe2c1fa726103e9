"""
Request routing: route templates, endpoints and the endpoint table.

Controller and page discovery lives in ``bestregi.server.routing.discovery``.
"""

from .endpoints import Endpoint, EndpointMatch, EndpointMetadata, EndpointTable
from .template import RouteTemplate, RouteTemplateError

__all__ = [
    "Endpoint",
    "EndpointMatch",
    "EndpointMetadata",
    "EndpointTable",
    "RouteTemplate",
    "RouteTemplateError",
]
