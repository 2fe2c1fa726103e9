"""
Controllers, page models, views and endpoint dispatch.
"""

from .attributes import action_name, allow_anonymous, authorize, http_get, http_post, response_cache
from .controller import Controller
from .page import PageModel
from .views import ViewEngine, ViewNotFoundError

__all__ = [
    "Controller",
    "PageModel",
    "ViewEngine",
    "ViewNotFoundError",
    "action_name",
    "allow_anonymous",
    "authorize",
    "http_get",
    "http_post",
    "response_cache",
]
