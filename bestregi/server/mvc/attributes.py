"""
Decorators attaching routing and authorization metadata to controllers,
actions and page models.

    @authorize
    class ManageController(Controller):
        @http_post
        async def save(self, id: str): ...

        @allow_anonymous
        async def about(self): ...
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

T = TypeVar("T")

METADATA_ATTRIBUTE = "__bestregi_endpoint__"


def get_metadata(target: Any) -> Dict[str, Any]:
    """Metadata declared directly on ``target`` (not inherited from a base class)."""
    if isinstance(target, type):
        return dict(target.__dict__.get(METADATA_ATTRIBUTE, {}))
    return dict(getattr(target, METADATA_ATTRIBUTE, {}))


def _update(target: T, **values: Any) -> T:
    metadata = get_metadata(target)
    metadata.update(values)
    setattr(target, METADATA_ATTRIBUTE, metadata)
    return target


def authorize(target: Optional[T] = None, *, roles: Iterable[str] = ()) -> Any:
    """Require an authenticated user, optionally in one of ``roles``."""

    def decorator(inner: T) -> T:
        return _update(inner, authorize=True, roles=tuple(roles))

    if target is not None:
        return decorator(target)
    return decorator


def allow_anonymous(target: T) -> T:
    """Let anonymous users through even when the controller requires authorization."""
    return _update(target, allow_anonymous=True)


def _http_methods(*methods: str) -> Callable[[T], T]:
    def decorator(func: T) -> T:
        existing = set(get_metadata(func).get("http_methods") or ())
        return _update(func, http_methods=frozenset(existing | set(methods)))

    return decorator


http_get = _http_methods("GET", "HEAD")
http_post = _http_methods("POST")


def action_name(name: str) -> Callable[[T], T]:
    """Expose an action under ``name`` instead of its method name."""

    def decorator(func: T) -> T:
        return _update(func, action_name=name)

    return decorator


def response_cache(*, no_store: bool = False, duration: int = 0) -> Callable[[T], T]:
    """Set ``Cache-Control`` on the action's response."""

    def decorator(func: T) -> T:
        if no_store:
            header = "no-store"
        elif duration > 0:
            header = f"public,max-age={duration}"
        else:
            header = "no-cache"
        return _update(func, cache_control=header)

    return decorator
