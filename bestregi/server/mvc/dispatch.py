"""
Endpoint dispatch.

The last stage of the pipeline. The routing middleware has already put the
matched endpoint on ``request.state``; this module instantiates the
controller or page model, binds the handler's arguments from the route
values, the form and the query string, and turns the return value into a
response.
"""

from __future__ import annotations

import inspect
import typing
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import FormData
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from bestregi.core.logging_config import get_logger
from bestregi.server.hosting import DB_CONTEXT, ServiceRegistry
from bestregi.server.routing.endpoints import EndpointMatch

from .context import ActionContext, RequestServices

logger = get_logger(__name__)

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class ModelBindingError(ValueError):
    """Raised when a request value cannot be converted to a handler parameter type."""


@lru_cache(maxsize=None)
def _adapter(hint: Any) -> TypeAdapter:
    return TypeAdapter(hint)


def _convert(name: str, value: str, hint: Any) -> Any:
    """Validate a raw request value against the parameter annotation in lax mode."""
    try:
        return _adapter(hint).validate_python(value)
    except ValidationError:
        raise ModelBindingError(f"The value '{value}' is not valid for {name}.") from None


async def _read_form(request: Request) -> Optional[FormData]:
    content_type = request.headers.get("content-type", "")
    if request.method in ("GET", "HEAD") or not content_type.startswith(_FORM_CONTENT_TYPES):
        return None
    return await request.form()


def _key(name: str) -> str:
    return name.replace("_", "").lower()


def _lookup(sources: list[Mapping[str, Any]], name: str) -> Optional[str]:
    """First value for ``name``; ``return_url`` also matches ``ReturnUrl`` and ``returnUrl``."""
    wanted = _key(name)
    for source in sources:
        for key in source.keys():
            if _key(key) == wanted:
                value = source[key]
                return value if isinstance(value, str) else None
    return None


async def bind_arguments(handler: Callable[..., Any], context: ActionContext) -> Dict[str, Any]:
    """Resolve keyword arguments for ``handler``.

    Sources are searched in order: route values, form fields, query string.
    Parameters with no value get their default, or ``None``.
    """
    request = context.request
    form = await _read_form(request)
    sources: list[Mapping[str, Any]] = [context.route_values]
    if form is not None:
        sources.append(form)
    sources.append(request.query_params)

    func = getattr(handler, "__func__", handler)
    hints = typing.get_type_hints(func)
    arguments: Dict[str, Any] = {}
    for name, parameter in inspect.signature(handler).parameters.items():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        raw = _lookup(sources, name)
        if raw is None or raw == "":
            arguments[name] = None if parameter.default is parameter.empty else parameter.default
        else:
            arguments[name] = _convert(name, raw, hints.get(name, str))
    return arguments


def to_response(result: Any) -> Response:
    """Convert a handler return value into a response."""
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=200)
    if isinstance(result, str):
        return PlainTextResponse(result)
    return JSONResponse(result)


async def invoke_action(context: ActionContext) -> Response:
    endpoint = context.endpoint
    controller = endpoint.target(context)
    action = getattr(controller, endpoint.handler_name)
    try:
        arguments = await bind_arguments(action, context)
    except ModelBindingError as e:
        return PlainTextResponse(str(e), status_code=400)
    logger.debug(f"Executing action {endpoint.display_name}")
    return to_response(await action(**arguments))


def _page_handler(page: Any, method: str, handler_name: Optional[str]) -> Optional[Callable[..., Any]]:
    verbs = [method.lower()]
    if method == "HEAD":
        verbs.append("get")
    for verb in verbs:
        name = f"on_{verb}" + (f"_{handler_name.lower()}" if handler_name else "")
        handler = getattr(page, name, None)
        if handler is not None:
            return handler
    return None


async def invoke_page(context: ActionContext) -> Response:
    request = context.request
    page = context.endpoint.target(context)

    handler_name = request.query_params.get("handler")
    if handler_name is None:
        form = await _read_form(request)
        if form is not None and isinstance(form.get("handler"), str):
            handler_name = form.get("handler")

    handler = _page_handler(page, request.method, handler_name)
    if handler is None:
        logger.debug(f"No {request.method} handler on {context.endpoint.display_name}; rendering page")
        return page.page()

    try:
        arguments = await bind_arguments(handler, context)
    except ModelBindingError as e:
        return PlainTextResponse(str(e), status_code=400)
    result = handler(**arguments)
    if inspect.isawaitable(result):
        result = await result
    if result is None:
        return page.page()
    return to_response(result)


async def dispatch_endpoint(request: Request) -> Response:
    """Run the endpoint selected by the routing middleware, or answer 404."""
    endpoint_match: Optional[EndpointMatch] = getattr(request.state, "endpoint_match", None)
    if endpoint_match is None:
        return Response(status_code=404)

    services: ServiceRegistry = request.app.state.services
    db_context = services.get(DB_CONTEXT)
    async with db_context.session() as session:
        context = ActionContext(
            request=request,
            endpoint=endpoint_match.endpoint,
            route_values=dict(endpoint_match.route_values),
            services=RequestServices(request, session, services),
        )
        if endpoint_match.endpoint.is_page:
            response = await invoke_page(context)
        else:
            response = await invoke_action(context)

    cache_control = endpoint_match.endpoint.metadata.cache_control
    if cache_control:
        response.headers["Cache-Control"] = cache_control
        if cache_control == "no-store":
            response.headers["Pragma"] = "no-cache"
    return response
