"""
Exception handler middleware.

Outside Development, an unhandled exception is logged and the rest of the
pipeline runs again as ``GET /Home/Error``. The error page is sent with
status 500 and can read the failed request from
``request.state.exception_feature``. When the response has already started,
or the error page fails too, the original exception propagates.
"""

from dataclasses import dataclass
from typing import Any, Dict

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)

_PER_REQUEST_STATE = ("endpoint", "endpoint_match", "route_values")


@dataclass(frozen=True)
class ExceptionFeature:
    """The failed request as seen by the error page."""

    path: str
    error: BaseException


class ExceptionHandlerMiddleware:
    """Re-execute the pipeline at ``error_path`` when a request fails."""

    def __init__(self, app: ASGIApp, error_path: str) -> None:
        self.app = app
        self.error_path = error_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                logger.error(
                    f"Unhandled exception in {scope.get('method')} {scope.get('path')} after the response started",
                    exc_info=True,
                )
                raise
            logger.error(
                f"Unhandled exception in {scope.get('method')} {scope.get('path')}; executing {self.error_path}",
                exc_info=True,
            )
            try:
                await self._execute_error_path(scope, receive, send, exc)
            except Exception:
                logger.error(f"The error handler at {self.error_path} failed as well", exc_info=True)
                raise exc

    async def _execute_error_path(self, scope: Scope, receive: Receive, send: Send, exc: Exception) -> None:
        state: Dict[str, Any] = {
            k: v for k, v in (scope.get("state") or {}).items() if k not in _PER_REQUEST_STATE
        }
        state["exception_feature"] = ExceptionFeature(path=scope.get("path", ""), error=exc)
        error_scope = dict(scope)
        error_scope.update(
            method="GET",
            path=self.error_path,
            raw_path=self.error_path.encode("latin-1"),
            query_string=b"",
            state=state,
        )
        error_scope.pop("endpoint", None)
        error_scope.pop("path_params", None)
        error_scope.pop("route", None)
        error_scope.pop("router", None)

        body_sent = False

        async def empty_receive() -> Message:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": b"", "more_body": False}
            return await receive()

        async def send_500(message: Message) -> None:
            if message["type"] == "http.response.start":
                message = dict(message)
                message["status"] = 500
            await send(message)

        await self.app(error_scope, empty_receive, send_500)
