"""
Static files middleware.

Serves files below the web root for ``GET`` and ``HEAD`` requests and hands
everything else, including misses, to the next stage.
"""

import os
from pathlib import Path

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)


class StaticFilesMiddleware:
    """Short-circuit requests for files that exist under ``directory``."""

    def __init__(self, app: ASGIApp, directory: Path | str) -> None:
        self.app = app
        self.directory = Path(directory)
        self.files = StaticFiles(directory=str(self.directory), check_dir=False)
        if not self.directory.is_dir():
            logger.warning(f"Web root {self.directory} does not exist; no static files will be served")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in ("GET", "HEAD") or not self.directory.is_dir():
            await self.app(scope, receive, send)
            return

        relative = os.path.normpath(scope["path"].lstrip("/"))
        if relative in (".", "") or relative.startswith(".."):
            await self.app(scope, receive, send)
            return

        try:
            response = await self.files.get_response(relative, scope)
        except HTTPException as e:
            if e.status_code != 404:
                raise
            await self.app(scope, receive, send)
            return
        await response(scope, receive, send)
