# File: spa_prerender/servers/handler_server.py
"""Custom-handler backend: static files first, then an HTML-producing coroutine."""
from __future__ import annotations

import html
import traceback
from pathlib import Path
from typing import Awaitable, Callable

from aiohttp import web

from spa_prerender.servers.base import AppServer

__all__ = ("HandlerServer", "PageHandler")

PageHandler = Callable[[web.Request], Awaitable[str]]


class HandlerServer(AppServer):
    """Server-side rendering backend.

    ``handler`` receives the request for any path that is not a static file
    and returns the full document. A failing handler yields a 500 page with
    the traceback so the captured HTML shows what went wrong.
    """

    def __init__(self, static_dir: Path | str, handler: PageHandler, public_path: str = "/") -> None:
        self._handler = handler
        super().__init__(static_dir, public_path)

    def setup_routes(self, app: web.Application) -> None:
        app.router.add_get("/{tail:.*}", self._handle)

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        static = self.static_file(request.path)
        if static is not None:
            return web.FileResponse(static)
        try:
            body = await self._handler(request)
        except Exception as exc:
            self.logger.warning("Failed to render %s: %s", request.path, exc)
            return web.Response(
                status=500,
                text=f"<pre>{html.escape(traceback.format_exc())}</pre>",
                content_type="text/html",
            )
        return web.Response(status=200, text=body, content_type="text/html")
