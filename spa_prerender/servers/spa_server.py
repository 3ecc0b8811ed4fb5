# File: spa_prerender/servers/spa_server.py
"""Static single-page-application server with ``index.html`` fallback."""
from __future__ import annotations

from pathlib import Path

from aiohttp import web

from spa_prerender.exceptions import SetupError
from spa_prerender.servers.base import AppServer

__all__ = ("SpaServer",)


class SpaServer(AppServer):
    """Serves files from ``static_dir``; every other GET gets the entry file."""

    def __init__(self, static_dir: Path | str, entry_file: str = "index.html", public_path: str = "/") -> None:
        self._index_file = Path(static_dir) / entry_file
        super().__init__(static_dir, public_path)
        if not self._index_file.is_file():
            raise SetupError(f'indexFile:"{self._index_file}" does not exist', phase="setup")

    def setup_routes(self, app: web.Application) -> None:
        app.router.add_get("/{tail:.*}", self._handle)

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        static = self.static_file(request.path)
        if static is not None:
            return web.FileResponse(static)
        return web.FileResponse(self._index_file)
