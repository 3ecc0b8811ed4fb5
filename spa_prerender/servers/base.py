# File: spa_prerender/servers/base.py
"""
Server capability consumed by the orchestrator.

The orchestrator only sees :meth:`PrerenderServer.is_ready`,
:attr:`PrerenderServer.base_url` and :meth:`PrerenderServer.destroy`;
``static_dir`` and ``public_path`` are informational.
"""
from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from spa_prerender.exceptions import SetupError
from spa_prerender.logger import LOGGER_NAME

__all__ = ("PrerenderServer", "AppServer")


class PrerenderServer(abc.ABC):
    """Backend serving the build output to the browser."""

    @abc.abstractmethod
    async def is_ready(self) -> None:
        """Return once the server accepts connections."""

    @abc.abstractmethod
    async def destroy(self) -> None:
        """Stop listening and release the socket."""

    @property
    @abc.abstractmethod
    def base_url(self) -> str:
        """Origin such as ``http://127.0.0.1:54321`` (no trailing slash)."""

    @property
    @abc.abstractmethod
    def static_dir(self) -> Path: ...

    @property
    @abc.abstractmethod
    def public_path(self) -> str: ...


class AppServer(PrerenderServer):
    """aiohttp application bound to an ephemeral localhost port.

    Subclasses register their routes in :meth:`setup_routes`. Static files
    under ``public_path`` are resolved by :meth:`static_file` and never
    escape ``static_dir``.
    """

    host = "127.0.0.1"

    def __init__(self, static_dir: Path | str, public_path: str = "/") -> None:
        self._static_dir = Path(static_dir)
        self._public_path = public_path if public_path.startswith("/") else "/" + public_path
        if not self._static_dir.is_dir():
            raise SetupError(f'staticDir:"{self._static_dir}" does not exist', phase="setup")
        self.logger = logging.getLogger(LOGGER_NAME)
        self.app = web.Application()
        self.setup_routes(self.app)
        self._runner: Optional[web.AppRunner] = None

    @abc.abstractmethod
    def setup_routes(self, app: web.Application) -> None: ...

    def static_file(self, request_path: str) -> Optional[Path]:
        """Map a request path to an existing file inside ``static_dir``."""
        prefix = self._public_path.rstrip("/") + "/"
        if not (request_path + "/").startswith(prefix):
            return None
        relative = request_path[len(prefix):].lstrip("/")
        if not relative:
            return None
        root = self._static_dir.resolve()
        candidate = (root / relative).resolve()
        if root not in candidate.parents or not candidate.is_file():
            return None
        return candidate

    async def is_ready(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, 0)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            raise SetupError("Server failed to bind", phase="setup", cause=exc) from exc
        self._runner = runner

    async def destroy(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    @property
    def base_url(self) -> str:
        if self._runner is None or not self._runner.addresses:
            raise RuntimeError("Invalid server address")
        address = self._runner.addresses[0]
        host, port = address[0], address[1]
        if ":" in host:
            return f"http://[{host}]:{port}"
        return f"http://{host}:{port}"

    @property
    def static_dir(self) -> Path:
        return self._static_dir

    @property
    def public_path(self) -> str:
        return self._public_path
