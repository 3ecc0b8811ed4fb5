# File: spa_prerender/servers/__init__.py
"""spa_prerender.servers: backends that serve the build output to the browser.

The entry file decides the variant:

* ``*.html`` – :class:`SpaServer`, static files plus SPA fallback;
* ``*.py``   – a module inside ``entry_dir`` exposing ``server``, any
  :class:`PrerenderServer` (typically a :class:`HandlerServer`).
"""
from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

from spa_prerender.config import PrerenderConfig
from spa_prerender.exceptions import ConfigurationError, SetupError
from spa_prerender.servers.base import AppServer, PrerenderServer
from spa_prerender.servers.handler_server import HandlerServer
from spa_prerender.servers.spa_server import SpaServer

__all__ = [
    "AppServer",
    "HandlerServer",
    "PrerenderServer",
    "SpaServer",
    "create_server",
    "load_server_module",
]


def load_server_module(entry_path: Path) -> PrerenderServer:
    """Import *entry_path* and return its ``server`` attribute."""
    if not entry_path.is_file():
        raise SetupError(f"entryFile:{entry_path} does not exist", phase="setup")

    module_name = f"_prerender_entry_{entry_path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, entry_path)
    if spec is None or spec.loader is None:
        raise SetupError(f"Cannot import {entry_path}", phase="setup")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise SetupError(f"Failed to import {entry_path}", phase="setup", cause=exc) from exc

    server = getattr(module, "server", None)
    if not isinstance(server, PrerenderServer):
        raise SetupError(f"{entry_path} must define 'server' as a PrerenderServer", phase="setup")
    return server


def create_server(config: PrerenderConfig) -> PrerenderServer:
    """Select and construct the backend for *config* (not started yet)."""
    entry_file = config.entry_file
    if entry_file.endswith(".html"):
        return SpaServer(config.entry_dir, entry_file=entry_file, public_path=config.public_path)
    if entry_file.endswith(".py"):
        return load_server_module(Path(config.entry_dir) / entry_file)
    raise ConfigurationError(f"Unrecognized entryFile type: {entry_file}", phase="setup")
