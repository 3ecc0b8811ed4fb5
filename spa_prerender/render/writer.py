# File: spa_prerender/render/writer.py
"""
Persistence of render results as ``<output_root>/<route>/index.html``.

The observed route (after client-side redirects) decides the location, not
the requested one.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Union

from spa_prerender.render.models import RenderResult

__all__ = ("output_path_for", "write_result")


def output_path_for(output_root: Union[str, Path], route: str) -> Path:
    """``/foo`` -> ``<root>/foo/index.html``; ``/`` -> ``<root>/index.html``."""
    root = Path(output_root)
    relative = route.split("?", 1)[0].split("#", 1)[0].strip("/")
    if ".." in Path(relative).parts:
        raise ValueError(f"Route escapes output directory: {route}")
    return root / relative / "index.html" if relative else root / "index.html"


def _write(path: Path, html: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")


async def write_result(output_root: Union[str, Path], result: RenderResult) -> Path:
    """Write the trimmed markup of *result* and return the file path."""
    path = output_path_for(output_root, result.route)
    await asyncio.to_thread(_write, path, result.html.strip())
    return path
