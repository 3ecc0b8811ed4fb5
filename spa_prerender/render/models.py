# File: spa_prerender/render/models.py
"""
Data models shared by the renderer, the writer and route discovery.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(slots=True)
class RenderResult:
    """Captured markup of one route.

    ``original_route`` is the route that was requested, ``route`` is
    ``window.location.pathname`` once the page was ready (differs after a
    client-side redirect).
    """

    original_route: str
    route: str
    html: str


class PageInjection(BaseModel):
    """Value exposed as ``window[key]`` before the page scripts run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str
    value: Any
