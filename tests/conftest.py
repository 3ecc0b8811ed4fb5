# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from spa_prerender.config import PrerenderConfig
from spa_prerender.render.models import RenderResult
from spa_prerender.servers.base import PrerenderServer


class FakeServer(PrerenderServer):
    """In-memory server capability: records lifecycle calls only."""

    def __init__(self, static_dir: Path = Path("/dist")) -> None:
        self.ready = False
        self.destroyed = False
        self._static_dir = static_dir

    async def is_ready(self) -> None:
        self.ready = True

    async def destroy(self) -> None:
        self.destroyed = True

    @property
    def base_url(self) -> str:
        return "http://prerender.test"

    @property
    def static_dir(self) -> Path:
        return self._static_dir

    @property
    def public_path(self) -> str:
        return "/"


class FakeRenderer:
    """Render capability returning canned HTML, tracking order and concurrency."""

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        redirects: Optional[Dict[str, str]] = None,
        delays: Optional[Dict[str, float]] = None,
        fail_on: Sequence[str] = (),
    ) -> None:
        self.pages = pages or {}
        self.redirects = redirects or {}
        self.delays = delays or {}
        self.fail_on = set(fail_on)
        self.calls: List[str] = []
        self.base_urls: List[str] = []
        self.events: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = False
        self.closed = False
        self.in_flight_at_close: Optional[int] = None

    async def start(self) -> None:
        self.started = True

    async def render_route(self, route: str, base_url: str) -> RenderResult:
        self.calls.append(route)
        self.base_urls.append(base_url)
        self.events.append(("start", route))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(route, 0.001))
            if route in self.fail_on:
                raise RuntimeError(f"navigation failed for {route}")
            html = self.pages.get(route, f"<html><body>{route}</body></html>")
            return RenderResult(original_route=route, route=self.redirects.get(route, route), html=html)
        finally:
            self.in_flight -= 1
            self.events.append(("end", route))

    async def close(self) -> None:
        self.in_flight_at_close = self.in_flight
        self.closed = True


@pytest.fixture()
def dist_dir(tmp_path) -> Path:
    """
    Create a minimal build output with an entry file.
    """
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text("<html><body><div id='app'></div></body></html>", encoding="utf-8")
    (dist / "main.js").write_text("console.log('app')", encoding="utf-8")
    return dist


@pytest.fixture()
def make_config(dist_dir):
    """
    Return a factory building a valid PrerenderConfig rooted at dist_dir.
    """

    def _make(**overrides) -> PrerenderConfig:
        data = {"routes": ["/"], "entry_dir": dist_dir}
        data.update(overrides)
        return PrerenderConfig(**data)

    return _make


@pytest.fixture()
def fake_server() -> FakeServer:
    return FakeServer()
