# File: spa_prerender/render/orchestrator.py
"""
Render orchestrator: drives the route queue through the wave runner.

Run phases::

    server start -> browser start -> [warm-up route] -> bulk waves -> home waves -> teardown

The home route is taken out of the queue before anything is rendered and
only put back once every other route, discovered ones included, is done.
Queue mutation happens only between awaits of the orchestrator's own tasks,
so the single-threaded event loop is the only synchronisation needed.
"""
from __future__ import annotations

import inspect
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Set, Union

from spa_prerender.config import PrerenderConfig
from spa_prerender.exceptions import PrerenderError, RouteRenderError
from spa_prerender.logger import LOGGER_NAME
from spa_prerender.parser.html_parser import find_routes_in_page
from spa_prerender.render.batch import batch_requests
from spa_prerender.render.browser import PlaywrightRenderer, RenderCapability
from spa_prerender.render.models import RenderResult
from spa_prerender.render.queue import RouteQueue
from spa_prerender.render.writer import write_result
from spa_prerender.servers import PrerenderServer, create_server

__all__ = ("PrerenderOrchestrator",)

ServerFactory = Callable[[PrerenderConfig], PrerenderServer]
RendererFactory = Callable[[PrerenderConfig, logging.Logger], RenderCapability]
Writer = Callable[[Union[str, Path], RenderResult], Awaitable[object]]


class PrerenderOrchestrator:
    """Renders every configured (and optionally discovered) route once.

    One instance serves exactly one run; build a new one per invocation.
    The server, renderer and writer are injectable so that the ordering
    rules can be exercised without a real browser.
    """

    def __init__(
        self,
        config: PrerenderConfig,
        *,
        server_factory: ServerFactory = create_server,
        renderer_factory: RendererFactory = PlaywrightRenderer,
        writer: Writer = write_result,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self._server_factory = server_factory
        self._renderer_factory = renderer_factory
        self._writer = writer

        self._queue = RouteQueue()
        self._queue.enqueue_initial(config.routes)
        self._seed_routes: Set[str] = set(config.routes)
        self._discovered: Set[str] = set()
        # home occurrences held back until every other route is done
        self._home_routes: List[str] = []
        self._home_phase = False

    @property
    def processed_routes(self) -> List[str]:
        return self._queue.processed

    @property
    def queued_routes(self) -> List[str]:
        return self._queue.pending

    async def render_routes(self) -> int:
        """Выполняет полный прогон и возвращает число отрендеренных маршрутов."""
        if not self.config.enabled:
            self.logger.info("Skipping prerender because enabled is set to false")
            return 0

        if self._queue.is_empty():
            self.logger.info("Skipping prerender because routes array is empty")
            return 0

        start = time.monotonic()
        self.logger.info("Initializing PrerenderServer")
        server = await self.init_server()
        try:
            self.logger.info("Initializing browser")
            renderer = self._renderer_factory(self.config, self.logger)
            await renderer.start()
            try:
                await self._run_phases(renderer, server)
            finally:
                await renderer.close()
        finally:
            if not self.config.keep_alive:
                await server.destroy()

        count = len(self._queue.processed)
        self.logger.info("Rendered %d route(s) in %.2f s", count, time.monotonic() - start)
        return count

    async def init_server(self) -> PrerenderServer:
        server = self._server_factory(self.config)
        self.logger.info("Serving static content from %s to %s", server.static_dir, server.public_path)
        try:
            await server.is_ready()
        except Exception:
            await server.destroy()
            raise
        return server

    async def _run_phases(self, renderer: RenderCapability, server: PrerenderServer) -> None:
        self._home_routes = self._queue.dequeue_home()

        if self.config.render_first_route_alone and not self._queue.is_empty():
            await self._render_next_route(renderer, server, phase="warmup")

        await self._render_all_queued_routes(renderer, server, phase="bulk")

        self._home_phase = True
        for route in self._home_routes:
            self._queue.enqueue(route)
        await self._render_all_queued_routes(renderer, server, phase="home")

    async def _render_all_queued_routes(
        self, renderer: RenderCapability, server: PrerenderServer, phase: str
    ) -> None:
        # queue length is re-read every round: discoveries land in the next round
        while not self._queue.is_empty():
            total = self._queue.size()
            await batch_requests(
                total,
                self.config.max_concurrent,
                lambda _idx: self._render_next_route(renderer, server, phase),
            )

    async def _render_next_route(
        self, renderer: RenderCapability, server: PrerenderServer, phase: str
    ) -> None:
        route = self._queue.dequeue_next()
        if route is None:
            return
        if not self._queue.mark_processed_if_new(route):
            return

        try:
            result = await renderer.render_route(route, server.base_url)
            await self._post_process(result)
            await self._writer(self.config.resolved_output_dir, result)
        except PrerenderError:
            raise
        except Exception as exc:
            raise RouteRenderError("Failed to render route", route=route, phase=phase, cause=exc) from exc

        if self.config.discover_new_routes:
            self._enqueue_discovered(find_routes_in_page(result.html))

    async def _post_process(self, result: RenderResult) -> None:
        if self.config.post_process is None:
            return
        outcome = self.config.post_process(result)
        if inspect.isawaitable(outcome):
            await outcome

    def _enqueue_discovered(self, routes: List[str]) -> None:
        limit = self.config.max_discovered_routes
        for route in routes:
            is_new = route not in self._seed_routes and route not in self._discovered
            if is_new and limit is not None and len(self._discovered) >= limit:
                self.logger.debug("Discovery limit %d reached, dropping %s", limit, route)
                continue
            if is_new:
                self._discovered.add(route)
            if route == self._queue.home_route and not self._home_phase:
                if route not in self._home_routes:
                    self._home_routes.append(route)
                continue
            self._queue.enqueue(route)
