# File: spa_prerender/render/browser.py
"""Browser management and route rendering with Playwright."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

from playwright.async_api import Browser, Playwright, async_playwright

from spa_prerender.config import PrerenderConfig
from spa_prerender.exceptions import SetupError
from spa_prerender.logger import LOGGER_NAME
from spa_prerender.render.models import RenderResult

__all__ = ("PRERENDER_READY_EVENT_LISTENER", "RenderCapability", "PlaywrightRenderer")

PRERENDER_READY_EVENT_LISTENER = "__PRERENDER_STATUS__"
_UNDEFINED_EVENT = "Undefined Event for renderAfterEvent"


class RenderCapability(Protocol):
    """What the orchestrator needs from a browser."""

    async def start(self) -> None: ...

    async def render_route(self, route: str, base_url: str) -> RenderResult: ...

    async def close(self) -> None: ...


class PlaywrightRenderer:
    """One browser per run, one fresh context and page per route."""

    def __init__(self, config: PrerenderConfig, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> PlaywrightRenderer:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        if self._browser is not None:
            return
        options = self.config.browser
        try:
            self._playwright = await async_playwright().start()
            browser_type = getattr(self._playwright, options.browser_type)
            self._browser = await browser_type.launch(headless=options.headless, args=list(options.args))
        except Exception as exc:
            await self.close()
            raise SetupError("Browser failed to launch", phase="setup", cause=exc) from exc
        self.logger.debug("Browser %s launched", options.browser_type)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    # ------------------------------------------------------------------ #
    # Page scripts                                                       #
    # ------------------------------------------------------------------ #

    def injection_script(self) -> str:
        assignments = [
            f"window[{json.dumps(i.key)}] = {json.dumps(i.value)};" for i in self.config.injections
        ]
        return "(() => {" + "".join(assignments) + "})()"

    def ready_listener_script(self) -> str:
        # installed even without render_after_event so apps can detect prerendering
        event = json.dumps(self.config.render_after_event or _UNDEFINED_EVENT)
        key = json.dumps(PRERENDER_READY_EVENT_LISTENER)
        return (
            f"window[{key}] = new Promise((resolve) => {{"
            f"document.addEventListener({event}, () => resolve());"
            f"}});"
        )

    def ready_script(self) -> Optional[str]:
        if self.config.render_after_event is not None:
            return f"() => window[{json.dumps(PRERENDER_READY_EVENT_LISTENER)}]"
        if self.config.render_after_time is not None:
            return f"() => new Promise((resolve) => setTimeout(resolve, {self.config.render_after_time}))"
        return None

    # ------------------------------------------------------------------ #
    # Rendering                                                          #
    # ------------------------------------------------------------------ #

    async def render_route(self, route: str, base_url: str) -> RenderResult:
        if self._browser is None:
            raise RuntimeError("Browser not started")
        url = base_url + route
        self.logger.info("Rendering %s", url)

        options = self.config.browser
        context = await self._browser.new_context(java_script_enabled=self.config.enable_page_js)
        try:
            page = await context.new_page()
            page.on("pageerror", lambda err: self._on_page_error(url, err))
            await page.add_init_script(self.injection_script())
            await page.add_init_script(self.ready_listener_script())

            await page.goto(url, wait_until=options.wait_until, timeout=options.timeout * 1000)

            ready = self.ready_script()
            if ready is not None:
                await page.evaluate(ready)

            observed = await page.evaluate("() => window.location.pathname")
            html = await page.content()
        finally:
            await context.close()

        return RenderResult(original_route=route, route=observed, html=html)

    def _on_page_error(self, url: str, err: Any) -> None:
        self.logger.warning("Page error while rendering %s: %s", url, err)
