# File: spa_prerender/exceptions.py
"""Custom exceptions for the prerender pipeline."""

from __future__ import annotations


class PrerenderError(Exception):
    """Base exception for prerender failures.

    Carries the route and the orchestration phase (``setup``, ``warmup``,
    ``bulk``, ``home``) so that a failed run can be diagnosed from the
    message alone.
    """

    def __init__(
        self,
        message: str,
        route: str | None = None,
        phase: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.route = route
        self.phase = phase
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.route:
            msg = f"{msg} (Route: {self.route})"
        if self.phase:
            msg = f"{msg} (Phase: {self.phase})"
        if self.cause:
            msg = f"{msg} (Caused by: {self.cause})"
        return msg


class ConfigurationError(PrerenderError):
    """Exception raised for configuration-related errors."""

    pass


class SetupError(PrerenderError):
    """Exception raised when the server or the browser cannot be started."""

    pass


class RouteRenderError(PrerenderError):
    """Exception raised when rendering, post-processing or writing a route fails."""

    pass


__all__ = ["PrerenderError", "ConfigurationError", "SetupError", "RouteRenderError"]
