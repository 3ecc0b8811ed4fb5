# File: spa_prerender/__init__.py
"""
spa_prerender package initializer.
Defines package version and exposes the public API.
"""
__version__ = "0.1.0"

from spa_prerender.config import PrerenderConfig, load_config
from spa_prerender.engine import RenderSummary, start_render
from spa_prerender.render.models import PageInjection, RenderResult
from spa_prerender.render.orchestrator import PrerenderOrchestrator

__all__ = [
    "__version__",
    "PageInjection",
    "PrerenderConfig",
    "PrerenderOrchestrator",
    "RenderResult",
    "RenderSummary",
    "load_config",
    "start_render",
]
