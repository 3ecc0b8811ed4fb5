# File: spa_prerender/engine.py
"""spa_prerender.engine: точка запуска пререндера для CLI и тестов."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from spa_prerender.config import PrerenderConfig
from spa_prerender.logger import logger as project_logger
from spa_prerender.render.orchestrator import PrerenderOrchestrator

__all__ = ["RenderSummary", "start_render"]


@dataclass(slots=True)
class RenderSummary:
    """Итог одного прогона: отрендеренные маршруты и каталог вывода."""

    output_dir: Path
    routes: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.routes)

    def to_dict(self) -> dict:
        return {"output_dir": str(self.output_dir), "count": self.count, "routes": list(self.routes)}


async def start_render(cfg: PrerenderConfig, logger: Optional[logging.Logger] = None) -> RenderSummary:
    """
    Создаёт новый оркестратор (по одному на прогон), выполняет его и
    возвращает RenderSummary.

    Parameters
    ----------
    cfg : PrerenderConfig
        Конфигурация пререндера.
    logger : logging.Logger, optional
        Логгер для оркестратора; по умолчанию логгер проекта.
    """
    orchestrator = PrerenderOrchestrator(cfg, logger=logger or project_logger)
    try:
        await orchestrator.render_routes()
    except Exception as exc:
        (logger or project_logger).error("Prerender failed: %s", exc)
        raise
    return RenderSummary(output_dir=cfg.resolved_output_dir, routes=orchestrator.processed_routes)
