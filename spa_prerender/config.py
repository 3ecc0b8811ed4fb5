# File: spa_prerender/config.py
"""
Опции пререндера: какие маршруты рендерить, откуда раздавать сборку,
куда писать HTML и как ждать готовности страницы.

Файл конфига (YAML или JSON) проверяется моделью PrerenderConfig; опции
CLI накладываются поверх файла до проверки.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Callable, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ImportString,
    field_validator,
    model_validator,
)

from spa_prerender.render.models import PageInjection, RenderResult
from spa_prerender.utils import is_path_absolute

PostProcessFn = Callable[[RenderResult], Any]


class BrowserOptions(BaseModel):
    """Параметры запуска браузера и навигации по странице."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    args: list[str] = Field(default_factory=list, description="Дополнительные аргументы запуска.")
    timeout: float = Field(30.0, gt=0, description="Таймаут навигации на одну страницу (секунд).")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "networkidle"


class PrerenderConfig(BaseModel):
    """Конфигурация для одного запуска пререндера."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    routes: list[str] = Field(..., description="Маршруты для пререндера.")
    entry_dir: Path = Field(..., description="Каталог собранного приложения.")
    entry_file: str = Field("index.html", min_length=1, description="Точка входа: .html или .py.")
    public_path: str = Field("/", description="Префикс, под которым раздаются статические файлы.")
    output_dir: Optional[Path] = Field(None, description="Куда писать страницы (по умолчанию entry_dir).")

    enabled: bool = True
    keep_alive: bool = False
    max_concurrent: Optional[int] = Field(None, ge=1, description="Размер волны рендеринга.")
    discover_new_routes: bool = False
    render_first_route_alone: bool = False
    max_discovered_routes: Optional[int] = Field(
        None, ge=0, description="Лимит новых маршрутов, найденных в ссылках (None = без лимита)."
    )

    render_after_event: Optional[str] = Field(None, min_length=1)
    render_after_time: Optional[int] = Field(None, ge=0, description="Задержка перед снимком (мс).")
    injections: list[PageInjection] = Field(default_factory=list)
    post_process: Optional[ImportString[PostProcessFn]] = Field(
        None, description="Колбэк module:function, вызывается после рендера и до записи."
    )
    enable_page_js: bool = True
    browser: BrowserOptions = Field(default_factory=BrowserOptions)

    @field_validator("routes")
    @classmethod
    def _check_routes(cls, v: list[str]) -> list[str]:
        bad = [r for r in v if not is_path_absolute(r)]
        if bad:
            raise ValueError(f"routes must start with '/': {bad}")
        return v

    @field_validator("public_path")
    @classmethod
    def _normalize_public_path(cls, v: str) -> str:
        if not v.startswith("/"):
            v = "/" + v
        return v

    @model_validator(mode="after")
    def _check_readiness_signal(self) -> PrerenderConfig:
        if self.render_after_event is not None and self.render_after_time is not None:
            raise ValueError("render_after_event and render_after_time are mutually exclusive")
        return self

    @property
    def resolved_output_dir(self) -> Path:
        return self.output_dir if self.output_dir is not None else self.entry_dir


DEFAULT_CONFIG_PATH = Path("prerender.yaml")

# suffix -> (parser, parse error type)
_PARSERS: dict[str, tuple[Callable[[str], Any], type[Exception]]] = {
    ".yaml": (yaml.safe_load, yaml.YAMLError),
    ".yml": (yaml.safe_load, yaml.YAMLError),
    ".json": (json.loads, json.JSONDecodeError),
}


def _read_mapping(path: Path) -> dict[str, Any]:
    """Разбирает файл конфига по расширению; пустой файл даёт пустой dict."""
    try:
        parse, parse_error = _PARSERS[path.suffix.lower()]
    except KeyError:
        raise ValueError(
            f"Конфиг {path.name}: ожидается .yaml, .yml или .json, получено {path.suffix or 'без расширения'}"
        ) from None

    try:
        data = parse(path.read_text(encoding="utf-8"))
    except parse_error as exc:
        raise ValueError(f"Не удалось разобрать {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"{path.name}: ожидается mapping с опциями пререндера, а не {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None], **overrides: Any) -> PrerenderConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект PrerenderConfig.

    ``overrides`` (опции CLI) накладываются поверх файла до валидации;
    значения ``None`` означают «не задано» и пропускаются.
    Без ``path`` ищет ``prerender.yaml`` в текущем каталоге.
    """
    cfg_path = DEFAULT_CONFIG_PATH if path is None else Path(path).expanduser().resolve()
    if not cfg_path.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(cfg_path))

    data = _read_mapping(cfg_path)
    data.update({key: value for key, value in overrides.items() if value is not None})
    return PrerenderConfig(**data)
