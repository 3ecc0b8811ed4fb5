# File: spa_prerender/servers/template_renderer.py
"""spa_prerender.servers.template_renderer: сборка SSR-документа через Jinja2.

Used together with :class:`~spa_prerender.servers.handler_server.HandlerServer`:
the page handler renders the application markup, and this class wraps it in
a document whose ``<head>`` references the hashed bundles listed in a JSON
asset manifest (``{"main.js": "/assets/main.3f2a.js", ...}``).

Пример:
```python
renderer = ManifestTemplateRenderer("dist/manifest.json")
html = renderer.render(app_html, components=["src/pages/Pricing.vue"])
```
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from jinja2 import Environment, select_autoescape
from markupsafe import Markup, escape

from spa_prerender.exceptions import SetupError
from spa_prerender.utils import get_file_name

__all__ = ("ManifestTemplateRenderer", "DOCUMENT_TEMPLATE")

DOCUMENT_TEMPLATE = """<!DOCTYPE html {{ teleports.htmlAttrs }}>
<html lang="{{ lang }}">
<head {{ teleports.headAttrs }}>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    {{ head_links }}
    {{ teleports.head }}
</head>
<body {{ teleports.bodyAttrs }}>
    {{ teleports.noScript }}
    <div id="app">{{ app_html }}</div>
    {{ teleports.body }}
    {{ scripts }}
</body>
</html>
"""

_TELEPORT_KEYS = ("htmlAttrs", "headAttrs", "head", "bodyAttrs", "noScript", "body")


class ManifestTemplateRenderer:
    """Рендерит HTML-документ вокруг разметки приложения."""

    def __init__(
        self,
        manifest_path: Union[str, Path],
        template: str = DOCUMENT_TEMPLATE,
        entry_chunks: Iterable[str] = ("vendors", "main"),
        lang: str = "en",
    ) -> None:
        manifest_path = Path(manifest_path)
        if not manifest_path.is_file():
            raise SetupError(f'manifestFile:"{manifest_path}" does not exist', phase="setup")
        self.manifest: dict[str, str] = json.loads(manifest_path.read_text(encoding="utf-8"))
        self.entry_chunks = tuple(entry_chunks)
        self.lang = lang
        env = Environment(autoescape=select_autoescape(default_for_string=True))
        self._template = env.from_string(template)

    def render(
        self,
        app_html: str,
        components: Iterable[str] = (),
        teleports: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Собирает документ.

        Args:
            app_html: уже отрендеренная разметка приложения.
            components: файлы или имена компонентов текущего маршрута;
                для каждого найденного в манифесте добавляются preload и css.
            teleports: фрагменты head/body и атрибуты тегов.
        """
        fragments = {key: Markup((teleports or {}).get(key, "")) for key in _TELEPORT_KEYS}
        return self._template.render(
            lang=self.lang,
            teleports=fragments,
            head_links=Markup(self.render_head_links(components)),
            app_html=Markup(app_html),
            scripts=Markup("".join(self.render_script(f"{c}.js") for c in self.entry_chunks)),
        )

    def render_head_links(self, components: Iterable[str] = ()) -> str:
        head = ""
        for chunk in self.entry_chunks:
            head += self.render_css(f"{chunk}.css")
            head += self.render_preload_link(f"{chunk}.js")

        for component in components:
            name = get_file_name(component) or component
            if not name:
                continue
            head += self.render_preload_link(f"{name}.js")
            head += self.render_css(f"{name}.css")
        return head

    def render_preload_link(self, file_name: str) -> str:
        file_path = self.manifest.get(file_name)
        if file_path is None:
            return ""
        if file_path.endswith(".js"):
            return f'<link rel="preload" href="{escape(file_path)}" as="script">\n'
        if file_path.endswith(".css"):
            return f'<link rel="preload" href="{escape(file_path)}" as="style">\n'
        return ""

    def render_css(self, file_name: str) -> str:
        file_path = self.manifest.get(file_name)
        if not file_path:
            return ""
        return f'<link rel="stylesheet" href="{escape(file_path)}">\n'

    def render_script(self, file_name: str) -> str:
        file_path = self.manifest.get(file_name)
        if not file_path:
            return ""
        return f'<script src="{escape(file_path)}" defer></script>\n'
