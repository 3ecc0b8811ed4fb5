# File: spa_prerender/parser/html_parser.py
"""Route discovery in rendered HTML.

Only path-absolute ``<a href>`` targets are returned, in document order and
without deduplication: ``/pricing`` is kept, while ``https://other.host/``,
``//cdn.host/x``, ``faq``, ``#top``, ``mailto:`` and ``javascript:`` links
are dropped. No origin check is made beyond the leading slash.
"""
from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from spa_prerender.utils import is_path_absolute

__all__: Sequence[str] = ("find_routes_in_page",)


def find_routes_in_page(html: str) -> list[str]:
    """Return path-absolute link targets found in *html*."""
    soup = BeautifulSoup(html, "html.parser")
    routes: list[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        href = href_val.strip()
        if is_path_absolute(href):
            routes.append(href)
    return routes
