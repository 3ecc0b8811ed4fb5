# File: spa_prerender/utils.py
"""spa_prerender.utils: helpers for route identifiers and asset file names."""

from __future__ import annotations

import re
from typing import Sequence

__all__: Sequence[str] = (
    "HOME_ROUTE",
    "is_path_absolute",
    "get_file_name",
)

HOME_ROUTE = "/"

_FILE_NAME_RE = re.compile(r"([ _\-\w]+)\.(\w+)$")


def is_path_absolute(href: str) -> bool:
    """True for ``/pricing``; False for ``//cdn.host/x``, ``https://…``, ``faq`` and ``#top``."""
    return href.startswith("/") and not href.startswith("//")


def get_file_name(path: str) -> str:
    """Return the stem of the last path segment (``src/Foo.vue`` -> ``Foo``) or ``""``."""
    match = _FILE_NAME_RE.search(path)
    if not match:
        return ""
    return match.group(1)
