# File: spa_prerender/render/queue.py
"""
Route queue: pending routes in FIFO order plus the set of dispatched routes.

The queue itself never deduplicates on insertion. A route may sit in
``pending`` several times; :meth:`RouteQueue.mark_processed_if_new` is the
only gate deciding whether it gets rendered.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from spa_prerender.utils import HOME_ROUTE

__all__ = ("RouteQueue",)


class RouteQueue:
    """Mutable work list owned by a single orchestrator run."""

    def __init__(self, home_route: str = HOME_ROUTE) -> None:
        self.home_route = home_route
        self._pending: Deque[str] = deque()
        # dict keeps dispatch order for reporting
        self._processed: Dict[str, None] = {}

    def enqueue_initial(self, routes: Iterable[str]) -> None:
        """Replace pending routes with a copy of *routes*."""
        self._pending = deque(routes)

    def dequeue_home(self) -> List[str]:
        """Remove every occurrence of the home route and return them."""
        homes = [r for r in self._pending if r == self.home_route]
        if homes:
            self._pending = deque(r for r in self._pending if r != self.home_route)
        return homes

    def dequeue_next(self) -> Optional[str]:
        """Pop the oldest pending route, or ``None`` when exhausted."""
        if not self._pending:
            return None
        return self._pending.popleft()

    def mark_processed_if_new(self, route: str) -> bool:
        if route in self._processed:
            return False
        self._processed[route] = None
        return True

    def enqueue(self, route: str) -> None:
        self._pending.append(route)

    def is_empty(self) -> bool:
        return not self._pending

    def size(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending(self) -> List[str]:
        return list(self._pending)

    @property
    def processed(self) -> List[str]:
        return list(self._processed)
