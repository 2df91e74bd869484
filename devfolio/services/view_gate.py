"""
View Qualification Gate

Per blog, per browser minimum interval between tracked views. Rapid
refreshes and re-fired scroll triggers inside the interval are not counted.

This is per-browser rate limiting only: the state is keyed by the browser
cookie, so clearing it or switching browsers resets the limit, and
clock changes are not corrected. It is not abuse resistant.
"""

import time
from collections.abc import Callable

from devfolio.config import settings
from devfolio.utils.kv_store import KeyValueStore


def gate_key(blog_id: str) -> str:
    return f"blog-view-{blog_id}"


class ViewGate:
    def __init__(
        self,
        store: KeyValueStore,
        interval_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.interval_ms = (settings.view_gate_seconds if interval_seconds is None else interval_seconds) * 1000
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def should_track_view(self, blog_id: str) -> bool:
        """
        Decide whether a view of blog_id counts.

        Records the current time and returns True when no view was tracked
        before or the last one is older than the interval; otherwise returns
        False and leaves the stored timestamp untouched. The check and the
        write are one atomic store operation, so overlapping requests from
        the same browser count once.
        """
        return await self.store.set_if_older(gate_key(blog_id), self._now_ms(), int(self.interval_ms))
