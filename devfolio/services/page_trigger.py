"""
Reading progress trigger.

Decides when a blog page counts as read: the reader scrolled past a share
of the document, or stayed on the page long enough, whichever happens
first. Fires its callback at most once per page load.
"""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

SCROLL = "scroll"
DWELL = "dwell"


def scroll_percentage(scroll_top: float, viewport_height: float, document_height: float) -> float:
    """How far down the document the viewport is, 0 to 100."""
    scrollable = document_height - viewport_height
    if scrollable <= 0:
        # The whole document fits in the viewport
        return 100.0
    return max(0.0, min(100.0, scroll_top / scrollable * 100))


class ReadingProgressTrigger:
    def __init__(
        self,
        on_trigger: Callable[[str], object],
        scroll_threshold: float = 50,
        dwell_seconds: float = 30,
    ):
        self.on_trigger = on_trigger
        self.scroll_threshold = scroll_threshold
        self.dwell_seconds = dwell_seconds
        self.tracked = False
        self._timer: asyncio.Task | None = None

    def _fire(self, reason: str) -> bool:
        if self.tracked:
            return False
        self.tracked = True
        self.cancel()
        logger.debug(f"Reading trigger fired by {reason}")
        self.on_trigger(reason)
        return True

    def on_scroll(self, scroll_top: float, viewport_height: float, document_height: float) -> bool:
        """Feed a scroll position; returns True if this call fired the trigger."""
        if self.tracked:
            return False
        if scroll_percentage(scroll_top, viewport_height, document_height) >= self.scroll_threshold:
            return self._fire(SCROLL)
        return False

    def on_dwell(self, elapsed_seconds: float) -> bool:
        """Feed time spent on the page; returns True if this call fired the trigger."""
        if self.tracked or elapsed_seconds < self.dwell_seconds:
            return False
        return self._fire(DWELL)

    def start(self) -> asyncio.Task:
        """Arm the dwell timer on the running event loop."""
        self.cancel()
        self._timer = asyncio.create_task(self._dwell_timer(), name="reading-dwell-timer")
        return self._timer

    async def _dwell_timer(self) -> None:
        await asyncio.sleep(self.dwell_seconds)
        self._timer = None
        self.on_dwell(self.dwell_seconds)

    def cancel(self) -> None:
        """Disarm the dwell timer (page left or trigger already fired)."""
        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    def reset(self) -> None:
        """New page load: clear the tracked flag and disarm the timer."""
        self.cancel()
        self.tracked = False
