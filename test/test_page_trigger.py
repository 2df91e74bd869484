"""
Tests for the reading progress trigger
"""

import asyncio

import pytest

from devfolio.services.page_trigger import ReadingProgressTrigger, scroll_percentage


class TestScrollPercentage:
    def test_halfway(self):
        """Test scroll position relative to the scrollable height"""
        assert scroll_percentage(500, 1000, 2000) == 50

    def test_short_document(self):
        """Test a document that fits the viewport counts as fully scrolled"""
        assert scroll_percentage(0, 1000, 800) == 100

    def test_clamped(self):
        """Test overscroll is clamped"""
        assert scroll_percentage(5000, 1000, 2000) == 100
        assert scroll_percentage(-20, 1000, 2000) == 0


class TestReadingProgressTrigger:
    """Test firing rules"""

    def test_fires_on_scroll_threshold(self):
        """Test crossing 50% fires once with reason scroll"""
        reasons = []
        trigger = ReadingProgressTrigger(reasons.append)

        assert trigger.on_scroll(100, 1000, 3000) is False
        assert trigger.on_scroll(1000, 1000, 3000) is True
        assert trigger.on_scroll(2000, 1000, 3000) is False
        assert reasons == ["scroll"]

    def test_fires_on_dwell(self):
        """Test 30 seconds on the page fires with reason dwell"""
        reasons = []
        trigger = ReadingProgressTrigger(reasons.append)

        assert trigger.on_dwell(29) is False
        assert trigger.on_dwell(30) is True
        assert reasons == ["dwell"]

    def test_fires_at_most_once(self):
        """Test scroll after dwell does not fire again"""
        reasons = []
        trigger = ReadingProgressTrigger(reasons.append)

        trigger.on_dwell(30)
        trigger.on_scroll(2000, 1000, 3000)

        assert reasons == ["dwell"]

    def test_reset_rearms(self):
        """Test a new page load can fire again"""
        reasons = []
        trigger = ReadingProgressTrigger(reasons.append)

        trigger.on_dwell(30)
        trigger.reset()
        trigger.on_scroll(2000, 1000, 3000)

        assert reasons == ["dwell", "scroll"]

    @pytest.mark.asyncio
    async def test_dwell_timer_fires(self):
        """Test the armed timer fires after the dwell time"""
        reasons = []
        trigger = ReadingProgressTrigger(reasons.append, dwell_seconds=0.01)

        await trigger.start()

        assert reasons == ["dwell"]
        assert trigger.tracked is True

    @pytest.mark.asyncio
    async def test_scroll_cancels_timer(self):
        """Test firing by scroll disarms the dwell timer"""
        reasons = []
        trigger = ReadingProgressTrigger(reasons.append, dwell_seconds=0.05)

        timer = trigger.start()
        trigger.on_scroll(2000, 1000, 3000)
        await asyncio.sleep(0.1)

        assert timer.cancelled()
        assert reasons == ["scroll"]
