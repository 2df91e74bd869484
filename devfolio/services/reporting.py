"""
Reporting helpers for the admin dashboard.

Pure transforms over raw view events returned by
AnalyticsService.get_blog_views_over_time(); nothing here talks to the backend.
"""

import math
from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from devfolio.schemas.analytics import BlogViewWindow, DailyViews, ViewTimestamp

WORDS_PER_MINUTE = 200


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def bucket_daily_views(
    events: Iterable[ViewTimestamp],
    days: int = 30,
    today: date | None = None,
) -> list[DailyViews]:
    """
    Count views per UTC day.

    Returns one entry per day for the `days` days ending today (oldest
    first), including zero days. Events outside the window are ignored.
    """
    today = today or datetime.now(timezone.utc).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts = Counter(_as_utc(event.viewed_at).date() for event in events)
    return [DailyViews(date=day.isoformat(), views=counts.get(day, 0)) for day in window]


def views_since(
    events: Iterable[ViewTimestamp],
    blog_id: str,
    days: int,
    now: datetime | None = None,
) -> int:
    """Number of views of blog_id within the last `days` days."""
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
    return sum(1 for event in events if event.blog_id == blog_id and _as_utc(event.viewed_at) >= cutoff)


def blog_view_windows(
    events: Iterable[ViewTimestamp],
    blog_ids: Iterable[str],
    now: datetime | None = None,
) -> list[BlogViewWindow]:
    """Week and month view counts for each blog."""
    events = list(events)
    now = now or datetime.now(timezone.utc)
    return [
        BlogViewWindow(
            blog_id=blog_id,
            views_this_week=views_since(events, blog_id, 7, now),
            views_this_month=views_since(events, blog_id, 30, now),
        )
        for blog_id in blog_ids
    ]


def estimate_read_time(body: str) -> int:
    """Estimate read time in minutes based on word count (~200 words/min)."""
    word_count = len(body.split())
    minutes = math.ceil(word_count / WORDS_PER_MINUTE)
    return max(1, minutes)
