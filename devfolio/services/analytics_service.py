"""
Analytics Service

Read side of the blog analytics pipeline for the admin dashboard, plus the
per-blog analytics reset. Aggregates are computed by the hosted backend
(`blog_analytics` rollup and the `get_blog_analytics_summary` procedure);
this service only reads them and shapes the results.
"""

import asyncio
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse

from devfolio.backend.client import HostedBackend, Order, eq, gte, neq, not_null
from devfolio.config import settings
from devfolio.schemas.analytics import (
    AnalyticsDashboard,
    AnalyticsSummary,
    BlogAnalyticsAggregate,
    ReferrerCount,
    ViewTimestamp,
)
from devfolio.services.reporting import blog_view_windows, bucket_daily_views

logger = logging.getLogger(__name__)

VIEWS_TABLE = "blog_views"
AGGREGATE_TABLE = "blog_analytics"
SUMMARY_PROCEDURE = "get_blog_analytics_summary"
DIRECT_REFERRER = "Direct"


def referrer_host(referrer: str) -> str:
    """Hostname of a referrer URL, or 'Direct' when it cannot be parsed."""
    try:
        host = urlparse(referrer).hostname
    except ValueError:
        return DIRECT_REFERRER
    return host or DIRECT_REFERRER


def tally_referrers(referrers: list[str], limit: int | None = None) -> list[ReferrerCount]:
    """Count referrers by hostname, most frequent first; ties keep first-seen order."""
    limit = settings.top_referrers_limit if limit is None else limit
    counts = Counter(referrer_host(referrer) for referrer in referrers if referrer)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [ReferrerCount(referrer=host, count=count) for host, count in ranked[:limit]]


class AnalyticsService:
    """Service for blog view analytics and reports"""

    @staticmethod
    async def get_analytics_summary(backend: HostedBackend) -> AnalyticsSummary:
        """
        Site-wide totals from the backend summary procedure.

        Returns a zero-valued summary when the procedure yields no rows.
        """
        try:
            rows = await backend.rpc(SUMMARY_PROCEDURE)
            if not rows:
                return AnalyticsSummary.empty()
            return AnalyticsSummary.model_validate(rows[0])
        except Exception as e:
            logger.error(f"Error fetching analytics summary: {e}")
            raise

    @staticmethod
    async def get_blog_analytics(backend: HostedBackend) -> list[BlogAnalyticsAggregate]:
        """Per-blog rollups with minimal blog metadata, most viewed first."""
        try:
            rows = await backend.select(
                AGGREGATE_TABLE,
                columns="*, blogs(id, title, created_at)",
                order=Order("view_count", ascending=False),
            )
            return [BlogAnalyticsAggregate.model_validate(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching blog analytics: {e}")
            raise

    @staticmethod
    async def get_blog_views_over_time(backend: HostedBackend, days: int | None = None) -> list[ViewTimestamp]:
        """
        Raw view events from the last `days` days, oldest first.

        No aggregation happens here; see reporting.bucket_daily_views().
        """
        days = settings.analytics_default_days if days is None else days
        since = datetime.now(timezone.utc) - timedelta(days=days)
        try:
            rows = await backend.select(
                VIEWS_TABLE,
                columns="viewed_at, blog_id",
                filters=[gte("viewed_at", since)],
                order=Order("viewed_at", ascending=True),
            )
            return [ViewTimestamp.model_validate(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching blog views over time: {e}")
            raise

    @staticmethod
    async def get_top_referrers(backend: HostedBackend, limit: int | None = None) -> list[ReferrerCount]:
        """Top referring hostnames across all recorded views."""
        try:
            rows = await backend.select(
                VIEWS_TABLE,
                columns="referrer",
                filters=[neq("referrer", ""), not_null("referrer")],
            )
        except Exception as e:
            logger.error(f"Error fetching top referrers: {e}")
            raise
        return tally_referrers([row.get("referrer") for row in rows], limit)

    @staticmethod
    async def reset_blog_analytics(backend: HostedBackend, blog_id: str) -> None:
        """
        Delete every view event of a blog, then its rollup row.

        Both deletes are attempted. The first failure is re-raised; there is
        no rollback of the delete that succeeded.
        """
        errors = []
        for table in (VIEWS_TABLE, AGGREGATE_TABLE):
            try:
                await backend.delete(table, [eq("blog_id", blog_id)])
            except Exception as e:
                logger.error(f"Error resetting blog analytics ({table}) for {blog_id}: {e}")
                errors.append(e)

        if errors:
            raise errors[0]
        logger.info(f"Analytics reset for blog {blog_id}")

    @staticmethod
    async def get_dashboard(backend: HostedBackend, days: int | None = None) -> AnalyticsDashboard:
        """
        Everything the admin dashboard shows, fetched concurrently.

        Any failing read fails the whole dashboard.
        """
        days = settings.analytics_default_days if days is None else days
        # Month windows need at least 30 days of events
        summary, blogs, views, referrers = await asyncio.gather(
            AnalyticsService.get_analytics_summary(backend),
            AnalyticsService.get_blog_analytics(backend),
            AnalyticsService.get_blog_views_over_time(backend, max(days, 30)),
            AnalyticsService.get_top_referrers(backend),
        )

        return AnalyticsDashboard(
            summary=summary,
            blogs=blogs,
            daily_views=bucket_daily_views(views, days=days),
            view_windows=blog_view_windows(views, [blog.blog_id for blog in blogs]),
            top_referrers=referrers,
            generated_at=datetime.now(timezone.utc),
        )


# Singleton instance
analytics_service = AnalyticsService()
