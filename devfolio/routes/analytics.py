"""
Analytics Routes

Admin endpoints backing the blog analytics dashboard.
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from devfolio.auth import get_current_admin
from devfolio.backend.client import HostedBackend
from devfolio.dependencies import get_backend
from devfolio.schemas.analytics import (
    AnalyticsDashboard,
    AnalyticsSummary,
    BlogAnalyticsAggregate,
    ReferrerCount,
    ViewTimestamp,
)
from devfolio.services.analytics_service import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analytics"], dependencies=[Depends(get_current_admin)])


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(backend: HostedBackend = Depends(get_backend)):
    """
    Site-wide totals.

    **Returns**: total views, unique visitors, views this week and this
    month, and the most viewed blog. All values are zero/null before any
    view is recorded.
    """
    return await analytics_service.get_analytics_summary(backend)


@router.get("/blogs", response_model=list[BlogAnalyticsAggregate])
async def get_blog_analytics(backend: HostedBackend = Depends(get_backend)):
    """Per-blog aggregates, most viewed first, with blog title and creation date."""
    return await analytics_service.get_blog_analytics(backend)


@router.get("/views", response_model=list[ViewTimestamp])
async def get_views_over_time(
    days: int = Query(30, ge=1, le=365),
    backend: HostedBackend = Depends(get_backend),
):
    """Raw view timestamps of the last `days` days, oldest first."""
    return await analytics_service.get_blog_views_over_time(backend, days)


@router.get("/referrers", response_model=list[ReferrerCount])
async def get_top_referrers(backend: HostedBackend = Depends(get_backend)):
    """Top 10 referring hosts; unparsable referrers count as "Direct"."""
    return await analytics_service.get_top_referrers(backend)


@router.get("/dashboard", response_model=AnalyticsDashboard)
async def get_dashboard(
    days: int = Query(30, ge=1, le=365),
    backend: HostedBackend = Depends(get_backend),
):
    """
    Everything the dashboard shows in one call.

    **Returns**: summary, per-blog aggregates, daily view buckets, 7/30 day
    view windows per blog and the top referrers.
    """
    return await analytics_service.get_dashboard(backend, days)


@router.delete("/blogs/{blog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def reset_blog_analytics(blog_id: str, backend: HostedBackend = Depends(get_backend)) -> None:
    """Delete every recorded view and the aggregate of one blog."""
    await analytics_service.reset_blog_analytics(backend, blog_id)
    logger.info(f"Analytics reset for blog {blog_id}", extra={"blog_id": blog_id})
