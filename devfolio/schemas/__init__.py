from devfolio.schemas.analytics import (
    AnalyticsDashboard,
    AnalyticsSummary,
    BlogAnalyticsAggregate,
    BlogMeta,
    BlogViewWindow,
    DailyViews,
    ReferrerCount,
    ViewEvent,
    ViewTimestamp,
)
from devfolio.schemas.content import (
    BlogPost,
    BlogPostCreate,
    BlogPostDetail,
    BlogPostUpdate,
    ContactMessage,
    ContactMessageCreate,
    Project,
    ProjectCreate,
    ProjectUpdate,
)
