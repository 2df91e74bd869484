from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ViewEvent(BaseModel):
    blog_id: str = Field(..., title="Blog ID", description="The blog post that was viewed.")
    ip_hash: str = Field(..., title="IP Hash", description="Salted SHA-256 digest of the visitor address.")
    user_agent: str = Field("", title="User Agent", description="Truncated to max_field_length by the tracker.")
    referrer: str = Field("", title="Referrer", description="Truncated to max_field_length by the tracker.")
    session_id: str = Field(..., title="Session ID", description="Tab-lifetime correlation token.")
    viewed_at: Optional[datetime] = Field(None, description="Assigned by the backend on insert.")

    def to_record(self) -> dict:
        """Insert payload; viewed_at is left to the backend."""
        return self.model_dump(exclude={"viewed_at"})


class ViewTimestamp(BaseModel):
    """Projection of a ViewEvent used for time-series reporting"""

    viewed_at: datetime
    blog_id: str


class BlogMeta(BaseModel):
    id: str
    title: str
    created_at: Optional[datetime] = None


class BlogAnalyticsAggregate(BaseModel):
    blog_id: str = Field(..., title="Blog ID")
    view_count: int = Field(0, title="View Count")
    unique_views: int = Field(0, title="Unique Views")
    last_viewed: Optional[datetime] = Field(None, title="Last Viewed")
    blogs: Optional[BlogMeta] = Field(None, description="Embedded blog metadata.")


class AnalyticsSummary(BaseModel):
    total_views: int = 0
    total_unique_views: int = 0
    views_this_week: int = 0
    views_this_month: int = 0
    most_viewed_blog_id: Optional[str] = None
    most_viewed_blog_title: Optional[str] = None
    most_viewed_count: int = 0

    @field_validator(
        "total_views", "total_unique_views", "views_this_week", "views_this_month", "most_viewed_count",
        mode="before",
    )
    @classmethod
    def null_count_is_zero(cls, v):
        """The summary procedure returns null counts before any view exists."""
        return 0 if v is None else v

    @classmethod
    def empty(cls) -> "AnalyticsSummary":
        return cls()

    class Config:
        json_schema_extra = {
            "example": {
                "total_views": 1280,
                "total_unique_views": 904,
                "views_this_week": 75,
                "views_this_month": 310,
                "most_viewed_blog_id": "7b0c6a8e-2f7e-4a61-9d43-1c2f0b0e5a11",
                "most_viewed_blog_title": "Building a tiny CMS",
                "most_viewed_count": 402,
            }
        }


class ReferrerCount(BaseModel):
    referrer: str = Field(..., description="Referring hostname, or 'Direct'.")
    count: int


class DailyViews(BaseModel):
    date: str = Field(..., description="UTC date, YYYY-MM-DD.")
    views: int = 0


class BlogViewWindow(BaseModel):
    blog_id: str
    views_this_week: int = 0
    views_this_month: int = 0


class AnalyticsDashboard(BaseModel):
    summary: AnalyticsSummary
    blogs: List[BlogAnalyticsAggregate]
    daily_views: List[DailyViews]
    view_windows: List[BlogViewWindow]
    top_referrers: List[ReferrerCount]
    generated_at: datetime
