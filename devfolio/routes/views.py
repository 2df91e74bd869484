"""
View Tracking Routes

Public endpoint the blog reader calls once its reading trigger fires.
"""

from fastapi import APIRouter, Depends, status

from devfolio.dependencies import VisitorScope, get_tracker, get_visitor_scope
from devfolio.services.tracking_service import ViewTracker

router = APIRouter(tags=["Tracking"])


@router.post("/blogs/{blog_id}/views", status_code=status.HTTP_202_ACCEPTED)
async def track_view(
    blog_id: str,
    scope: VisitorScope = Depends(get_visitor_scope),
    tracker: ViewTracker = Depends(get_tracker),
) -> dict[str, bool]:
    """
    Record a view of a blog post.

    Tracking runs in the background and never fails the request: the
    response is always 202, whether or not a view ends up being stored.
    """
    tracker.schedule_blog_view(blog_id, scope.visitor, scope.gate, scope.identity)
    return {"accepted": True}
