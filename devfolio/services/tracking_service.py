"""
View Tracking Service

Write path of the blog analytics pipeline: gate the view, anonymise the
visitor, and append one ViewEvent to the hosted backend.

Tracking is best-effort telemetry. Every failure is logged and discarded;
nothing here raises to the caller or retries.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from devfolio.backend.client import HostedBackend
from devfolio.config import settings
from devfolio.schemas.analytics import ViewEvent
from devfolio.services.view_gate import ViewGate
from devfolio.services.visitor import SessionIdentity, get_client_ip, hash_ip
from devfolio.utils.metrics import record_view_event

logger = logging.getLogger(__name__)

VIEWS_TABLE = "blog_views"

IPResolver = Callable[[str], Awaitable[str]]


@dataclass
class VisitorContext:
    """What the page knows about the reader"""

    user_agent: str = ""
    referrer: str = ""
    client_ip: str | None = None


def truncate(value: str | None, limit: int | None = None) -> str:
    """Hard-truncate to limit characters (default: settings.max_field_length)."""
    limit = settings.max_field_length if limit is None else limit
    return (value or "")[:limit]


class ViewTracker:
    """Records qualifying blog views"""

    def __init__(
        self,
        backend: HostedBackend,
        ip_resolver: IPResolver = get_client_ip,
        max_field_length: int | None = None,
    ):
        self.backend = backend
        self.ip_resolver = ip_resolver
        self.max_field_length = max_field_length
        self._tasks: set[asyncio.Task] = set()

    async def _resolve_ip(self, visitor: VisitorContext) -> str:
        if visitor.client_ip:
            return visitor.client_ip
        return await self.ip_resolver(visitor.user_agent)

    async def track_blog_view(
        self,
        blog_id: str,
        visitor: VisitorContext,
        gate: ViewGate,
        identity: SessionIdentity,
    ) -> bool:
        """
        Track one view of a blog post.

        Args:
            blog_id: Blog post ID
            visitor: Reader context (user agent, referrer, optional IP)
            gate: Per-browser view gate
            identity: Tab session identity

        Returns:
            True if a ViewEvent was stored, False if gated or failed
        """
        try:
            if not await gate.should_track_view(blog_id):
                record_view_event("gated")
                return False

            event = ViewEvent(
                blog_id=blog_id,
                ip_hash=hash_ip(await self._resolve_ip(visitor)),
                user_agent=truncate(visitor.user_agent, self.max_field_length),
                referrer=truncate(visitor.referrer, self.max_field_length),
                session_id=await identity.get_session_id(),
            )
            await self.backend.insert(VIEWS_TABLE, event.to_record())
        except Exception as e:
            record_view_event("failed")
            logger.error(f"Error tracking blog view for {blog_id}: {e}")
            return False

        record_view_event("tracked")
        logger.debug(f"Tracked view of blog {blog_id}")
        return True

    def schedule_blog_view(
        self,
        blog_id: str,
        visitor: VisitorContext,
        gate: ViewGate,
        identity: SessionIdentity,
    ) -> asyncio.Task:
        """
        Fire-and-forget variant of track_blog_view.

        The returned task is detached: callers must not await it on the
        request path. Its outcome is only logged.
        """
        task = asyncio.create_task(
            self.track_blog_view(blog_id, visitor, gate, identity),
            name=f"track-view-{blog_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(f"{task.get_name()} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"{task.get_name()} failed: {exc}")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight tracking tasks (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
