"""
In-memory test doubles

Provides:
- FakeBackend: a HostedBackend over Python dicts, with the blog_analytics
  rollup and the summary procedure the hosted service maintains
- Failure injection per (operation, table)
"""

import copy
import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from devfolio.backend.client import Filter, HostedBackend, Order
from devfolio.exceptions import AuthenticationError, BackendError

ADMIN_TOKEN = "admin-token"
ADMIN_USER = {"id": "0f6e3d7a-admin", "email": "admin@example.com", "role": "authenticated"}

AUTO_TIMESTAMPS = {
    "blogs": "created_at",
    "projects": "created_at",
    "contact_messages": "created_at",
    "blog_views": "viewed_at",
}


def _matches(row: dict[str, Any], flt: Filter) -> bool:
    value = row.get(flt.column)
    if flt.op == "eq":
        return value == flt.value
    if flt.op == "neq":
        return value != flt.value
    if flt.op == "gte":
        return value is not None and value >= flt.value
    if flt.op == "lte":
        return value is not None and value <= flt.value
    if flt.op == "is_null":
        return value is None
    if flt.op == "not_null":
        return value is not None
    raise ValueError(f"Unsupported filter operator: {flt.op}")


class FakeBackend(HostedBackend):
    """Mock hosted backend that keeps tables in memory"""

    def __init__(self, now=None):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.users = {ADMIN_TOKEN: ADMIN_USER}
        self.closed = False
        self._failures: dict[tuple[str, str], tuple[Exception, bool]] = {}
        self._now = now or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def fail(self, operation: str, table: str, exc: Exception | None = None, once: bool = False) -> None:
        """Make the next (or every) `operation` on `table` raise."""
        exc = exc or BackendError(f"{operation} on {table} failed", operation=f"{operation}:{table}", backend_status=500)
        self._failures[(operation, table)] = (exc, once)

    def seed(self, table: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        """Put rows into a table without going through insert()."""
        stored = [dict(row) for row in rows]
        self.tables.setdefault(table, []).extend(stored)
        return stored

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        failure = self._failures.get((operation, table))
        if failure is None:
            return
        exc, once = failure
        if once:
            del self._failures[(operation, table)]
        raise exc

    # ------------------------------------------------------------------
    # HostedBackend
    # ------------------------------------------------------------------

    async def insert(self, table: str, record: dict[str, Any]) -> list[dict[str, Any]]:
        self._check("insert", table)
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        if table in AUTO_TIMESTAMPS:
            row.setdefault(AUTO_TIMESTAMPS[table], self._now())
        if table == "contact_messages":
            row.setdefault("read", False)
        self.tables.setdefault(table, []).append(row)

        if table == "blog_views":
            self._roll_up(row)
        return [copy.deepcopy(row)]

    def _roll_up(self, view: dict[str, Any]) -> None:
        blog_id = view["blog_id"]
        views = [row for row in self.rows("blog_views") if row["blog_id"] == blog_id]
        aggregates = self.tables.setdefault("blog_analytics", [])
        aggregate = next((row for row in aggregates if row["blog_id"] == blog_id), None)
        if aggregate is None:
            aggregate = {"blog_id": blog_id}
            aggregates.append(aggregate)
        aggregate["view_count"] = len(views)
        aggregate["unique_views"] = len({row["ip_hash"] for row in views})
        aggregate["last_viewed"] = view["viewed_at"]

    def _project(self, table: str, row: dict[str, Any], columns: str) -> dict[str, Any]:
        embed = "blogs(" in columns
        plain = columns.split("blogs(")[0] if embed else columns
        names = [name.strip() for name in plain.split(",") if name.strip()]

        result = copy.deepcopy(row) if "*" in names else {name: copy.deepcopy(row.get(name)) for name in names}
        if embed:
            blog = next((b for b in self.rows("blogs") if b.get("id") == row.get("blog_id")), None)
            result["blogs"] = (
                {"id": blog["id"], "title": blog["title"], "created_at": blog.get("created_at")} if blog else None
            )
        return result

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order: Order | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        self._check("select", table)
        rows = [row for row in self.rows(table) if all(_matches(row, flt) for flt in filters)]
        if order is not None:
            rows = sorted(rows, key=lambda row: row.get(order.column), reverse=not order.ascending)
        if limit is not None:
            rows = rows[:limit]
        return [self._project(table, row, columns) for row in rows]

    async def update(
        self, table: str, values: dict[str, Any], filters: Sequence[Filter]
    ) -> list[dict[str, Any]]:
        self._check("update", table)
        updated = []
        for row in self.rows(table):
            if all(_matches(row, flt) for flt in filters):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, table: str, filters: Sequence[Filter]) -> None:
        self._check("delete", table)
        if table in self.tables:
            self.tables[table] = [
                row for row in self.tables[table] if not all(_matches(row, flt) for flt in filters)
            ]

    async def rpc(self, function: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        self._check("rpc", function)
        if function != "get_blog_analytics_summary":
            raise BackendError(f"Unknown procedure {function}", operation=f"rpc:{function}", backend_status=404)

        views = self.rows("blog_views")
        if not views:
            return []

        now = self._now()
        aggregates = sorted(self.rows("blog_analytics"), key=lambda row: row["view_count"], reverse=True)
        top = aggregates[0] if aggregates else None
        top_blog = next((b for b in self.rows("blogs") if top and b.get("id") == top["blog_id"]), None)
        return [
            {
                "total_views": len(views),
                "total_unique_views": len({row["ip_hash"] for row in views}),
                "views_this_week": sum(1 for row in views if row["viewed_at"] >= now - timedelta(days=7)),
                "views_this_month": sum(1 for row in views if row["viewed_at"] >= now - timedelta(days=30)),
                "most_viewed_blog_id": top["blog_id"] if top else None,
                "most_viewed_blog_title": top_blog["title"] if top_blog else None,
                "most_viewed_count": top["view_count"] if top else 0,
            }
        ]

    async def get_user(self, access_token: str) -> dict[str, Any]:
        self._check("get_user", "auth")
        user = self.users.get(access_token)
        if user is None:
            raise AuthenticationError("Invalid or expired session")
        return dict(user)

    async def aclose(self) -> None:
        self.closed = True


async def fixed_ip(user_agent: str) -> str:
    """IP resolver that never touches the network."""
    return "203.0.113.7"
