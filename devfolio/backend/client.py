"""
Hosted Backend Interface

The portfolio keeps its data in a hosted database-as-a-service. Services only
talk to it through this interface: table insert/select/update/delete with
simple column filters, named remote procedures, and session lookup.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Filter:
    """A single column predicate"""

    column: str
    op: str
    value: Any = None


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def is_null(column: str) -> Filter:
    return Filter(column, "is_null")


def not_null(column: str) -> Filter:
    return Filter(column, "not_null")


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True


class HostedBackend(ABC):
    """Generic client for the hosted data store"""

    @abstractmethod
    async def insert(self, table: str, record: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert one record and return the stored representation."""

    @abstractmethod
    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order: Order | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return the rows matching every filter."""

    @abstractmethod
    async def update(
        self, table: str, values: dict[str, Any], filters: Sequence[Filter]
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them."""

    @abstractmethod
    async def delete(self, table: str, filters: Sequence[Filter]) -> None:
        """Delete matching rows."""

    @abstractmethod
    async def rpc(self, function: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Call a named remote procedure."""

    @abstractmethod
    async def get_user(self, access_token: str) -> dict[str, Any]:
        """Resolve a session access token to the signed-in user."""

    async def aclose(self) -> None:
        """Release network resources."""
