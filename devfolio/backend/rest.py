"""
REST Backend Client

HostedBackend implementation for PostgREST-style hosted databases
(`/rest/v1/<table>`, `/rest/v1/rpc/<function>`, `/auth/v1/user`).
"""

import logging
import time
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

import httpx

from devfolio.backend.client import Filter, HostedBackend, Order
from devfolio.exceptions import AuthenticationError, BackendError, BackendUnavailableError
from devfolio.utils.metrics import record_backend_call

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def encode_filters(filters: Sequence[Filter]) -> list[tuple[str, str]]:
    """Translate filters into PostgREST query parameters."""
    params = []
    for f in filters:
        if f.op == "is_null":
            params.append((f.column, "is.null"))
        elif f.op == "not_null":
            params.append((f.column, "not.is.null"))
        elif f.op in ("eq", "neq", "gte", "lte"):
            params.append((f.column, f"{f.op}.{_format_value(f.value)}"))
        else:
            raise ValueError(f"Unsupported filter operator: {f.op}")
    return params


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


class RestBackend(HostedBackend):
    """Async httpx client for the hosted backend's REST interface"""

    def __init__(
        self,
        url: str,
        api_key: str,
        service_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=url.rstrip("/"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {service_key or api_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, operation: str, method: str, path: str, **kwargs) -> httpx.Response:
        start_time = time.perf_counter()
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            record_backend_call(operation, "timeout", time.perf_counter() - start_time)
            raise BackendUnavailableError(f"Backend request timed out: {e}", operation=operation) from e
        except httpx.RequestError as e:
            record_backend_call(operation, "error", time.perf_counter() - start_time)
            raise BackendUnavailableError(f"Backend request error: {e}", operation=operation) from e

        outcome = "ok" if response.is_success else "rejected"
        record_backend_call(operation, outcome, time.perf_counter() - start_time)
        if not response.is_success:
            message = _error_message(response)
            logger.debug(f"Backend {operation} rejected ({response.status_code}): {message}")
            raise BackendError(message, operation=operation, backend_status=response.status_code)
        return response

    @staticmethod
    def _rows(response: httpx.Response) -> list[dict[str, Any]]:
        if not response.content:
            return []
        data = response.json()
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return data

    async def insert(self, table: str, record: dict[str, Any]) -> list[dict[str, Any]]:
        response = await self._request(
            f"insert:{table}",
            "POST",
            f"/rest/v1/{table}",
            json=record,
            headers={"Prefer": "return=representation"},
        )
        return self._rows(response)

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order: Order | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = [("select", columns.replace(" ", ""))]
        params.extend(encode_filters(filters))
        if order is not None:
            params.append(("order", f"{order.column}.{'asc' if order.ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        response = await self._request(f"select:{table}", "GET", f"/rest/v1/{table}", params=params)
        return self._rows(response)

    async def update(
        self, table: str, values: dict[str, Any], filters: Sequence[Filter]
    ) -> list[dict[str, Any]]:
        response = await self._request(
            f"update:{table}",
            "PATCH",
            f"/rest/v1/{table}",
            params=encode_filters(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return self._rows(response)

    async def delete(self, table: str, filters: Sequence[Filter]) -> None:
        if not filters:
            # PostgREST refuses unfiltered deletes; fail before the round trip
            raise ValueError("delete requires at least one filter")
        await self._request(f"delete:{table}", "DELETE", f"/rest/v1/{table}", params=encode_filters(filters))

    async def rpc(self, function: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        response = await self._request(f"rpc:{function}", "POST", f"/rest/v1/rpc/{function}", json=params or {})
        return self._rows(response)

    async def get_user(self, access_token: str) -> dict[str, Any]:
        try:
            response = await self._request(
                "auth:user",
                "GET",
                "/auth/v1/user",
                headers={"apikey": self._api_key, "Authorization": f"Bearer {access_token}"},
            )
        except BackendError as e:
            if e.backend_status in (401, 403):
                raise AuthenticationError("Invalid or expired session") from e
            raise
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()
