"""
FastAPI dependencies: shared services from app state and the per-request
visitor scope used by view tracking.
"""

import re
import uuid
from dataclasses import dataclass

from fastapi import Depends, Request, Response

from devfolio.backend.client import HostedBackend
from devfolio.config import settings
from devfolio.services.tracking_service import ViewTracker, VisitorContext
from devfolio.services.view_gate import ViewGate
from devfolio.services.visitor import SessionIdentity
from devfolio.utils.kv_store import KeyValueStore, NamespacedStore

_CLIENT_ID = re.compile(r"^[0-9a-f]{32}$")


def get_backend(request: Request) -> HostedBackend:
    return request.app.state.backend


def get_tracker(request: Request) -> ViewTracker:
    return request.app.state.tracker


def get_browser_store(request: Request) -> KeyValueStore:
    return request.app.state.browser_store


def get_tab_store(request: Request) -> KeyValueStore:
    return request.app.state.tab_store


def client_ip(request: Request) -> str | None:
    """Peer address of the visitor, honouring X-Forwarded-For only when configured."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _client_id(request: Request, cookie_name: str) -> str:
    value = request.cookies.get(cookie_name, "")
    return value if _CLIENT_ID.match(value) else uuid.uuid4().hex


@dataclass
class VisitorScope:
    visitor: VisitorContext
    gate: ViewGate
    identity: SessionIdentity


def get_visitor_scope(
    request: Request,
    response: Response,
    browser_store: KeyValueStore = Depends(get_browser_store),
    tab_store: KeyValueStore = Depends(get_tab_store),
) -> VisitorScope:
    """
    Browser-side tracking state for this request.

    A persistent cookie identifies the browser (gate timestamps survive
    restarts); a session cookie identifies the browsing session that owns
    the session identifier.
    """
    browser_id = _client_id(request, settings.browser_cookie_name)
    tab_id = _client_id(request, settings.tab_cookie_name)

    response.set_cookie(
        settings.browser_cookie_name,
        browser_id,
        max_age=settings.browser_cookie_max_age,
        httponly=True,
        samesite="lax",
    )
    response.set_cookie(settings.tab_cookie_name, tab_id, httponly=True, samesite="lax")

    return VisitorScope(
        visitor=VisitorContext(
            user_agent=request.headers.get("User-Agent", ""),
            referrer=request.headers.get("Referer", ""),
            client_ip=client_ip(request),
        ),
        gate=ViewGate(NamespacedStore(browser_store, f"browser:{browser_id}")),
        identity=SessionIdentity(NamespacedStore(tab_store, f"tab:{tab_id}")),
    )
