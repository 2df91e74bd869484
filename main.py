import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devfolio.backend import HostedBackend, RestBackend
from devfolio.config import settings
from devfolio.exception_handlers import register_exception_handlers
from devfolio.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from devfolio.routes import analytics, blogs, messages, monitoring, projects, views
from devfolio.services.tracking_service import IPResolver, ViewTracker
from devfolio.utils.kv_store import KeyValueStore, MemoryStore, RedisStore
from devfolio.utils.metrics import PrometheusMiddleware, set_app_info

logger = logging.getLogger(__name__)


def build_store(role: str, ttl: Optional[int] = None) -> KeyValueStore:
    """Redis store when REDIS_URL is configured, process memory otherwise."""
    if settings.redis_url:
        return RedisStore(settings.redis_url, prefix=f"{settings.app_name}:{role}:", ttl=ttl, role=role)
    logger.warning(f"REDIS_URL not set, {role} state is kept in process memory")
    return MemoryStore(ttl=ttl)


def create_app(
    backend: Optional[HostedBackend] = None,
    browser_store: Optional[KeyValueStore] = None,
    tab_store: Optional[KeyValueStore] = None,
    ip_resolver: Optional[IPResolver] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Collaborators that are not passed in are built from settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} in {settings.environment} mode")
        app.state.backend = backend or RestBackend(
            settings.backend_url,
            settings.backend_anon_key,
            service_key=settings.backend_service_key,
            timeout=settings.backend_timeout_seconds,
        )
        app.state.browser_store = browser_store or build_store("browser")
        app.state.tab_store = tab_store or build_store("tab", ttl=settings.tab_session_ttl_seconds)
        if ip_resolver is not None:
            app.state.tracker = ViewTracker(app.state.backend, ip_resolver=ip_resolver)
        else:
            app.state.tracker = ViewTracker(app.state.backend)

        yield

        logger.info("Shutting down the application...")
        await app.state.tracker.drain()
        if backend is None:
            await app.state.backend.aclose()
        for store in (app.state.browser_store, app.state.tab_store):
            if isinstance(store, RedisStore):
                await store.disconnect()

    app = FastAPI(
        title=settings.app_name,
        description="Portfolio and blog backend with privacy-preserving view analytics",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Public
    app.include_router(views.router, prefix="/api")
    app.include_router(blogs.router, prefix="/api")
    app.include_router(projects.router, prefix="/api")
    app.include_router(messages.router, prefix="/api")

    # Admin
    app.include_router(blogs.admin_router, prefix="/api/admin")
    app.include_router(projects.admin_router, prefix="/api/admin")
    app.include_router(messages.admin_router, prefix="/api/admin")
    app.include_router(analytics.router, prefix="/api/admin/analytics")

    app.include_router(monitoring.router)

    return app


setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
set_app_info(version=settings.app_version, environment=settings.environment)

app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
