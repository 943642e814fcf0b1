"""
App factory for services exposing field-grants over HTTP.

Creates a FastAPI application with:
- Grants router (field paths, viewable fields)
- Internal permissions router when a local adapter is given
- Health check endpoint
- Lifecycle hooks
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from ..fields.collector import FieldPathCollector
from ..grants.resolver import PermissionResolver
from ..grants.strategies import LocalAuthority
from .router import create_grants_router, create_permissions_router

logger = logging.getLogger(__name__)


class HealthcheckLogFilter(logging.Filter):
    """Filter out noisy healthcheck logs."""

    FILTERED_PATHS = ("/health",)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for path in self.FILTERED_PATHS:
            if f'"{path}' in message or f" {path} " in message:
                return False
        return True


def _setup_logging_filter():
    """Add filter to uvicorn access logger to suppress healthcheck logs."""
    access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, HealthcheckLogFilter) for f in access_logger.filters):
        access_logger.addFilter(HealthcheckLogFilter())


def create_app(
    collector: FieldPathCollector,
    resolver: Optional[PermissionResolver] = None,
    *,
    local_authority: Optional[LocalAuthority] = None,
    title: str = "Field Grants",
    warm_up: Optional[list[str]] = None,
    on_startup: Callable | None = None,
    on_shutdown: Callable | None = None,
) -> FastAPI:
    """
    Create a FastAPI app serving field-grants.

    Args:
        collector: Field path collector
        resolver: Permission resolver (enables /viewable-fields)
        local_authority: Local adapter; mounts /internal/permissions/by-group
        title: App title
        warm_up: Entities to preload at startup
        on_startup: Additional startup hook (runs before warm-up)
        on_shutdown: Additional shutdown hook

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _setup_logging_filter()
        if on_startup:
            await on_startup() if asyncio.iscoroutinefunction(on_startup) else on_startup()
        if warm_up:
            collector.warm_up(warm_up)
            logger.info(f"Warmed up field paths for {len(warm_up)} entities")

        yield

        if on_shutdown:
            await on_shutdown() if asyncio.iscoroutinefunction(on_shutdown) else on_shutdown()

    app = FastAPI(title=title, version="1.0.0", lifespan=lifespan)
    app.include_router(create_grants_router(collector, resolver))
    if local_authority is not None:
        app.include_router(create_permissions_router(local_authority))

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "mode": resolver.mode if resolver else None}

    app.state.collector = collector
    app.state.resolver = resolver
    return app
