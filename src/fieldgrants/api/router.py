"""
FastAPI routers for field-grants.

Grants router (mounted by any service):
- GET  /fields/{entity}      - Field paths reachable from an entity
- POST /fields/warm-up       - Preload field paths for entities
- POST /fields/configure     - Change traversal settings
- POST /fields/invalidate    - Drop cached field paths
- POST /viewable-fields      - Union of fields viewable by groups

Permissions router (mounted by the grants service only):
- POST /internal/permissions/by-group - Records of a group scoped to an entity
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from ..core.errors import ConfigurationError, SchemaNotLoadedError, UpstreamError
from ..core.query_types import (
    ConfigureRequest,
    FieldPathsResponse,
    InvalidateRequest,
    PermissionsByGroupRequest,
    ViewableFieldsRequest,
    WarmUpRequest,
)
from ..fields.collector import FieldPathCollector
from ..grants.remote import PERMISSIONS_BY_GROUP_PATH
from ..grants.resolver import PermissionResolver
from ..grants.responder import find_scoped_permissions
from ..grants.strategies import LocalAuthority


def _http_error(error: Exception) -> HTTPException:
    """Map field-grants errors to HTTP status codes."""
    if isinstance(error, SchemaNotLoadedError):
        return HTTPException(status_code=503, detail={"error": str(error)})
    if isinstance(error, UpstreamError):
        return HTTPException(
            status_code=502,
            detail={"error": str(error), "service": error.service, "status_code": error.status_code},
        )
    return HTTPException(status_code=500, detail={"error": str(error)})


def create_grants_router(
    collector: FieldPathCollector,
    resolver: PermissionResolver | None = None,
) -> APIRouter:
    """
    Create router exposing the collector and (optionally) the resolver.

    Without a resolver, /viewable-fields answers 500 as a configuration error.
    """
    router = APIRouter(tags=["field-grants"])

    @router.get("/fields/{entity}")
    async def get_fields(entity: str) -> dict[str, Any]:
        try:
            paths = collector.get_field_paths(entity)
        except SchemaNotLoadedError as e:
            raise _http_error(e)
        return FieldPathsResponse(entity=entity, fields=sorted(paths)).to_wire()

    @router.post("/fields/warm-up")
    async def warm_up(body: WarmUpRequest) -> dict[str, Any]:
        try:
            collector.warm_up(body.entities)
        except SchemaNotLoadedError as e:
            raise _http_error(e)
        return {"status": "ok", "entities": len(body.entities)}

    @router.post("/fields/configure")
    async def configure(body: ConfigureRequest) -> dict[str, Any]:
        try:
            config = collector.configure(
                max_depth=body.max_depth,
                allowed_types=body.allowed_types,
                debug=body.debug,
            )
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail={"error": str(e)})
        invalidated = collector.invalidate() if body.invalidate else 0
        return {
            "maxDepth": config.max_depth,
            "allowedTypes": sorted(config.allowed_types),
            "debug": config.debug,
            "invalidated": invalidated,
        }

    @router.post("/fields/invalidate")
    async def invalidate(body: InvalidateRequest) -> dict[str, Any]:
        return {"invalidated": collector.invalidate(body.entity)}

    @router.post("/viewable-fields")
    async def viewable_fields(body: ViewableFieldsRequest) -> dict[str, Any]:
        if resolver is None:
            raise _http_error(ConfigurationError("No permission resolver configured"))
        try:
            fields = await resolver.get_viewable_fields(body.group_ids, body.entity_name)
        except (UpstreamError, ConfigurationError) as e:
            raise _http_error(e)
        return FieldPathsResponse(entity=body.entity_name, fields=sorted(fields)).to_wire()

    return router


def create_permissions_router(local: LocalAuthority) -> APIRouter:
    """Create the router HttpGrantsClient talks to, backed by a local adapter."""
    router = APIRouter(tags=["field-grants-internal"])

    @router.post(PERMISSIONS_BY_GROUP_PATH)
    async def permissions_by_group(body: PermissionsByGroupRequest) -> list[dict[str, Any]]:
        records = await find_scoped_permissions(local, body)
        return [record.to_wire() for record in records]

    return router
