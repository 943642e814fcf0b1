"""
Server side of FIND_PERMISSIONS_BY_GROUP, run inside the grants service.

Answers remote callers from the local adapter, scoping records to the
requested entity before they leave the service.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from ..core.query_types import (
    FIND_PERMISSIONS_BY_GROUP,
    GroupPermissionRecord,
    PermissionsByGroupRequest,
)
from ..messaging.rpc import RpcServer
from .strategies import LocalAuthority

logger = logging.getLogger(__name__)


async def find_scoped_permissions(
    local: LocalAuthority,
    request: PermissionsByGroupRequest,
) -> list[GroupPermissionRecord]:
    """Permissions of request.group_id restricted to request.entity_name."""
    records = local.find_permissions_by_group(request.group_id)
    if inspect.isawaitable(records):
        records = await records
    scoped = []
    for raw in records or []:
        record = GroupPermissionRecord.coerce(raw)
        if record.entity_name == request.entity_name:
            scoped.append(record)
    return scoped


class GrantsRpcResponder:
    """
    Registers FIND_PERMISSIONS_BY_GROUP on an RpcServer.

    Usage:
        server = RpcServer(await init_redis(url))
        GrantsRpcResponder(adapter).register(server)
        await server.start()
    """

    def __init__(self, local: LocalAuthority):
        self.local = local

    def register(self, server: RpcServer) -> RpcServer:
        server.register(FIND_PERMISSIONS_BY_GROUP, self.handle)
        return server

    async def handle(self, data: dict[str, Any]) -> list[dict[str, Any]]:
        request = PermissionsByGroupRequest.model_validate(data)
        records = await find_scoped_permissions(self.local, request)
        logger.debug(f"{FIND_PERMISSIONS_BY_GROUP} {request.group_id}/{request.entity_name}: {len(records)} records")
        return [record.to_wire() for record in records]
