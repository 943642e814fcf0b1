"""
Remote grants authorities.

- HttpGrantsClient: POST /internal/permissions/by-group on the grants service
- RedisGrantsClient: FIND_PERMISSIONS_BY_GROUP over Redis RPC

Both return records already scoped by entity and raise UpstreamError on any
transport failure.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import UpstreamError
from ..core.query_types import (
    FIND_PERMISSIONS_BY_GROUP,
    GroupPermissionRecord,
    PermissionsByGroupRequest,
)
from ..messaging.rpc import RedisRpcClient

logger = logging.getLogger(__name__)

PERMISSIONS_BY_GROUP_PATH = "/internal/permissions/by-group"


def parse_records(service: str, payload: Any, group_id: str) -> list[GroupPermissionRecord]:
    """
    Parse an authority answer into records.

    Accepts null, a list of records, or {"items": [...]}.
    """
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("items") or []
    if not isinstance(payload, list):
        raise UpstreamError(
            service=service,
            status_code=0,
            message=f"unexpected payload type {type(payload).__name__}",
            group_id=group_id,
        )
    try:
        return [GroupPermissionRecord.coerce(item) for item in payload]
    except ValidationError as e:
        raise UpstreamError(service=service, status_code=0, message=f"malformed record: {e}", group_id=group_id)


class HttpGrantsClient:
    """
    HTTP client for the grants service.

    Usage:
        client = HttpGrantsClient("http://grants:8010")
        records = await client.find_permissions_by_group("admins", "User")
    """

    def __init__(self, base_url: str, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize grants client.

        Args:
            base_url: Base URL of the grants service
            timeout: HTTP request timeout in seconds
            client: Pre-built httpx client (tests, shared pools)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def find_permissions_by_group(self, group_id: str, entity_name: str) -> list[GroupPermissionRecord]:
        """
        Fetch permissions of one group on one entity.

        Raises:
            UpstreamError: non-200 status, request failure, or malformed body
        """
        client = await self._get_client()
        url = f"{self.base_url}{PERMISSIONS_BY_GROUP_PATH}"
        request = PermissionsByGroupRequest(group_id=group_id, entity_name=entity_name)

        try:
            response = await client.post(url, json=request.to_wire())
        except httpx.RequestError as e:
            raise UpstreamError(service=self.base_url, status_code=0, message=str(e), group_id=group_id)

        if response.status_code != 200:
            raise UpstreamError(
                service=self.base_url,
                status_code=response.status_code,
                message=response.text,
                group_id=group_id,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(service=self.base_url, status_code=200, message=f"invalid JSON: {e}", group_id=group_id)

        return parse_records(self.base_url, payload, group_id)


class RedisGrantsClient:
    """
    Grants authority reached through Redis RPC.

    Usage:
        client = RedisGrantsClient(RedisRpcClient(await init_redis(url)))
        records = await client.find_permissions_by_group("admins", "User")
    """

    def __init__(self, rpc: RedisRpcClient):
        self.rpc = rpc

    async def find_permissions_by_group(self, group_id: str, entity_name: str) -> list[GroupPermissionRecord]:
        request = PermissionsByGroupRequest(group_id=group_id, entity_name=entity_name)
        response = await self.rpc.send(FIND_PERMISSIONS_BY_GROUP, request.to_wire())
        return parse_records(self.rpc.prefix, response, group_id)
