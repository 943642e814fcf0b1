"""
Messaging module - Redis-based inter-service communication.

Provides:
- RedisClient: Connection management
- RedisRpcClient / RpcServer: request/response calls over Pub/Sub

Usage:
    from fieldgrants.messaging import init_redis, RedisRpcClient

    client = await init_redis("redis://redis:6379")
    rpc = RedisRpcClient(client)
    perms = await rpc.send("FIND_PERMISSIONS_BY_GROUP", {"groupId": "g1", "entityName": "User"})
"""

from __future__ import annotations

from .client import RedisClient, close_redis, get_redis_client, init_redis
from .rpc import RedisRpcClient, RpcServer

__all__ = [
    "RedisClient",
    "get_redis_client",
    "init_redis",
    "close_redis",
    "RedisRpcClient",
    "RpcServer",
]
