"""
Field-level grants lookup.
"""

from __future__ import annotations

from .remote import HttpGrantsClient, RedisGrantsClient, parse_records
from .resolver import PermissionResolver
from .responder import GrantsRpcResponder, find_scoped_permissions
from .strategies import (
    LocalAuthority,
    LocalStrategy,
    RemoteAuthority,
    RemoteStrategy,
    Strategy,
    select_strategy,
)

__all__ = [
    "PermissionResolver",
    "RemoteAuthority",
    "LocalAuthority",
    "RemoteStrategy",
    "LocalStrategy",
    "Strategy",
    "select_strategy",
    "HttpGrantsClient",
    "RedisGrantsClient",
    "parse_records",
    "GrantsRpcResponder",
    "find_scoped_permissions",
]
