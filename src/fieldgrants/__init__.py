"""
field-grants - field path discovery and field-level grants lookup for
federated services.

Answers two questions:
- which dotted field paths are reachable from an entity type, bounded by
  depth and restricted to traversable types (FieldPathCollector)
- which of those fields a set of access groups may view (PermissionResolver),
  whether the grants authority is a remote service or an in-process adapter

Usage:
    from fieldgrants import FieldPathCollector, GraphQLSchemaProvider, PermissionResolver

    collector = FieldPathCollector(GraphQLSchemaProvider(schema))
    collector.configure(max_depth=2, allowed_types=["User", "AuthDataSchema"])
    collector.get_field_paths("User")

    resolver = PermissionResolver.from_authorities(remote=HttpGrantsClient("http://grants:8010"))
    await resolver.get_viewable_fields(["admins"], "User")
"""

from __future__ import annotations

from .api import create_app, create_grants_router, create_permissions_router
from .config import Settings, build_remote_authority, load_config
from .core import (
    ConfigurationError,
    FieldDescriptor,
    FieldGrantsError,
    GroupPermissionRecord,
    SchemaNotLoadedError,
    TraversalConfig,
    TypeDescriptor,
    UpstreamError,
)
from .fields import FieldPathCache, FieldPathCollector
from .grants import (
    GrantsRpcResponder,
    HttpGrantsClient,
    LocalAuthority,
    LocalStrategy,
    PermissionResolver,
    RedisGrantsClient,
    RemoteAuthority,
    RemoteStrategy,
    select_strategy,
)
from .schema import (
    GraphQLSchemaProvider,
    SchemaGraph,
    SchemaGraphProvider,
    ServiceSchemaProvider,
    StaticSchemaProvider,
)

__version__ = "0.1.0"

__all__ = [
    # Definitions
    "FieldDescriptor",
    "TypeDescriptor",
    "TraversalConfig",
    "GroupPermissionRecord",
    # Errors
    "FieldGrantsError",
    "SchemaNotLoadedError",
    "ConfigurationError",
    "UpstreamError",
    # Schema
    "SchemaGraph",
    "SchemaGraphProvider",
    "StaticSchemaProvider",
    "GraphQLSchemaProvider",
    "ServiceSchemaProvider",
    # Field paths
    "FieldPathCache",
    "FieldPathCollector",
    # Grants
    "PermissionResolver",
    "RemoteAuthority",
    "LocalAuthority",
    "RemoteStrategy",
    "LocalStrategy",
    "select_strategy",
    "HttpGrantsClient",
    "RedisGrantsClient",
    "GrantsRpcResponder",
    # Config
    "Settings",
    "load_config",
    "build_remote_authority",
    # API
    "create_app",
    "create_grants_router",
    "create_permissions_router",
]
