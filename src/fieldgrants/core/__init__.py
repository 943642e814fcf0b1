"""
Core definitions for field-grants.
"""

from __future__ import annotations

from .defs import OBJECT_KIND, FieldDescriptor, TraversalConfig, TypeDescriptor
from .errors import (
    ConfigurationError,
    FieldGrantsError,
    SchemaNotLoadedError,
    UpstreamError,
)
from .query_types import (
    FIND_PERMISSIONS_BY_GROUP,
    ConfigureRequest,
    FieldPathsResponse,
    GroupPermissionRecord,
    InvalidateRequest,
    PermissionsByGroupRequest,
    ViewableFieldsRequest,
    WarmUpRequest,
)
from .utils import join_path, path_depth

__all__ = [
    # Definitions
    "OBJECT_KIND",
    "FieldDescriptor",
    "TypeDescriptor",
    "TraversalConfig",
    # Errors
    "FieldGrantsError",
    "SchemaNotLoadedError",
    "ConfigurationError",
    "UpstreamError",
    # Wire types
    "FIND_PERMISSIONS_BY_GROUP",
    "GroupPermissionRecord",
    "PermissionsByGroupRequest",
    "ViewableFieldsRequest",
    "WarmUpRequest",
    "ConfigureRequest",
    "InvalidateRequest",
    "FieldPathsResponse",
    # Utils
    "join_path",
    "path_depth",
]
