"""
HTTP API for field-grants.
"""

from __future__ import annotations

from .app import create_app
from .router import create_grants_router, create_permissions_router

__all__ = [
    "create_app",
    "create_grants_router",
    "create_permissions_router",
]
