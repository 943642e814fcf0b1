"""
Field path discovery.
"""

from __future__ import annotations

from .cache import FieldPathCache
from .collector import FieldPathCollector

__all__ = [
    "FieldPathCache",
    "FieldPathCollector",
]
