"""
Core dataclass definitions for field-grants.

These describe the schema graph walked by the collector and the
traversal settings that bound the walk.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional

from .errors import ConfigurationError

OBJECT_KIND = "object"


@dataclass(frozen=True)
class FieldDescriptor:
    """A field of an object type."""
    name: str
    named_type: Optional[str] = None  # referenced type after list/non-null stripping, None for leaves


@dataclass(frozen=True)
class TypeDescriptor:
    """A named type in one schema snapshot."""
    name: str
    fields: Mapping[str, FieldDescriptor] = field(default_factory=dict)
    kind: str = OBJECT_KIND  # object, scalar, enum, input, interface, union

    @property
    def is_object(self) -> bool:
        return self.kind == OBJECT_KIND


@dataclass(frozen=True)
class TraversalConfig:
    """
    Settings for field-path discovery.

    - max_depth: how many path segments a field path may have (>= 1)
    - allowed_types: type names the collector may descend into
    - debug: verbose traversal logging
    """
    max_depth: int = 2
    allowed_types: frozenset[str] = field(default_factory=frozenset)
    debug: bool = False

    def __post_init__(self):
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ConfigurationError(f"max_depth must be an integer >= 1, got {self.max_depth!r}")
        if isinstance(self.allowed_types, str):
            raise ConfigurationError(f"allowed_types must be a collection of type names, got {self.allowed_types!r}")
        if not isinstance(self.allowed_types, frozenset):
            object.__setattr__(self, "allowed_types", frozenset(self.allowed_types))

    def override(
        self,
        max_depth: Optional[int] = None,
        allowed_types: Optional[Iterable[str]] = None,
        debug: Optional[bool] = None,
    ) -> TraversalConfig:
        """Return a copy with the given values replaced; None leaves a value unchanged."""
        changes: dict = {}
        if max_depth is not None:
            changes["max_depth"] = max_depth
        if isinstance(allowed_types, str):
            raise ConfigurationError(f"allowed_types must be a collection of type names, got {allowed_types!r}")
        if allowed_types is not None:
            changes["allowed_types"] = frozenset(allowed_types)
        if debug is not None:
            changes["debug"] = debug
        if not changes:
            return self
        return replace(self, **changes)
