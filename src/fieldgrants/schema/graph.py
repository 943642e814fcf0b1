"""
Schema graph snapshot and the provider contract consumed by the collector.

A snapshot maps type names to TypeDescriptor and is treated as immutable
once handed out. Providers decide how a snapshot is obtained.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from ..core.defs import OBJECT_KIND, FieldDescriptor, TypeDescriptor

SCALAR_KIND = "scalar"


class SchemaGraph:
    """
    Immutable mapping of type name -> TypeDescriptor.

    Usage:
        graph = SchemaGraph.from_dict({
            "User": {"id": None, "authData": "AuthData"},
            "AuthData": {"email": None, "token": None},
        })
        graph.get_type("User").fields["authData"].named_type  # "AuthData"
    """

    def __init__(self, types: Mapping[str, TypeDescriptor]):
        self._types = MappingProxyType(dict(types))

    @property
    def types(self) -> Mapping[str, TypeDescriptor]:
        return self._types

    def get_type(self, name: str) -> Optional[TypeDescriptor]:
        return self._types.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Optional[str]]]) -> SchemaGraph:
        """
        Build a snapshot from {"TypeName": {"fieldName": "TargetType" | None}}.

        Every key becomes an object type. A referenced name that is not a key
        is registered as a scalar, so it never gets descended into.
        """
        types: dict[str, TypeDescriptor] = {}
        referenced: set[str] = set()

        for type_name, fields in data.items():
            descriptors = {}
            for field_name, target in fields.items():
                descriptors[field_name] = FieldDescriptor(name=field_name, named_type=target)
                if target:
                    referenced.add(target)
            types[type_name] = TypeDescriptor(name=type_name, fields=descriptors, kind=OBJECT_KIND)

        for name in referenced - types.keys():
            types[name] = TypeDescriptor(name=name, kind=SCALAR_KIND)

        return cls(types)

    def to_dict(self) -> dict[str, Any]:
        """Inverse of from_dict for object types."""
        return {
            name: {f.name: f.named_type for f in type_def.fields.values()}
            for name, type_def in self._types.items()
            if type_def.is_object
        }


@runtime_checkable
class SchemaGraphProvider(Protocol):
    """Anything that can hand out the current schema snapshot (None if not loaded yet)."""

    def get_schema(self) -> Optional[SchemaGraph]:
        ...


class StaticSchemaProvider:
    """
    Provider holding a snapshot set by the application.

    Usage:
        provider = StaticSchemaProvider()
        provider.load(SchemaGraph.from_dict({...}))
    """

    def __init__(self, schema: Optional[SchemaGraph] = None):
        self._schema = schema

    def load(self, schema: SchemaGraph) -> None:
        """Replace the current snapshot."""
        self._schema = schema

    def get_schema(self) -> Optional[SchemaGraph]:
        return self._schema
