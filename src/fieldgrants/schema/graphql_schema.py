"""
Schema provider backed by a graphql-core schema.

Reads the local (subgraph) GraphQLSchema directly, without asking a gateway:
object types keep their fields, every other named type is registered by kind
so the collector treats it as a leaf.
"""

from __future__ import annotations

import logging
from typing import Optional

from graphql import (
    GraphQLSchema,
    build_schema,
    get_named_type,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
)

from ..core.defs import OBJECT_KIND, FieldDescriptor, TypeDescriptor
from .graph import SCALAR_KIND, SchemaGraph

logger = logging.getLogger(__name__)


def _kind_of(graphql_type) -> str:
    if is_object_type(graphql_type):
        return OBJECT_KIND
    if is_interface_type(graphql_type):
        return "interface"
    if is_union_type(graphql_type):
        return "union"
    if is_enum_type(graphql_type):
        return "enum"
    if is_input_object_type(graphql_type):
        return "input"
    if is_scalar_type(graphql_type):
        return SCALAR_KIND
    return "unknown"


def schema_graph_from_graphql(schema: GraphQLSchema) -> SchemaGraph:
    """
    Convert a GraphQLSchema type map into a SchemaGraph.

    Field types are unwrapped with get_named_type (drops NonNull/List).
    Introspection types (__Schema, __Type, ...) are skipped.
    """
    types: dict[str, TypeDescriptor] = {}

    for name, graphql_type in schema.type_map.items():
        if name.startswith("__"):
            continue

        kind = _kind_of(graphql_type)
        if kind != OBJECT_KIND:
            types[name] = TypeDescriptor(name=name, kind=kind)
            continue

        fields = {
            field_name: FieldDescriptor(
                name=field_name,
                named_type=get_named_type(field.type).name,
            )
            for field_name, field in graphql_type.fields.items()
        }
        types[name] = TypeDescriptor(name=name, fields=fields, kind=OBJECT_KIND)

    return SchemaGraph(types)


class GraphQLSchemaProvider:
    """
    Provider for a service's own GraphQL schema.

    The schema can be attached late (e.g. once the GraphQL app has built it);
    until then get_schema() returns None.

    Usage:
        provider = GraphQLSchemaProvider.from_sdl(open("schema.graphql").read())
        collector = FieldPathCollector(provider)
    """

    def __init__(self, schema: Optional[GraphQLSchema] = None):
        self._graphql_schema = schema
        self._snapshot: Optional[SchemaGraph] = None

    @classmethod
    def from_sdl(cls, sdl: str) -> GraphQLSchemaProvider:
        """Build provider from schema definition language text."""
        return cls(build_schema(sdl))

    def attach(self, schema: GraphQLSchema) -> None:
        """Set (or replace) the GraphQL schema and drop the converted snapshot."""
        self._graphql_schema = schema
        self._snapshot = None
        logger.info("GraphQL schema attached")

    def refresh(self) -> Optional[SchemaGraph]:
        """Rebuild the snapshot from the attached schema."""
        self._snapshot = None
        return self.get_schema()

    def get_schema(self) -> Optional[SchemaGraph]:
        if self._graphql_schema is None:
            return None
        if self._snapshot is None:
            self._snapshot = schema_graph_from_graphql(self._graphql_schema)
            logger.debug(f"GraphQL schema converted: {len(self._snapshot)} types")
        return self._snapshot
