"""
Schema graph snapshots and providers.
"""

from __future__ import annotations

from .discovery import ServiceSchemaProvider, merge_service_schemas
from .graph import SchemaGraph, SchemaGraphProvider, StaticSchemaProvider
from .graphql_schema import GraphQLSchemaProvider, schema_graph_from_graphql

__all__ = [
    "SchemaGraph",
    "SchemaGraphProvider",
    "StaticSchemaProvider",
    "GraphQLSchemaProvider",
    "schema_graph_from_graphql",
    "ServiceSchemaProvider",
    "merge_service_schemas",
]
