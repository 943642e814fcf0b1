"""
Schema provider that discovers entity schemas from federated services.

Each service exposes GET /__schema:

    {
        "version": 1,
        "entities": {
            "Person": {
                "fields": {"id": {"type": "int"}, "first_name": {"type": "string"}},
                "relations": {"owned_properties": {"target": "Property", "cardinality": "many"}}
            }
        },
        "attached_relations": [
            {"parent_entity": "Person", "name": "documents", "target_entity": "Document"}
        ]
    }

Plain fields become leaves, relations become fields whose named type is the
relation target.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from ..core.defs import OBJECT_KIND, FieldDescriptor, TypeDescriptor
from .graph import SCALAR_KIND, SchemaGraph

logger = logging.getLogger(__name__)


def merge_service_schemas(schemas: list[dict[str, Any]]) -> SchemaGraph:
    """
    Merge /__schema payloads into one SchemaGraph.

    Later services win on entity name clashes. Attached relations are applied
    after all entities are known; relations to unknown parents are skipped.
    """
    entities: dict[str, dict[str, Optional[str]]] = {}
    attached: list[dict[str, Any]] = []

    for schema in schemas:
        for entity_name, entity_def in (schema.get("entities") or {}).items():
            if not isinstance(entity_def, dict):
                logger.debug(f"Skipping entity {entity_name}: malformed definition")
                continue
            fields: dict[str, Optional[str]] = {
                name: None for name in (entity_def.get("fields") or {})
            }
            for rel_name, rel_def in (entity_def.get("relations") or {}).items():
                if not isinstance(rel_def, dict):
                    continue
                fields[rel_name] = rel_def.get("target")
            entities[entity_name] = fields

        attached.extend(schema.get("attached_relations") or [])

    for attach in attached:
        if not isinstance(attach, dict) or "name" not in attach:
            continue
        parent = entities.get(attach.get("parent_entity"))
        if parent is None:
            logger.debug(f"Skipping attached relation {attach.get('name')}: parent not discovered")
            continue
        parent[attach["name"]] = attach.get("target_entity")

    types: dict[str, TypeDescriptor] = {}
    for entity_name, fields in entities.items():
        types[entity_name] = TypeDescriptor(
            name=entity_name,
            fields={n: FieldDescriptor(name=n, named_type=t) for n, t in fields.items()},
            kind=OBJECT_KIND,
        )

    # Relation targets owned by services that did not answer stay leaves
    for fields in entities.values():
        for target in fields.values():
            if target and target not in types:
                types[target] = TypeDescriptor(name=target, kind=SCALAR_KIND)

    return SchemaGraph(types)


class ServiceSchemaProvider:
    """
    Discovers and caches the merged schema of a set of services.

    Discovery is async; call refresh() at startup (and whenever services
    change). get_schema() returns the last discovered snapshot, or None if
    discovery has not succeeded yet.

    Usage:
        provider = ServiceSchemaProvider({
            "person": "http://person:8002",
            "property": "http://property:8001",
        })
        await provider.refresh()
    """

    def __init__(self, services: dict[str, str], timeout: float = 10.0):
        """
        Initialize provider.

        Args:
            services: Dict of service name -> base URL
            timeout: Per-request timeout in seconds
        """
        self.services = services
        self.timeout = timeout
        self._snapshot: Optional[SchemaGraph] = None

    def get_schema(self) -> Optional[SchemaGraph]:
        return self._snapshot

    async def refresh(self, client: Optional[httpx.AsyncClient] = None) -> Optional[SchemaGraph]:
        """
        Re-discover schemas from all services.

        Keeps the previous snapshot if no service answered.

        Returns:
            The current snapshot (new or previous)
        """
        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                results = await self._fetch_all(own_client)
        else:
            results = await self._fetch_all(client)

        schemas = [schema for schema in results if schema is not None]
        if not schemas:
            logger.warning("Schema discovery returned nothing, keeping previous snapshot")
            return self._snapshot

        self._snapshot = merge_service_schemas(schemas)
        logger.info(f"Schema discovered: {len(self._snapshot)} types from {len(schemas)} service(s)")
        return self._snapshot

    async def _fetch_all(self, client: httpx.AsyncClient) -> list[dict | None]:
        tasks = [
            self._fetch_schema(client, name, url)
            for name, url in self.services.items()
        ]
        return await asyncio.gather(*tasks)

    async def _fetch_schema(self, client: httpx.AsyncClient, name: str, url: str) -> dict | None:
        """Fetch schema from a single service."""
        try:
            response = await client.get(f"{url.rstrip('/')}/__schema", timeout=self.timeout)
            if response.status_code == 200:
                payload = response.json()
                if isinstance(payload, dict):
                    return payload
                logger.warning(f"Schema discovery: {name} returned a non-object payload")
                return None
            logger.warning(f"Schema discovery: {name} returned {response.status_code}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Could not fetch schema from {name}: {e}")
            return None
