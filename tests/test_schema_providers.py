from __future__ import annotations

import httpx
import pytest

from fieldgrants.core.defs import TraversalConfig
from fieldgrants.core.errors import SchemaNotLoadedError
from fieldgrants.fields.collector import FieldPathCollector
from fieldgrants.schema.discovery import ServiceSchemaProvider, merge_service_schemas
from fieldgrants.schema.graphql_schema import GraphQLSchemaProvider

SDL = """
type Query {
  me: User
}

type User {
  id: ID!
  email: String
  authData: AuthDataSchema!
  friends: [User!]!
  role: Role
}

type AuthDataSchema {
  email: String
  token: String
}

enum Role {
  ADMIN
  MEMBER
}
"""


def test_graphql_provider_unwraps_list_and_non_null():
    graph = GraphQLSchemaProvider.from_sdl(SDL).get_schema()
    user = graph.get_type("User")

    assert user.is_object
    assert user.fields["friends"].named_type == "User"
    assert user.fields["authData"].named_type == "AuthDataSchema"
    assert user.fields["id"].named_type == "ID"
    assert graph.get_type("ID").kind == "scalar"
    assert graph.get_type("Role").kind == "enum"


def test_graphql_provider_skips_introspection_types():
    graph = GraphQLSchemaProvider.from_sdl(SDL).get_schema()
    assert not any(name.startswith("__") for name in graph.types)


def test_graphql_provider_without_schema_is_not_loaded():
    provider = GraphQLSchemaProvider()
    collector = FieldPathCollector(provider, TraversalConfig(allowed_types={"User"}))

    assert provider.get_schema() is None
    with pytest.raises(SchemaNotLoadedError):
        collector.get_field_paths("User")


def test_graphql_provider_attach_and_collect():
    from graphql import build_schema

    provider = GraphQLSchemaProvider()
    provider.attach(build_schema(SDL))
    collector = FieldPathCollector(
        provider,
        TraversalConfig(max_depth=2, allowed_types={"User", "AuthDataSchema", "Role"}),
    )

    paths = collector.get_field_paths("User")

    assert {"authData.email", "authData.token", "friends.id", "friends.friends", "role"} <= paths
    # Enums are leaves even when allowed
    assert not any(p.startswith("role.") for p in paths)


def test_graphql_provider_reuses_snapshot_until_refresh():
    provider = GraphQLSchemaProvider.from_sdl(SDL)
    first = provider.get_schema()

    assert provider.get_schema() is first
    assert provider.refresh() is not first


PERSON_SERVICE = {
    "version": 1,
    "entities": {
        "Person": {
            "fields": {"id": {"type": "int"}, "first_name": {"type": "string"}},
            "relations": {"owned_properties": {"target": "Property", "cardinality": "many"}},
        },
    },
}

PROPERTY_SERVICE = {
    "version": 1,
    "entities": {
        "Property": {
            "fields": {"id": {"type": "int"}, "address": {"type": "string"}},
            "relations": {},
        },
    },
    "attached_relations": [
        {"parent_entity": "Person", "name": "documents", "target_entity": "Document", "cardinality": "many"},
        {"parent_entity": "Ghost", "name": "things", "target_entity": "Thing"},
    ],
}


def test_merge_service_schemas():
    graph = merge_service_schemas([PERSON_SERVICE, PROPERTY_SERVICE])
    person = graph.get_type("Person")

    assert person.fields["first_name"].named_type is None
    assert person.fields["owned_properties"].named_type == "Property"
    assert person.fields["documents"].named_type == "Document"
    assert graph.get_type("Property").is_object
    # Document was never discovered: leaf
    assert graph.get_type("Document").is_object is False
    assert "Ghost" not in graph


def _schema_transport(responses: dict[str, httpx.Response]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/__schema"
        return responses[request.url.host]

    return httpx.MockTransport(handler)


async def test_service_provider_discovers_and_skips_failures():
    transport = _schema_transport({
        "person": httpx.Response(200, json=PERSON_SERVICE),
        "property": httpx.Response(200, json=PROPERTY_SERVICE),
        "broken": httpx.Response(500, text="boom"),
    })
    provider = ServiceSchemaProvider({
        "person": "http://person:8002",
        "property": "http://property:8001/",
        "broken": "http://broken:8009",
    })

    async with httpx.AsyncClient(transport=transport) as client:
        graph = await provider.refresh(client)

    assert provider.get_schema() is graph
    collector = FieldPathCollector(provider, TraversalConfig(allowed_types={"Person", "Property"}))
    assert "owned_properties.address" in collector.get_field_paths("Person")


async def test_service_provider_skips_malformed_payloads():
    transport = _schema_transport({
        "listing": httpx.Response(200, json=[{"entities": {}}]),
        "person": httpx.Response(200, json=PERSON_SERVICE),
    })
    provider = ServiceSchemaProvider({
        "listing": "http://listing:8010",
        "person": "http://person:8002",
    })

    async with httpx.AsyncClient(transport=transport) as client:
        graph = await provider.refresh(client)

    assert graph is not None
    assert graph.get_type("Person").fields["owned_properties"].named_type == "Property"


def test_merge_tolerates_null_and_malformed_sections():
    graph = merge_service_schemas([
        {
            "entities": {
                "Person": {"fields": None, "relations": {"pets": "Pet", "home": {"target": "Address"}}},
                "Broken": "not an entity",
            },
            "attached_relations": [None, {"parent_entity": "Person"}],
        },
        {"entities": None, "attached_relations": None},
    ])

    person = graph.get_type("Person")
    assert set(person.fields) == {"home"}
    assert person.fields["home"].named_type == "Address"
    assert graph.get_type("Broken") is None


async def test_service_provider_keeps_previous_snapshot_when_nothing_answers():
    provider = ServiceSchemaProvider({"person": "http://person:8002"})

    down = _schema_transport({"person": httpx.Response(503)})
    async with httpx.AsyncClient(transport=down) as client:
        assert await provider.refresh(client) is None

    up = _schema_transport({"person": httpx.Response(200, json=PERSON_SERVICE)})
    async with httpx.AsyncClient(transport=up) as client:
        graph = await provider.refresh(client)

    async with httpx.AsyncClient(transport=down) as client:
        assert await provider.refresh(client) is graph
