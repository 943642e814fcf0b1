"""
Shared fixtures: a small user schema, fake grants authorities and an
in-memory Redis pub/sub bus.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict

import pytest

from fieldgrants.core.errors import UpstreamError
from fieldgrants.core.defs import TraversalConfig
from fieldgrants.fields.collector import FieldPathCollector
from fieldgrants.schema.graph import SchemaGraph, StaticSchemaProvider


USER_SCHEMA = {
    "User": {
        "id": None,
        "email": None,
        "authData": "AuthDataSchema",
        "personalData": "PersonalDataSchema",
        "manager": "User",
        "createdAt": "DateTime",
    },
    "AuthDataSchema": {"email": None, "token": None, "user": "User"},
    "PersonalDataSchema": {"firstName": None, "lastName": None, "address": "Address"},
    "Address": {"street": None, "city": None},
}


@pytest.fixture
def schema() -> SchemaGraph:
    return SchemaGraph.from_dict(USER_SCHEMA)


@pytest.fixture
def provider(schema) -> StaticSchemaProvider:
    return StaticSchemaProvider(schema)


@pytest.fixture
def collector(provider) -> FieldPathCollector:
    return FieldPathCollector(
        provider,
        TraversalConfig(max_depth=2, allowed_types=frozenset({"User", "AuthDataSchema"})),
    )


class FakeRemoteAuthority:
    """Remote authority returning canned records per group."""

    def __init__(self, records: dict | None = None, fail_on: str | None = None):
        self.records = records or {}
        self.fail_on = fail_on
        self.calls: list[tuple[str, str]] = []

    async def find_permissions_by_group(self, group_id, entity_name):
        self.calls.append((group_id, entity_name))
        if group_id == self.fail_on:
            raise UpstreamError(service="grants", status_code=503, message="unavailable", group_id=group_id)
        return self.records.get(group_id)


class FakeLocalAuthority:
    """Local adapter returning every record of a group (all entities)."""

    def __init__(self, records: dict | None = None):
        self.records = records or {}
        self.calls: list[str] = []

    def find_permissions_by_group(self, group_id):
        self.calls.append(group_id)
        return self.records.get(group_id, [])


class AsyncFakeLocalAuthority(FakeLocalAuthority):
    async def find_permissions_by_group(self, group_id):
        return super().find_permissions_by_group(group_id)


def perm(entity, path, can_view=True):
    return {"entityName": entity, "fieldPath": path, "canView": can_view}


@pytest.fixture
def local_records():
    return {
        "A": [perm("User", "id"), perm("User", "email"), perm("Order", "total")],
        "B": [perm("User", "email"), perm("User", "authData.token"), perm("User", "password", False)],
    }


class FakePubSub:
    def __init__(self, bus: FakeRedisBus):
        self.bus = bus
        self.queue: asyncio.Queue = asyncio.Queue()
        self.channels: set[str] = set()

    async def subscribe(self, *channels):
        for channel in channels:
            self.channels.add(channel)
            self.bus.subscribers[channel].add(self)

    async def unsubscribe(self, *channels):
        for channel in channels or list(self.channels):
            self.bus.subscribers[channel].discard(self)
            self.channels.discard(channel)

    async def get_message(self, ignore_subscribe_messages=False, timeout=0.0):
        try:
            return await asyncio.wait_for(self.queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    async def aclose(self):
        await self.unsubscribe()


class FakeRedisBus:
    """In-memory stand-in for a connected RedisClient (publish + pubsub)."""

    def __init__(self):
        self.subscribers: dict[str, set[FakePubSub]] = defaultdict(set)
        self.published: list[tuple[str, str]] = []

    async def publish(self, channel, message):
        self.published.append((channel, message))
        targets = list(self.subscribers.get(channel, ()))
        for pubsub in targets:
            pubsub.queue.put_nowait({"type": "message", "channel": channel, "data": message})
        return len(targets)

    def pubsub(self):
        return FakePubSub(self)


@pytest.fixture
def redis_bus() -> FakeRedisBus:
    return FakeRedisBus()
