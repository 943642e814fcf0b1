from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from fieldgrants.core.defs import TraversalConfig
from fieldgrants.core.errors import ConfigurationError, SchemaNotLoadedError
from fieldgrants.core.utils import path_depth
from fieldgrants.fields.cache import FieldPathCache
from fieldgrants.fields.collector import FieldPathCollector
from fieldgrants.schema.graph import SchemaGraph, StaticSchemaProvider

from .conftest import USER_SCHEMA


def count_computations(collector: FieldPathCollector, monkeypatch) -> list[str]:
    computed: list[str] = []
    compute = collector._collect

    def counting(schema, entity_name, config):
        computed.append(entity_name)
        return compute(schema, entity_name, config)

    monkeypatch.setattr(collector, "_collect", counting)
    return computed


def test_entity_not_in_allowed_types_is_empty(collector):
    assert collector.get_field_paths("PersonalDataSchema") == frozenset()
    assert collector.get_field_paths("Address") == frozenset()


def test_unknown_entity_is_empty(provider):
    collector = FieldPathCollector(provider, TraversalConfig(allowed_types={"Ghost"}))
    assert collector.get_field_paths("Ghost") == frozenset()


def test_non_object_entity_is_empty(provider):
    # DateTime is only referenced, so it is registered as a scalar
    collector = FieldPathCollector(provider, TraversalConfig(allowed_types={"DateTime"}))
    assert collector.get_field_paths("DateTime") == frozenset()


def test_depth_one_returns_direct_fields(provider):
    collector = FieldPathCollector(
        provider,
        TraversalConfig(max_depth=1, allowed_types={"User", "AuthDataSchema"}),
    )
    assert collector.get_field_paths("User") == frozenset(USER_SCHEMA["User"])


def test_default_depth_descends_only_into_allowed_types(collector):
    paths = collector.get_field_paths("User")

    assert {"id", "email", "authData", "personalData", "manager", "createdAt"} <= paths
    assert {"authData.email", "authData.token", "authData.user"} <= paths
    assert "manager.id" in paths
    # PersonalDataSchema is not traversable: the field is listed, its children are not
    assert not any(p.startswith("personalData.") for p in paths)
    # Field at max depth is included, nothing below it
    assert "authData.user.id" not in paths
    assert all(path_depth(p) <= 2 for p in paths)


def test_self_referencing_type_terminates_within_depth(provider):
    collector = FieldPathCollector(provider, TraversalConfig(max_depth=3, allowed_types={"User"}))

    paths = collector.get_field_paths("User")

    assert "manager.manager.manager" in paths
    assert "manager.manager.id" in paths
    assert "manager.manager.manager.id" not in paths
    assert max(path_depth(p) for p in paths) == 3


def test_cycle_between_two_types_is_bounded(provider):
    collector = FieldPathCollector(
        provider,
        TraversalConfig(max_depth=4, allowed_types={"User", "AuthDataSchema"}),
    )
    paths = collector.get_field_paths("AuthDataSchema")

    assert "user.authData.user.id" in paths
    assert all(path_depth(p) <= 4 for p in paths)


def test_get_field_paths_is_idempotent(collector):
    assert collector.get_field_paths("User") == collector.get_field_paths("User")


def test_second_call_is_served_from_cache(collector, monkeypatch):
    computed = count_computations(collector, monkeypatch)

    collector.get_field_paths("User")
    collector.get_field_paths("User")

    assert computed == ["User"]


def test_warm_up_populates_cache(collector, monkeypatch):
    computed = count_computations(collector, monkeypatch)

    collector.warm_up(["User", "AuthDataSchema"])
    assert sorted(collector.cached_entities()) == ["AuthDataSchema", "User"]

    collector.get_field_paths("User")
    collector.get_field_paths("AuthDataSchema")

    assert computed == ["User", "AuthDataSchema"]


def test_get_field_paths_without_schema_raises():
    collector = FieldPathCollector(StaticSchemaProvider(), TraversalConfig(allowed_types={"User"}))
    with pytest.raises(SchemaNotLoadedError):
        collector.get_field_paths("User")


def test_warm_up_without_schema_raises():
    collector = FieldPathCollector(StaticSchemaProvider())
    with pytest.raises(SchemaNotLoadedError):
        collector.warm_up([])


def test_configure_overrides_only_given_values(collector):
    config = collector.configure(max_depth=3)

    assert config.max_depth == 3
    assert config.allowed_types == frozenset({"User", "AuthDataSchema"})
    assert config.debug is False

    config = collector.configure(debug=True, allowed_types=["User"])
    assert config == TraversalConfig(max_depth=3, allowed_types=frozenset({"User"}), debug=True)


def test_configure_with_full_config(collector):
    new = TraversalConfig(max_depth=1, allowed_types={"AuthDataSchema"})
    assert collector.configure(new) == new
    assert collector.config is new


def test_configure_rejects_invalid_depth(collector):
    with pytest.raises(ConfigurationError):
        collector.configure(max_depth=0)
    assert collector.config.max_depth == 2


def test_configure_rejects_bare_string_allow_list(collector):
    with pytest.raises(ConfigurationError):
        collector.configure(allowed_types="User")
    assert collector.config.allowed_types == frozenset({"User", "AuthDataSchema"})
    assert "authData.email" in collector.get_field_paths("User")

    with pytest.raises(ConfigurationError):
        TraversalConfig(allowed_types="User")


def test_reconfigure_keeps_cached_results_until_invalidated(collector):
    before = collector.get_field_paths("User")

    collector.configure(max_depth=1)
    assert collector.get_field_paths("User") == before

    assert collector.invalidate("User") == 1
    assert collector.get_field_paths("User") == frozenset(USER_SCHEMA["User"])


def test_invalidate_all(collector):
    collector.warm_up(["User", "AuthDataSchema"])
    assert collector.invalidate() == 2
    assert collector.cached_entities() == []
    assert collector.invalidate("User") == 0


def test_shared_cache_instance(provider):
    cache = FieldPathCache()
    collector = FieldPathCollector(provider, TraversalConfig(allowed_types={"User"}), cache=cache)

    collector.get_field_paths("User")

    assert "User" in cache
    assert len(cache) == 1


def test_debug_logging_does_not_change_result(provider, caplog):
    plain = FieldPathCollector(provider, TraversalConfig(allowed_types={"User"}))
    verbose = FieldPathCollector(provider, TraversalConfig(allowed_types={"User"}, debug=True))

    with caplog.at_level("DEBUG", logger="fieldgrants.fields.collector"):
        assert verbose.get_field_paths("User") == plain.get_field_paths("User")
        verbose.get_field_paths("Address")

    assert "not in allowed_types" in caplog.text


def test_concurrent_requests_are_consistent(provider):
    collector = FieldPathCollector(
        provider,
        TraversalConfig(max_depth=3, allowed_types={"User", "AuthDataSchema", "PersonalDataSchema", "Address"}),
    )
    names = ["User", "AuthDataSchema", "PersonalDataSchema", "Address"] * 25

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(collector.get_field_paths, names))

    reference = FieldPathCollector(provider, collector.config)
    for name, paths in zip(names, results):
        assert paths == reference.get_field_paths(name)
    assert sorted(collector.cached_entities()) == sorted(set(names))


def test_schema_snapshot_from_dict_round_trip():
    graph = SchemaGraph.from_dict(USER_SCHEMA)

    assert graph.to_dict() == USER_SCHEMA
    assert graph.get_type("DateTime").is_object is False
    assert "User" in graph
