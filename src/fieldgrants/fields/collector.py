"""
Field path collector.

Walks the schema graph from an entity and collects every dotted field path
within max_depth, descending only into object types listed in allowed_types.
Results are memoized per entity name.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from ..core.defs import TraversalConfig, TypeDescriptor
from ..core.errors import SchemaNotLoadedError
from ..core.utils import join_path
from ..schema.graph import SchemaGraph, SchemaGraphProvider
from .cache import FieldPathCache

logger = logging.getLogger(__name__)


class FieldPathCollector:
    """
    Collects reachable field paths per entity.

    Usage:
        collector = FieldPathCollector(provider)
        collector.configure(max_depth=2, allowed_types=["User", "AuthData"])
        collector.warm_up(["User"])

        collector.get_field_paths("User")
        # frozenset({"id", "authData", "authData.email", ...})

    Reconfiguring does not touch cached results; call invalidate() to
    recompute with the new settings.
    """

    def __init__(
        self,
        provider: SchemaGraphProvider,
        config: Optional[TraversalConfig] = None,
        cache: Optional[FieldPathCache] = None,
    ):
        """
        Initialize collector.

        Args:
            provider: Source of the schema snapshot
            config: Traversal settings (defaults: max_depth=2, no allowed types)
            cache: Cache instance to use; a private one is created if omitted
        """
        self.provider = provider
        self._config = config or TraversalConfig()
        self._config_lock = threading.Lock()
        self.cache = cache if cache is not None else FieldPathCache()

    @property
    def config(self) -> TraversalConfig:
        return self._config

    def configure(
        self,
        config: Optional[TraversalConfig] = None,
        *,
        max_depth: Optional[int] = None,
        allowed_types: Optional[Iterable[str]] = None,
        debug: Optional[bool] = None,
    ) -> TraversalConfig:
        """
        Replace traversal settings.

        Either pass a full TraversalConfig, or any of the keyword overrides
        (a missing override keeps the current value). The swap is atomic.

        Returns:
            The new configuration
        """
        with self._config_lock:
            base = config if config is not None else self._config
            new_config = base.override(max_depth=max_depth, allowed_types=allowed_types, debug=debug)
            self._config = new_config

        if new_config.debug:
            logger.info(
                f"FieldPathCollector configured: max_depth={new_config.max_depth}, debug={new_config.debug}"
            )
            logger.info(f"allowed_types = [{', '.join(sorted(new_config.allowed_types))}]")
        return new_config

    def warm_up(self, entity_names: Iterable[str]) -> None:
        """Compute and cache field paths for each entity."""
        entity_names = list(entity_names)
        schema = self._require_schema()
        config = self._config

        if config.debug:
            logger.info(f"warm_up => [{', '.join(entity_names)}], max_depth={config.max_depth}")

        for entity_name in entity_names:
            paths = self._collect(schema, entity_name, config)
            self.cache.set(entity_name, paths)
            if config.debug:
                logger.debug(f"Preloaded {entity_name!r} => {len(paths)} field paths")

    def get_field_paths(self, entity_name: str) -> frozenset[str]:
        """
        Return field paths of an entity, computing them on first request.

        Unknown, non-object or non-allowed entities yield an empty set.

        Raises:
            SchemaNotLoadedError: if the provider has no schema snapshot
        """
        cached = self.cache.get(entity_name)
        if cached is not None:
            return cached

        paths = self._collect(self._require_schema(), entity_name, self._config)
        self.cache.set(entity_name, paths)
        return paths

    def invalidate(self, entity_name: Optional[str] = None) -> int:
        """
        Drop cached results for one entity, or for all entities.

        Returns:
            Number of entries dropped
        """
        if entity_name is None:
            count = self.cache.clear()
        else:
            count = int(self.cache.invalidate(entity_name))
        logger.debug(f"Field path cache invalidated: {count} entr{'y' if count == 1 else 'ies'}")
        return count

    def cached_entities(self) -> list[str]:
        return self.cache.keys()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_schema(self) -> SchemaGraph:
        schema = self.provider.get_schema()
        if schema is None:
            raise SchemaNotLoadedError("FieldPathCollector: schema graph is not available yet")
        return schema

    def _collect(self, schema: SchemaGraph, entity_name: str, config: TraversalConfig) -> frozenset[str]:
        allowed = config.allowed_types
        debug = config.debug

        if entity_name not in allowed:
            if debug:
                logger.warning(f"Entity {entity_name!r} is not in allowed_types => skip")
            return frozenset()

        root = schema.get_type(entity_name)
        if root is None or not root.is_object:
            if debug:
                logger.warning(f"Type {entity_name!r} not found in schema, or not an object type")
            return frozenset()

        results: set[str] = set()

        def visit(type_def: TypeDescriptor, prefix: str, depth: int) -> None:
            if depth > config.max_depth:
                return
            if debug:
                logger.debug(f"(depth={depth}) type={type_def.name!r} => {len(type_def.fields)} fields")

            for field_name, field_def in type_def.fields.items():
                path = join_path(prefix, field_name)
                results.add(path)
                if debug:
                    logger.debug(f"    + {path} (depth={depth})")

                if not field_def.named_type or depth >= config.max_depth:
                    continue
                target = schema.get_type(field_def.named_type)
                if target is not None and target.is_object and target.name in allowed:
                    visit(target, path, depth + 1)

        visit(root, "", 1)
        return frozenset(results)
