"""
Permission lookup strategies.

A deployment talks to the grants authority either remotely (another service)
or locally (inside the grants service itself). The choice is made once,
when the resolver is built, and stored as one strategy value.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol, Union, runtime_checkable

from ..core.errors import ConfigurationError
from ..core.query_types import GroupPermissionRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class RemoteAuthority(Protocol):
    """
    Out-of-process grants authority.

    Answers are already scoped to entity_name by the authority.
    """

    async def find_permissions_by_group(self, group_id: str, entity_name: str) -> Optional[Iterable[Any]]:
        ...


@runtime_checkable
class LocalAuthority(Protocol):
    """
    In-process grants adapter.

    Returns every permission of the group, across all entities. May be a
    plain or an async method.
    """

    def find_permissions_by_group(self, group_id: str) -> Any:
        ...


@dataclass(frozen=True)
class RemoteStrategy:
    """Query the authority once per group, scoped by entity."""
    authority: RemoteAuthority
    kind = "remote"

    async def viewable_for_group(self, group_id: str, entity_name: str) -> set[str]:
        records = await self.authority.find_permissions_by_group(group_id, entity_name)
        viewable: set[str] = set()
        for raw in records or []:
            record = GroupPermissionRecord.coerce(raw)
            if record.can_view:
                viewable.add(record.field_path)
        return viewable


@dataclass(frozen=True)
class LocalStrategy:
    """Call the in-process adapter and keep records of the requested entity."""
    authority: LocalAuthority
    kind = "local"

    async def viewable_for_group(self, group_id: str, entity_name: str) -> set[str]:
        records = self.authority.find_permissions_by_group(group_id)
        if inspect.isawaitable(records):
            records = await records
        viewable: set[str] = set()
        for raw in records or []:
            record = GroupPermissionRecord.coerce(raw)
            if record.entity_name == entity_name and record.can_view:
                viewable.add(record.field_path)
        return viewable


Strategy = Union[RemoteStrategy, LocalStrategy]


def select_strategy(
    remote: Optional[RemoteAuthority] = None,
    local: Optional[LocalAuthority] = None,
) -> Strategy:
    """
    Pick the lookup strategy.

    Remote wins when both authorities are given.

    Raises:
        ConfigurationError: neither authority is given
    """
    if remote is not None:
        if local is not None:
            logger.info("Both remote and local grants authorities configured, using remote")
        return RemoteStrategy(remote)
    if local is not None:
        return LocalStrategy(local)
    raise ConfigurationError(
        "Cannot resolve permissions: neither a remote grants authority nor a local adapter is configured"
    )
