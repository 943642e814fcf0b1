"""
Permission resolver - union of viewable field paths across groups.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .strategies import LocalAuthority, RemoteAuthority, Strategy, select_strategy

logger = logging.getLogger(__name__)


class PermissionResolver:
    """
    Resolves the field paths a set of groups may view on an entity.

    Every call asks the authority again; nothing is cached here.
    A failing group query fails the whole call, so callers never receive a
    partial permission set.

    Usage:
        resolver = PermissionResolver.from_authorities(remote=HttpGrantsClient(url))
        fields = await resolver.get_viewable_fields(["admins", "support"], "User")
    """

    def __init__(self, strategy: Strategy):
        self.strategy = strategy

    @classmethod
    def from_authorities(
        cls,
        remote: Optional[RemoteAuthority] = None,
        local: Optional[LocalAuthority] = None,
    ) -> PermissionResolver:
        """Build resolver from optional authorities (remote takes priority)."""
        return cls(select_strategy(remote=remote, local=local))

    @property
    def mode(self) -> str:
        return self.strategy.kind

    async def get_viewable_fields(self, group_ids: Iterable[str], entity_name: str) -> set[str]:
        """
        Union of field paths viewable by any of the groups.

        Groups are queried one at a time, in order.
        """
        union: set[str] = set()
        for group_id in group_ids:
            union |= await self.strategy.viewable_for_group(group_id, entity_name)

        logger.debug(f"Viewable fields for {entity_name} via {self.mode}: {len(union)}")
        return union
