"""
Pydantic models for permission records and the request bodies exchanged
with permission authorities and the HTTP API.

Wire format is camelCase (`entityName`, `fieldPath`, `canView`); snake_case
names are accepted on input as well.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


FIND_PERMISSIONS_BY_GROUP = "FIND_PERMISSIONS_BY_GROUP"


class WireModel(BaseModel):
    """Base for camelCase wire models."""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GroupPermissionRecord(WireModel):
    """
    A field-level permission of one group.

    entity_name may be missing in records returned by a remote authority,
    which scopes its answer by entity already.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    entity_name: Optional[str] = Field(default=None, alias="entityName")
    field_path: str = Field(alias="fieldPath")
    can_view: bool = Field(default=False, alias="canView")

    @classmethod
    def coerce(cls, value: Any) -> GroupPermissionRecord:
        """
        Build a record from a record, a mapping, or any object exposing
        entity_name/field_path/can_view (or their camelCase forms).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        return cls(
            entity_name=_attr(value, "entity_name", "entityName"),
            field_path=_attr(value, "field_path", "fieldPath"),
            can_view=bool(_attr(value, "can_view", "canView")),
        )


def _attr(obj: Any, *names: str) -> Any:
    for name in names:
        if hasattr(obj, name):
            return getattr(obj, name)
    return None


class PermissionsByGroupRequest(WireModel):
    """Body of a FIND_PERMISSIONS_BY_GROUP call."""
    group_id: str = Field(alias="groupId")
    entity_name: str = Field(alias="entityName")


class ViewableFieldsRequest(WireModel):
    """Body of POST /viewable-fields."""
    group_ids: list[str] = Field(default_factory=list, alias="groupIds")
    entity_name: str = Field(alias="entityName")


class WarmUpRequest(WireModel):
    """Body of POST /fields/warm-up."""
    entities: list[str] = Field(default_factory=list)


class ConfigureRequest(WireModel):
    """
    Body of POST /fields/configure.

    Every value is optional; a missing value keeps the current setting.
    """
    max_depth: Optional[int] = Field(default=None, ge=1, alias="maxDepth")
    allowed_types: Optional[list[str]] = Field(default=None, alias="allowedTypes")
    debug: Optional[bool] = None
    invalidate: bool = False


class InvalidateRequest(WireModel):
    """Body of POST /fields/invalidate. No entity means the whole cache."""
    entity: Optional[str] = None


class FieldPathsResponse(WireModel):
    entity: str
    fields: list[str] = Field(default_factory=list)
