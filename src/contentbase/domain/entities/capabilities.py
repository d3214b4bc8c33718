"""Capability flags gating content mutations.

The flags are computed by an external permissions system; the engines
only read them.
"""

from dataclasses import dataclass, fields
from typing import Any, Iterable


@dataclass(frozen=True)
class UserCan:
    """Capability flag bag for the acting user."""

    create_content: bool = False
    update_content: bool = False
    publish_content: bool = False
    unpublish_content: bool = False
    move_content_to_trash: bool = False
    delete_content: bool = False

    @classmethod
    def all(cls) -> "UserCan":
        return cls(**{f.name: True for f in fields(cls)})

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "UserCan":
        data = data or {}
        return cls(**{f.name: bool(data.get(f.name, False)) for f in fields(cls)})

    @classmethod
    def from_permissions(cls, permissions: Iterable[str]) -> "UserCan":
        granted = set(permissions)
        return cls(**{f.name: f.name in granted for f in fields(cls)})

    def allows(self, capability: str) -> bool:
        return bool(getattr(self, capability, False))
