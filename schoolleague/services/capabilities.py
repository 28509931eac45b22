"""Static role → capability table.

Every authorization decision reads from ``CAPABILITY_MATRIX``; roles that
are missing from it get no rights at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from schoolleague.models import UserRole


class ResourceClass(Enum):
    SCHOOL = "school"
    TEAM = "team"
    PLAYER = "player"
    COACH = "coach"
    MATCH = "match"

    @classmethod
    def parse(cls, value: "ResourceClass | str | None") -> "ResourceClass | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


ALL_RESOURCES = frozenset(ResourceClass)


@dataclass(frozen=True)
class CapabilitySet:
    manage_all: frozenset[ResourceClass] = frozenset()
    manage_own_scope: frozenset[ResourceClass] = frozenset()

    def can_manage_all(self, resource_class: ResourceClass) -> bool:
        return resource_class in self.manage_all

    def can_manage_own(self, resource_class: ResourceClass) -> bool:
        return resource_class in self.manage_own_scope

    @property
    def is_admin(self) -> bool:
        return self.manage_all == ALL_RESOURCES

    @property
    def is_empty(self) -> bool:
        return not self.manage_all and not self.manage_own_scope


NO_CAPABILITIES = CapabilitySet()

CAPABILITY_MATRIX: dict[UserRole, CapabilitySet] = {
    UserRole.ADMIN: CapabilitySet(manage_all=ALL_RESOURCES),
    UserRole.SCHOOL_ADMIN: CapabilitySet(manage_own_scope=ALL_RESOURCES),
    UserRole.COACH: CapabilitySet(
        manage_own_scope=frozenset({ResourceClass.TEAM, ResourceClass.PLAYER, ResourceClass.MATCH}),
    ),
    # Judges are not yet scoped to assigned matches.
    UserRole.JUDGE: CapabilitySet(manage_all=frozenset({ResourceClass.MATCH})),
    UserRole.PLAYER: NO_CAPABILITIES,
    UserRole.SPONSOR: NO_CAPABILITIES,
}


def capabilities_for(role: UserRole | str | None) -> CapabilitySet:
    """Look up a role's capabilities; unknown roles get the empty set."""
    parsed = UserRole.parse(role)
    if parsed is None:
        return NO_CAPABILITIES
    return CAPABILITY_MATRIX.get(parsed, NO_CAPABILITIES)


def capability_flags(role: UserRole | str | None) -> dict[str, dict[str, bool]]:
    """Flatten a role's capabilities into per-resource boolean flags."""
    caps = capabilities_for(role)
    return {
        resource.value: {
            'manage_all': caps.can_manage_all(resource),
            'manage_own': caps.can_manage_own(resource),
        }
        for resource in ResourceClass
    }


def permissions_for(user_id: str) -> dict[str, Any]:
    """Summarize what a user may manage, for front ends that gate their UI.

    Raises:
        NotFound: if no user has this id.
    """
    from schoolleague.services.identity import resolve_identity

    identity = resolve_identity(user_id)
    caps = capabilities_for(identity.role)
    return {
        'user_id': identity.user_id,
        'role': identity.role.value if identity.role else None,
        'school_id': identity.scope_school_id,
        'is_admin': caps.is_admin,
        'can': capability_flags(identity.role),
    }


__all__ = [
    "ResourceClass",
    "CapabilitySet",
    "CAPABILITY_MATRIX",
    "NO_CAPABILITIES",
    "capabilities_for",
    "capability_flags",
    "permissions_for",
]
