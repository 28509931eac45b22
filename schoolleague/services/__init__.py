"""Entry points consumed by the application layer."""

from schoolleague.services.authorization import (
    can_manage,
    manageable_school_ids,
    require_admin,
    require_manage,
)
from schoolleague.services.capabilities import ResourceClass, capabilities_for, permissions_for
from schoolleague.services.identity import Identity, resolve_identity
from schoolleague.services.roles import (
    RoleChange,
    change_role,
    change_user_school,
    create_user,
    delete_user,
    remove_from_role,
)
from schoolleague.services.roster import (
    assign_student_to_team,
    remove_student_from_team,
    set_team_captain,
)
from schoolleague.services.schools import create_school, create_team
from schoolleague.services.tiers import (
    BatchResult,
    Direction,
    TierChange,
    apply_transition as apply_tier_transition,
    bulk_apply_transition as bulk_apply_tier_transition,
)

__all__ = [
    "Identity",
    "resolve_identity",
    "ResourceClass",
    "capabilities_for",
    "permissions_for",
    "can_manage",
    "require_manage",
    "require_admin",
    "manageable_school_ids",
    "Direction",
    "TierChange",
    "BatchResult",
    "apply_tier_transition",
    "bulk_apply_tier_transition",
    "RoleChange",
    "change_role",
    "remove_from_role",
    "delete_user",
    "create_user",
    "change_user_school",
    "create_school",
    "create_team",
    "assign_student_to_team",
    "remove_student_from_team",
    "set_team_captain",
]
