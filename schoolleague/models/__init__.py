from schoolleague.models.models import (  # noqa: F401
    AuditLog,
    Coach,
    Match,
    School,
    TeamMember,
    Team,
    Tier,
    TIER_ORDER,
    TimestampedBase,
    User,
    UserRole,
)

__all__ = [
    "AuditLog",
    "Coach",
    "Match",
    "School",
    "TeamMember",
    "Team",
    "Tier",
    "TIER_ORDER",
    "TimestampedBase",
    "User",
    "UserRole",
]
