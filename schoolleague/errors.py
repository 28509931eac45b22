"""Structured error kinds raised by the governance services.

Every error carries a ``context`` dict so callers can render their own
messages; the string form is for logs only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from schoolleague.services.tiers import BatchResult


class LeagueError(Exception):
    """Base class for all governance errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class NotFound(LeagueError):
    """Raised when an id does not resolve to a stored record."""

    def __init__(self, resource: str, resource_id: str | None):
        super().__init__(
            f"{resource} {resource_id!r} not found",
            resource=resource,
            resource_id=resource_id,
        )
        self.resource = resource
        self.resource_id = resource_id


class Forbidden(LeagueError):
    """Raised when a capability or scope check fails."""

    def __init__(
        self,
        user_id: str | None,
        action: str,
        resource: str | None = None,
        resource_id: str | None = None,
    ):
        super().__init__(
            f"user {user_id!r} may not {action}",
            user_id=user_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
        )
        self.user_id = user_id
        self.action = action


class InvalidOperation(LeagueError):
    """Raised when a guard such as the self-targeting rule is violated."""

    def __init__(self, reason: str, **context: Any):
        super().__init__(reason, reason=reason, **context)
        self.reason = reason


class InvalidTransition(LeagueError):
    """Raised when a tier change is at a boundary or names an unknown tier."""

    def __init__(self, school_id: str | None, current_tier: Any, attempted: Any):
        current = getattr(current_tier, 'value', current_tier)
        target = getattr(attempted, 'value', attempted)
        super().__init__(
            f"cannot apply {target!r} to school {school_id!r} at tier {current!r}",
            school_id=school_id,
            current_tier=current,
            attempted=target,
        )
        self.school_id = school_id
        self.current_tier = current
        self.attempted = target


class PartialBatchFailure(LeagueError):
    """Raised on request when a bulk operation recorded per-item failures."""

    def __init__(self, result: BatchResult):
        super().__init__(
            f"{len(result.failed)} of {result.total} items failed",
            processed=len(result.processed),
            skipped=len(result.skipped),
            failed=len(result.failed),
        )
        self.result = result


__all__ = [
    "LeagueError",
    "NotFound",
    "Forbidden",
    "InvalidOperation",
    "InvalidTransition",
    "PartialBatchFailure",
]
