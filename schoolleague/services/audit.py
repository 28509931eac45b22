"""Audit log sink, written by callers after a mutation has committed."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from schoolleague.extensions import db
from schoolleague.models import AuditLog

if TYPE_CHECKING:
    from schoolleague.services.roles import RoleChange
    from schoolleague.services.tiers import BatchResult, TierChange


def log_admin_action(
    user_id: str | None,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None
) -> AuditLog | None:
    """
    Log an administrative action.

    Args:
        user_id: User who performed the action
        action: Action performed (e.g., "school_promote", "user_deleted")
        entity_type: Type of entity affected
        entity_id: ID of entity affected
        metadata: Additional metadata

    Returns:
        The stored entry, or None if it could not be written.
    """
    try:
        audit_entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            meta=metadata or {}
        )

        db.session.add(audit_entry)
        db.session.commit()
        return audit_entry

    except SQLAlchemyError as e:
        # Don't fail the caller if audit logging fails
        db.session.rollback()
        current_app.logger.error(f"Failed to log admin action: {e}")
        return None


def log_tier_change(user_id: str | None, change: TierChange, action: str = 'school_tier_changed') -> AuditLog | None:
    return log_admin_action(user_id, action, 'school', change.school_id, change.as_dict())


def log_bulk_tier_change(user_id: str | None, result: BatchResult) -> AuditLog | None:
    return log_admin_action(
        user_id,
        f"school_bulk_{result.direction.value}",
        'school',
        None,
        result.as_dict()['summary'],
    )


def log_role_change(user_id: str | None, change: RoleChange) -> AuditLog | None:
    action = 'user_deleted' if change.deleted else 'user_role_changed'
    return log_admin_action(user_id, action, 'user', change.user_id, change.as_dict())


__all__ = ["log_admin_action", "log_tier_change", "log_bulk_tier_change", "log_role_change"]
