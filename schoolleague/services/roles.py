"""Role assignment, demotion and user removal.

Only admins may call these. An admin can never demote, strip or delete
themselves, and a coach link exists exactly while a user holds the coach
role.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import current_app
from sqlalchemy import select

from schoolleague.errors import InvalidOperation, NotFound
from schoolleague.extensions import db
from schoolleague.models import Coach, School, Team, User, UserRole
from schoolleague.services.authorization import require_admin
from schoolleague.services.db import atomic, get, lock_user

SCOPED_ROLES = frozenset({UserRole.COACH, UserRole.SCHOOL_ADMIN})


@dataclass(frozen=True)
class RoleChange:
    user_id: str
    email: str
    old_role: UserRole | None
    new_role: UserRole | None
    school_id: str | None = None
    deleted: bool = False
    captaincies_cleared: tuple[str, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict[str, Any]:
        return {
            'user': {'id': self.user_id, 'email': self.email},
            'old_role': self.old_role.value if self.old_role else None,
            'new_role': self.new_role.value if self.new_role else None,
            'school_id': self.school_id,
            'deleted': self.deleted,
            'captaincies_cleared': list(self.captaincies_cleared),
        }


def _parse_role(role: UserRole | str) -> UserRole:
    parsed = UserRole.parse(role)
    if parsed is None:
        raise InvalidOperation('unknown_role', role=role)
    return parsed


def _guard_self(acting_user_id: str, target_user_id: str, action: str) -> None:
    if acting_user_id == target_user_id:
        raise InvalidOperation('self_target', action=action, user_id=target_user_id)


def _require_school(school_id: str | None) -> School:
    school = get(School, school_id)
    if school is None:
        raise NotFound('school', school_id)
    return school


def _load_target(user_id: str) -> User:
    target = lock_user(user_id)
    if target is None:
        raise NotFound('user', user_id)
    return target


def _coach_link(user_id: str) -> Coach | None:
    return db.session.execute(
        select(Coach).where(Coach.user_id == user_id)
    ).scalar_one_or_none()


def _link_coach(user: User, school_id: str) -> Coach:
    """Create the user's coach link or point the existing one at ``school_id``."""
    link = _coach_link(user.id)
    if link is None:
        link = Coach(user_id=user.id, school_id=school_id)
        db.session.add(link)
    else:
        link.school_id = school_id
    return link


def _unlink_coach(user: User) -> bool:
    link = _coach_link(user.id)
    if link is None:
        return False
    db.session.delete(link)
    return True


def change_role(
    acting_user_id: str,
    target_user_id: str,
    new_role: UserRole | str,
    new_scope_school_id: str | None = None,
) -> RoleChange:
    """Reassign a user's role, keeping the coach link and school scope consistent.

    Args:
        acting_user_id: Admin performing the change.
        target_user_id: User whose role changes.
        new_role: Role to assign.
        new_scope_school_id: School to coach or own; required for the
            ``coach`` and ``school_admin`` roles.

    Raises:
        Forbidden: the acting user is not an admin.
        InvalidOperation: self-demotion, unknown role or missing school.
        NotFound: unknown target user or school.
    """
    require_admin(acting_user_id, 'change roles')
    role = _parse_role(new_role)
    if acting_user_id == target_user_id and role is not UserRole.ADMIN:
        raise InvalidOperation('self_demotion', user_id=target_user_id, role=role.value)
    if role in SCOPED_ROLES and not new_scope_school_id:
        raise InvalidOperation('scope_school_required', role=role.value)

    with atomic():
        target = _load_target(target_user_id)
        school_id = _require_school(new_scope_school_id).id if role in SCOPED_ROLES else None
        old_role = UserRole.parse(target.role)

        if old_role is UserRole.COACH and role is not UserRole.COACH:
            _unlink_coach(target)
        if role is UserRole.COACH:
            _link_coach(target, school_id)

        target.owned_school_id = school_id if role is UserRole.SCHOOL_ADMIN else None
        target.role = role
        db.session.flush()
        change = RoleChange(target.id, target.email, old_role, role, school_id=school_id)

    current_app.logger.info(
        f"User {change.user_id} role changed "
        f"{old_role.value if old_role else None} -> {role.value} by {acting_user_id}"
    )
    return change


def remove_from_role(acting_user_id: str, target_user_id: str) -> RoleChange:
    """Demote a user to player, dropping any school admin or coach scope."""
    require_admin(acting_user_id, 'remove users from roles')
    _guard_self(acting_user_id, target_user_id, 'remove_from_role')

    with atomic():
        target = _load_target(target_user_id)
        old_role = UserRole.parse(target.role)
        _unlink_coach(target)
        target.owned_school_id = None
        target.role = UserRole.PLAYER
        db.session.flush()
        change = RoleChange(target.id, target.email, old_role, UserRole.PLAYER)

    current_app.logger.info(f"User {change.user_id} removed from role {change.as_dict()['old_role']}")
    return change


def delete_user(acting_user_id: str, target_user_id: str) -> RoleChange:
    """Delete a user with their coach link and team memberships.

    Schools and teams are never removed. Any captaincy the user held is
    cleared and left empty.
    """
    require_admin(acting_user_id, 'delete users')
    _guard_self(acting_user_id, target_user_id, 'delete_user')

    with atomic():
        target = _load_target(target_user_id)
        old_role = UserRole.parse(target.role)

        captained = list(db.session.execute(
            select(Team).where(Team.captain_id == target.id)
        ).scalars())
        for team in captained:
            team.captain_id = None

        for membership in list(target.memberships):
            db.session.delete(membership)
        _unlink_coach(target)
        change = RoleChange(
            target.id,
            target.email,
            old_role,
            None,
            deleted=True,
            captaincies_cleared=tuple(team.id for team in captained),
        )
        db.session.flush()

        # Drop stale relationship collections before the user row goes
        db.session.expire(target)
        db.session.delete(target)

    current_app.logger.info(
        f"User {change.user_id} deleted by {acting_user_id}; "
        f"{len(change.captaincies_cleared)} captaincies cleared"
    )
    return change


def create_user(
    acting_user_id: str,
    email: str,
    password: str,
    full_name: str,
    role: UserRole | str = UserRole.PLAYER,
    school_id: str | None = None,
) -> User:
    """Create a user; the school anchors the role-relevant scope field.

    Coaches and school admins require a school. Players may optionally be
    enrolled at one.
    """
    require_admin(acting_user_id, 'create users')
    parsed = _parse_role(role)
    email = (email or '').strip().lower()
    if not email or not password or not full_name:
        raise InvalidOperation('missing_fields', email=email)
    if parsed in SCOPED_ROLES and not school_id:
        raise InvalidOperation('scope_school_required', role=parsed.value)

    with atomic():
        existing = db.session.execute(
            select(User.id).where(User.email == email)
        ).scalar_one_or_none()
        if existing is not None:
            raise InvalidOperation('email_taken', email=email)

        school = _require_school(school_id) if school_id else None
        user = User(email=email, full_name=full_name.strip(), role=parsed)
        user.set_password(password)
        if parsed is UserRole.SCHOOL_ADMIN:
            user.owned_school_id = school.id
        elif parsed is UserRole.PLAYER and school is not None:
            user.student_school_id = school.id
        db.session.add(user)
        db.session.flush()
        if parsed is UserRole.COACH:
            _link_coach(user, school.id)

    current_app.logger.info(f"User {user.id} created with role {parsed.value}")
    return user


def change_user_school(acting_user_id: str, target_user_id: str, school_id: str) -> User:
    """Move a user's role-relevant school anchor to another school."""
    require_admin(acting_user_id, 'change user schools')

    with atomic():
        target = _load_target(target_user_id)
        school = _require_school(school_id)
        role = UserRole.parse(target.role)
        if role is UserRole.SCHOOL_ADMIN:
            target.owned_school_id = school.id
        elif role is UserRole.COACH:
            _link_coach(target, school.id)
        elif role is UserRole.PLAYER:
            target.student_school_id = school.id
        else:
            raise InvalidOperation('role_has_no_school', user_id=target.id, role=getattr(role, 'value', None))
        db.session.flush()

    current_app.logger.info(f"User {target.id} moved to school {school.id}")
    return target


__all__ = [
    "RoleChange",
    "change_role",
    "remove_from_role",
    "delete_user",
    "create_user",
    "change_user_school",
]
