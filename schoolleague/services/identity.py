"""Identity resolution: a user id to its role and scope anchors."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select

from schoolleague.errors import NotFound
from schoolleague.extensions import db
from schoolleague.models import Coach, User, UserRole
from schoolleague.services.db import get


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: UserRole | None
    owned_school_id: str | None = None
    coached_school_id: str | None = None
    student_school_id: str | None = None

    @property
    def scope_school_id(self) -> str | None:
        """The school anchoring this user's own-scope rights, if any."""
        if self.role is UserRole.SCHOOL_ADMIN:
            return self.owned_school_id
        if self.role is UserRole.COACH:
            return self.coached_school_id
        if self.role is UserRole.PLAYER:
            return self.student_school_id
        return None


def coached_school_id(user_id: str) -> str | None:
    stmt = select(Coach.school_id).where(Coach.user_id == user_id)
    return db.session.execute(stmt).scalar_one_or_none()


def resolve_identity(user_id: str | None) -> Identity:
    """Resolve a user id to an :class:`Identity`.

    Raises:
        NotFound: if no user has this id.
    """
    user = get(User, user_id)
    if user is None:
        raise NotFound('user', user_id)

    return Identity(
        user_id=user.id,
        role=UserRole.parse(user.role),
        owned_school_id=user.owned_school_id,
        coached_school_id=coached_school_id(user.id),
        student_school_id=user.student_school_id,
    )


__all__ = ["Identity", "resolve_identity", "coached_school_id"]
