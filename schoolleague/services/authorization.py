"""Scope-based authorization.

``can_manage`` is the single decision point for "may this user manage that
resource". It never raises for unknown users, resources or resource
classes; all of those are denied.
"""

from __future__ import annotations

from typing import Callable

from flask import current_app
from sqlalchemy import select

from schoolleague.errors import Forbidden, NotFound
from schoolleague.extensions import db
from schoolleague.models import Coach, Match, School, Team, User, UserRole
from schoolleague.services.capabilities import ResourceClass, capabilities_for
from schoolleague.services.db import get
from schoolleague.services.identity import Identity, resolve_identity


def _school_owner(resource_id: str) -> frozenset[str]:
    school = get(School, resource_id)
    return frozenset({school.id}) if school else frozenset()


def _team_owner(resource_id: str) -> frozenset[str]:
    team = get(Team, resource_id)
    return frozenset({team.school_id}) if team else frozenset()


def _player_owner(resource_id: str) -> frozenset[str]:
    player = get(User, resource_id)
    if player is None or player.role is not UserRole.PLAYER:
        return frozenset()
    if not player.student_school_id:
        return frozenset()
    return frozenset({player.student_school_id})


def _coach_owner(resource_id: str) -> frozenset[str]:
    # Coaches are addressed by their user id
    stmt = select(Coach.school_id).where(Coach.user_id == resource_id)
    school_id = db.session.execute(stmt).scalar_one_or_none()
    return frozenset({school_id}) if school_id else frozenset()


def _match_owners(resource_id: str) -> frozenset[str]:
    match = get(Match, resource_id)
    if match is None:
        return frozenset()
    owners = set()
    for team in (match.home_team, match.away_team):
        if team is not None:
            owners.add(team.school_id)
    return frozenset(owners)


OWNER_RESOLVERS: dict[ResourceClass, Callable[[str], frozenset[str]]] = {
    ResourceClass.SCHOOL: _school_owner,
    ResourceClass.TEAM: _team_owner,
    ResourceClass.PLAYER: _player_owner,
    ResourceClass.COACH: _coach_owner,
    ResourceClass.MATCH: _match_owners,
}


def owning_school_ids(resource_class: ResourceClass | str, resource_id: str | None) -> frozenset[str]:
    """Schools a resource belongs to; empty when the resource is unknown."""
    parsed = ResourceClass.parse(resource_class)
    if parsed is None or not resource_id:
        return frozenset()
    return OWNER_RESOLVERS[parsed](resource_id)


def can_manage(
    user_id: str | None,
    resource_class: ResourceClass | str,
    resource_id: str | None,
    identity: Identity | None = None,
) -> bool:
    """Decide whether ``user_id`` may manage the given resource.

    Args:
        user_id: Acting user.
        resource_class: One of the :class:`ResourceClass` values.
        resource_id: Id of the school, team, player, coach user or match.
        identity: Identity already resolved for ``user_id`` during the
            current request. Never reuse one across requests.

    Returns:
        True if allowed, False otherwise (including for unknown inputs).
    """
    parsed = ResourceClass.parse(resource_class)
    if parsed is None or not user_id or not resource_id:
        return False

    if identity is None:
        try:
            identity = resolve_identity(user_id)
        except NotFound:
            return False

    caps = capabilities_for(identity.role)
    if caps.can_manage_all(parsed):
        return True

    if parsed is ResourceClass.PLAYER and resource_id == identity.user_id:
        return True

    if not caps.can_manage_own(parsed):
        return False

    anchor = identity.scope_school_id
    if not anchor:
        return False
    return anchor in owning_school_ids(parsed, resource_id)


def require_manage(
    user_id: str | None,
    resource_class: ResourceClass | str,
    resource_id: str | None,
    identity: Identity | None = None,
) -> None:
    """Like :func:`can_manage` but raise :class:`Forbidden` on denial."""
    if not can_manage(user_id, resource_class, resource_id, identity=identity):
        resource = getattr(resource_class, 'value', resource_class)
        current_app.logger.info(f"Denied {user_id} managing {resource} {resource_id}")
        raise Forbidden(user_id, f"manage {resource}", resource=resource, resource_id=resource_id)


def require_admin(user_id: str | None, action: str) -> Identity:
    """Resolve the acting user and ensure they hold admin capability."""
    try:
        identity = resolve_identity(user_id)
    except NotFound:
        raise Forbidden(user_id, action) from None
    if not capabilities_for(identity.role).is_admin:
        raise Forbidden(user_id, action)
    return identity


def manageable_school_ids(user_id: str | None) -> frozenset[str] | None:
    """Schools whose resources the user may manage within scope.

    Returns None when the user manages schools globally, and an empty set
    for unknown users or roles without any scoped rights.
    """
    try:
        identity = resolve_identity(user_id)
    except NotFound:
        return frozenset()

    caps = capabilities_for(identity.role)
    if caps.can_manage_all(ResourceClass.SCHOOL):
        return None
    if caps.manage_own_scope and identity.scope_school_id:
        return frozenset({identity.scope_school_id})
    return frozenset()


__all__ = [
    "OWNER_RESOLVERS",
    "owning_school_ids",
    "can_manage",
    "require_manage",
    "require_admin",
    "manageable_school_ids",
]
