"""Team membership and captaincy."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import select

from schoolleague.errors import InvalidOperation, NotFound
from schoolleague.extensions import db
from schoolleague.models import Team, TeamMember, User, UserRole
from schoolleague.services.authorization import require_manage
from schoolleague.services.capabilities import ResourceClass
from schoolleague.services.db import atomic, get


def _membership(team_id: str, player_id: str) -> TeamMember | None:
    stmt = select(TeamMember).where(
        TeamMember.team_id == team_id,
        TeamMember.player_id == player_id,
    )
    return db.session.execute(stmt).scalar_one_or_none()


def _managed_team(acting_user_id: str, team_id: str) -> Team:
    team = get(Team, team_id)
    if team is None:
        raise NotFound('team', team_id)
    require_manage(acting_user_id, ResourceClass.TEAM, team.id)
    return team


def assign_student_to_team(acting_user_id: str, student_id: str, team_id: str) -> TeamMember:
    """Add a player to a team the acting user manages."""
    with atomic():
        team = _managed_team(acting_user_id, team_id)
        student = get(User, student_id)
        if student is None:
            raise NotFound('user', student_id)
        if student.role is not UserRole.PLAYER:
            raise InvalidOperation('not_a_player', user_id=student_id)
        if _membership(team.id, student.id) is not None:
            raise InvalidOperation('already_member', user_id=student_id, team_id=team.id)

        membership = TeamMember(team_id=team.id, player_id=student.id)
        db.session.add(membership)

    current_app.logger.info(f"Player {student_id} added to team {team_id}")
    return membership


def remove_student_from_team(acting_user_id: str, student_id: str, team_id: str) -> bool:
    """Remove a player from a team; a removed captain leaves the captaincy empty.

    Returns:
        True if the removed player was the captain.
    """
    with atomic():
        team = _managed_team(acting_user_id, team_id)
        membership = _membership(team.id, student_id)
        if membership is None:
            raise NotFound('team_member', student_id)

        was_captain = team.captain_id == student_id
        if was_captain:
            team.captain_id = None
        db.session.delete(membership)

    current_app.logger.info(f"Player {student_id} removed from team {team_id}")
    return was_captain


def set_team_captain(acting_user_id: str, team_id: str, player_id: str | None) -> Team:
    """Make a team member captain, or clear the captaincy with ``None``."""
    with atomic():
        team = _managed_team(acting_user_id, team_id)
        if player_id is not None and _membership(team.id, player_id) is None:
            raise InvalidOperation('not_a_member', user_id=player_id, team_id=team.id)
        team.captain_id = player_id

    return team


__all__ = ["assign_student_to_team", "remove_student_from_team", "set_team_captain"]
