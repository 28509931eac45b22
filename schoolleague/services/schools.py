"""School and team creation."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import select

from schoolleague.errors import InvalidOperation, InvalidTransition, NotFound
from schoolleague.extensions import db
from schoolleague.models import School, Team, Tier
from schoolleague.services.authorization import require_admin, require_manage
from schoolleague.services.capabilities import ResourceClass
from schoolleague.services.db import atomic, lock_school
from schoolleague.services.tiers import parse_tier


def create_school(
    acting_user_id: str,
    name: str,
    location: str | None = None,
    motto: str | None = None,
    tier: Tier | str | None = None,
) -> School:
    """Create a school (admin only) at ``tier`` or the configured default tier."""
    require_admin(acting_user_id, 'create schools')
    name = (name or '').strip()
    if not name:
        raise InvalidOperation('missing_fields', field='name')

    requested = tier if tier is not None else current_app.config.get('DEFAULT_SCHOOL_TIER', Tier.BEGINNER)
    parsed = parse_tier(requested)
    if parsed is None:
        raise InvalidTransition(None, None, requested)

    with atomic():
        existing = db.session.execute(
            select(School.id).where(School.name == name)
        ).scalar_one_or_none()
        if existing is not None:
            raise InvalidOperation('school_name_taken', name=name)

        school = School(name=name, location=location or None, motto=motto or None, tier=parsed)
        db.session.add(school)

    current_app.logger.info(f"School {school.id} created at tier {parsed.value}")
    return school


def create_team(acting_user_id: str, school_id: str, name: str) -> Team:
    """Create a team under a school the acting user manages.

    The team starts at its school's current tier; the school row is locked
    so a concurrent transition cannot leave the new team behind.
    """
    name = (name or '').strip()
    if not name:
        raise InvalidOperation('missing_fields', field='name')

    with atomic():
        school = lock_school(school_id)
        if school is None:
            raise NotFound('school', school_id)
        require_manage(acting_user_id, ResourceClass.SCHOOL, school.id)

        team = Team(school_id=school.id, name=name, tier=school.tier)
        db.session.add(team)

    current_app.logger.info(f"Team {team.id} created for school {school_id}")
    return team


__all__ = ["create_school", "create_team"]
