"""League tier state machine.

A school's tier moves one rank at a time (promote/relegate) or jumps to an
explicit tier on admin override. Every owned team's tier is rewritten in the
same transaction as the school's, so a team never lags its school.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from schoolleague.errors import InvalidTransition, LeagueError, NotFound, PartialBatchFailure
from schoolleague.extensions import db
from schoolleague.models import School, Team, Tier, TIER_ORDER
from schoolleague.services.db import atomic, lock_school


class Direction(Enum):
    PROMOTE = "promote"
    RELEGATE = "relegate"

    @property
    def step(self) -> int:
        return 1 if self is Direction.PROMOTE else -1


@dataclass(frozen=True)
class TierChange:
    school_id: str
    school_name: str
    old_tier: Tier
    new_tier: Tier
    teams_updated: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            'school': {'id': self.school_id, 'name': self.school_name},
            'old_tier': self.old_tier.value,
            'new_tier': self.new_tier.value,
            'teams_updated': self.teams_updated,
        }


@dataclass(frozen=True)
class BatchItem:
    school_id: str
    school_name: str
    tier: str | None
    reason: str
    context: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            'school_id': self.school_id,
            'school_name': self.school_name,
            'tier': self.tier,
            'reason': self.reason,
            'context': dict(self.context),
        }


@dataclass
class BatchResult:
    direction: Direction
    tier_filter: Tier | None = None
    processed: list[TierChange] = field(default_factory=list)
    skipped: list[BatchItem] = field(default_factory=list)
    failed: list[BatchItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.processed) + len(self.skipped) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        """Raise :class:`PartialBatchFailure` if any school failed."""
        if self.failed:
            raise PartialBatchFailure(self)

    def as_dict(self) -> dict[str, Any]:
        return {
            'direction': self.direction.value,
            'tier_filter': self.tier_filter.value if self.tier_filter else None,
            'summary': {
                'processed': len(self.processed),
                'skipped': len(self.skipped),
                'failed': len(self.failed),
            },
            'processed': [change.as_dict() for change in self.processed],
            'skipped': [item.as_dict() for item in self.skipped],
            'failed': [item.as_dict() for item in self.failed],
        }


def parse_tier(value: Tier | str | None) -> Tier | None:
    if isinstance(value, Tier):
        return value
    try:
        return Tier(str(value).strip().lower())
    except ValueError:
        return None


def parse_direction(value: Direction | str | None) -> Direction | None:
    if isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).strip().lower())
    except ValueError:
        return None


def next_tier(current: Tier, direction: Direction) -> Tier | None:
    """Neighbouring tier in ``direction``, or None at the boundary."""
    rank = TIER_ORDER.index(current) + direction.step
    if rank < 0 or rank >= len(TIER_ORDER):
        return None
    return TIER_ORDER[rank]


def _target_tier(school: School, transition: Direction | Tier | str) -> Tier:
    direction = parse_direction(transition)
    if direction is not None:
        target = next_tier(school.tier, direction)
        if target is None:
            raise InvalidTransition(school.id, school.tier, direction.value)
        return target

    target = parse_tier(transition)
    if target is None:
        raise InvalidTransition(school.id, school.tier, transition)
    return target


def _cascade_to_teams(school: School, tier: Tier) -> int:
    stmt = (
        select(Team)
        .where(Team.school_id == school.id)
        .execution_options(populate_existing=True)
    )
    teams = list(db.session.execute(stmt).scalars())
    for team in teams:
        team.tier = tier
    return len(teams)


def _locked_school(school_id: str) -> School:
    school = lock_school(school_id)
    if school is None:
        raise NotFound('school', school_id)
    return school


def _move(school: School, transition: Direction | Tier | str) -> TierChange:
    """Write the new tier to a locked school and its teams; the caller commits."""
    old_tier = school.tier
    new_tier = _target_tier(school, transition)
    school.tier = new_tier
    teams_updated = _cascade_to_teams(school, new_tier)
    db.session.flush()
    return TierChange(
        school_id=school.id,
        school_name=school.name,
        old_tier=old_tier,
        new_tier=new_tier,
        teams_updated=teams_updated,
    )


def _log_change(change: TierChange) -> None:
    current_app.logger.info(
        f"School {change.school_id} moved {change.old_tier.value} -> {change.new_tier.value} "
        f"({change.teams_updated} teams)"
    )


def apply_transition(school_id: str, transition: Direction | Tier | str) -> TierChange:
    """Promote, relegate or explicitly set a school's tier.

    Args:
        school_id: School to move.
        transition: ``"promote"``, ``"relegate"`` or an explicit tier
            (admin override).

    Returns:
        The committed change.

    Raises:
        NotFound: unknown school.
        InvalidTransition: already at the top/bottom rank, or an explicit
            tier outside the fixed order. Nothing is written.
    """
    with atomic():
        change = _move(_locked_school(school_id), transition)
    _log_change(change)
    return change


def _bulk_step(school_id: str, direction: Direction, expected_tier: Tier | None) -> TierChange | None:
    with atomic():
        school = _locked_school(school_id)
        # Another writer moved the school after it was selected for the batch
        if expected_tier is not None and school.tier is not expected_tier:
            return None
        change = _move(school, direction)
    _log_change(change)
    return change


def bulk_apply_transition(
    direction: Direction | str,
    tier_filter: Tier | str | None = None,
) -> BatchResult:
    """Apply ``direction`` to every school, isolating per-school failures.

    Schools not currently at ``tier_filter`` (when given) are skipped. Each
    school commits in its own transaction.

    Raises:
        InvalidTransition: ``direction`` is not promote/relegate or
            ``tier_filter`` is not a known tier. Raised before any write.
    """
    parsed_direction = parse_direction(direction)
    if parsed_direction is None:
        raise InvalidTransition(None, None, direction)
    parsed_filter = None
    if tier_filter is not None:
        parsed_filter = parse_tier(tier_filter)
        if parsed_filter is None:
            raise InvalidTransition(None, None, tier_filter)

    result = BatchResult(direction=parsed_direction, tier_filter=parsed_filter)
    rows = db.session.execute(
        select(School.id, School.name, School.tier).order_by(School.name)
    ).all()

    for school_id, name, tier in rows:
        if parsed_filter is not None and tier is not parsed_filter:
            result.skipped.append(BatchItem(school_id, name, tier.value, 'tier_filter'))
            continue

        try:
            change = _bulk_step(school_id, parsed_direction, parsed_filter)
        except LeagueError as e:
            current_app.logger.warning(f"Bulk {parsed_direction.value} failed for school {school_id}: {e}")
            result.failed.append(BatchItem(school_id, name, tier.value, type(e).__name__, e.context))
            continue
        except SQLAlchemyError as e:
            current_app.logger.error(f"Bulk {parsed_direction.value} failed for school {school_id}: {e}")
            result.failed.append(BatchItem(school_id, name, tier.value, 'StoreError', {'error': str(e)}))
            continue

        if change is None:
            result.skipped.append(BatchItem(school_id, name, tier.value, 'tier_changed'))
        else:
            result.processed.append(change)

    current_app.logger.info(
        f"Bulk {parsed_direction.value}: {len(result.processed)} processed, "
        f"{len(result.skipped)} skipped, {len(result.failed)} failed"
    )
    return result


__all__ = [
    "Direction",
    "TierChange",
    "BatchItem",
    "BatchResult",
    "parse_tier",
    "parse_direction",
    "next_tier",
    "apply_transition",
    "bulk_apply_transition",
]
