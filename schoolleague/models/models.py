from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from schoolleague.extensions import db, bcrypt

JSONType = JSON().with_variant(JSONB, 'postgresql')


class TimestampedBase(db.Model):
    """Abstract base providing id/created/updated columns."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UserRole(Enum):
    ADMIN = "admin"
    SCHOOL_ADMIN = "school_admin"
    COACH = "coach"
    JUDGE = "judge"
    PLAYER = "player"
    SPONSOR = "sponsor"

    @classmethod
    def parse(cls, value: "UserRole | str | None") -> "UserRole | None":
        """Return the matching role, or None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


class Tier(Enum):
    BEGINNER = "beginner"
    AMATEUR = "amateur"
    REGULAR = "regular"
    PROFESSIONAL = "professional"
    LEGENDARY = "legendary"
    NATIONAL = "national"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


# Lowest to highest competitive rank.
TIER_ORDER: tuple[Tier, ...] = (
    Tier.BEGINNER,
    Tier.AMATEUR,
    Tier.REGULAR,
    Tier.PROFESSIONAL,
    Tier.LEGENDARY,
    Tier.NATIONAL,
)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class School(TimestampedBase):
    __tablename__ = "school"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    location: Mapped[str | None] = mapped_column(String(255))
    motto: Mapped[str | None] = mapped_column(Text)
    tier: Mapped[Tier] = mapped_column(
        SqlEnum(Tier, name="school_tier", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=Tier.BEGINNER,
    )

    teams: Mapped[list["Team"]] = relationship(
        back_populates="school",
        cascade="all, delete-orphan",
    )
    coaches: Mapped[list["Coach"]] = relationship(back_populates="school")


class User(TimestampedBase):
    __tablename__ = "user"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    role: Mapped[UserRole] = mapped_column(
        SqlEnum(UserRole, name="user_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=UserRole.PLAYER,
    )
    # Only meaningful for school admins
    owned_school_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("school.id", ondelete="SET NULL"),
        index=True,
    )
    # Only meaningful for players
    student_school_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("school.id", ondelete="SET NULL"),
        index=True,
    )

    owned_school: Mapped[School | None] = relationship(foreign_keys=[owned_school_id])
    student_school: Mapped[School | None] = relationship(foreign_keys=[student_school_id])
    coach_link: Mapped["Coach | None"] = relationship(back_populates="user", uselist=False)
    memberships: Mapped[list["TeamMember"]] = relationship(back_populates="player")
    audit_logs: Mapped[list["AuditLog"]] = relationship(back_populates="user")

    def set_password(self, password: str) -> None:
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False


class Coach(TimestampedBase):
    """Links a coach user to the school they coach."""

    __tablename__ = "coach"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    school_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("school.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user: Mapped[User] = relationship(back_populates="coach_link")
    school: Mapped[School] = relationship(back_populates="coaches")


class Team(TimestampedBase):
    __tablename__ = "team"

    school_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("school.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Mirrors School.tier; written only by the tier service
    tier: Mapped[Tier] = mapped_column(
        SqlEnum(Tier, name="team_tier", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=Tier.BEGINNER,
    )
    captain_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        index=True,
    )

    school: Mapped[School] = relationship(back_populates="teams")
    captain: Mapped[User | None] = relationship(foreign_keys=[captain_id])
    members: Mapped[list["TeamMember"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
    )
    home_matches: Mapped[list["Match"]] = relationship(
        back_populates="home_team",
        foreign_keys="Match.home_team_id",
    )
    away_matches: Mapped[list["Match"]] = relationship(
        back_populates="away_team",
        foreign_keys="Match.away_team_id",
    )


class TeamMember(TimestampedBase):
    __tablename__ = "team_member"
    __table_args__ = (
        UniqueConstraint("team_id", "player_id", name="uq_team_member_team_player"),
    )

    team_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    player_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    team: Mapped[Team] = relationship(back_populates="members")
    player: Mapped[User] = relationship(back_populates="memberships")


class Match(TimestampedBase):
    """A fixture between two teams, owned by both teams' schools."""

    __tablename__ = "match"
    __table_args__ = (
        Index("ix_match_teams", "home_team_id", "away_team_id"),
    )

    home_team_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="SET NULL"),
    )
    away_team_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="SET NULL"),
    )

    home_team: Mapped[Team | None] = relationship(
        back_populates="home_matches",
        foreign_keys=[home_team_id],
    )
    away_team: Mapped[Team | None] = relationship(
        back_populates="away_matches",
        foreign_keys=[away_team_id],
    )


class AuditLog(TimestampedBase):
    __tablename__ = "audit_log"

    user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        index=True,
    )
    action: Mapped[str] = mapped_column(String(128), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(128), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(36))
    meta: Mapped[dict | None] = mapped_column(JSONType, default=dict)

    user: Mapped[User | None] = relationship(back_populates="audit_logs")
