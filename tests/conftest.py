from types import SimpleNamespace

import pytest

from schoolleague import create_app
from schoolleague.config import TestConfig
from schoolleague.extensions import db
from schoolleague.models import Coach, Match, School, Team, TeamMember, Tier, User, UserRole


@pytest.fixture
def app():
    """Create and configure a test application instance."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def make_school(name: str, tier: Tier = Tier.BEGINNER) -> School:
    school = School(name=name, tier=tier)
    db.session.add(school)
    db.session.commit()
    return school


def make_team(school: School, name: str) -> Team:
    team = Team(school_id=school.id, name=name, tier=school.tier)
    db.session.add(team)
    db.session.commit()
    return team


def make_user(email: str, role: UserRole = UserRole.PLAYER, **fields) -> User:
    user = User(email=email, full_name=email.split('@')[0].title(), role=role, **fields)
    user.set_password('Passw0rd!')
    db.session.add(user)
    db.session.commit()
    return user


def make_coach(email: str, school: School) -> User:
    user = make_user(email, UserRole.COACH)
    db.session.add(Coach(user_id=user.id, school_id=school.id))
    db.session.commit()
    return user


def add_member(team: Team, player: User, captain: bool = False) -> None:
    db.session.add(TeamMember(team_id=team.id, player_id=player.id))
    if captain:
        team.captain_id = player.id
    db.session.commit()


@pytest.fixture
def league(app):
    """Two schools with teams, staff and players.

    North owns two teams and has a school admin, a coach and two students.
    South owns one team, its own school admin and coach.
    """
    north = make_school('North High', Tier.REGULAR)
    south = make_school('South High', Tier.AMATEUR)
    north_a = make_team(north, 'North A')
    north_b = make_team(north, 'North B')
    south_a = make_team(south, 'South A')

    admin = make_user('admin@league.test', UserRole.ADMIN)
    second_admin = make_user('admin2@league.test', UserRole.ADMIN)
    north_admin = make_user('north.admin@league.test', UserRole.SCHOOL_ADMIN, owned_school_id=north.id)
    south_admin = make_user('south.admin@league.test', UserRole.SCHOOL_ADMIN, owned_school_id=south.id)
    north_coach = make_coach('north.coach@league.test', north)
    south_coach = make_coach('south.coach@league.test', south)
    judge = make_user('judge@league.test', UserRole.JUDGE)
    sponsor = make_user('sponsor@league.test', UserRole.SPONSOR)
    north_player = make_user('ann@league.test', UserRole.PLAYER, student_school_id=north.id)
    north_player2 = make_user('bo@league.test', UserRole.PLAYER, student_school_id=north.id)
    south_player = make_user('cy@league.test', UserRole.PLAYER, student_school_id=south.id)

    add_member(north_a, north_player, captain=True)
    add_member(north_a, north_player2)
    add_member(south_a, south_player)

    derby = Match(home_team_id=north_a.id, away_team_id=south_a.id)
    friendly = Match(home_team_id=north_b.id, away_team_id=None)
    db.session.add_all([derby, friendly])
    db.session.commit()

    return SimpleNamespace(
        north=north.id,
        south=south.id,
        north_a=north_a.id,
        north_b=north_b.id,
        south_a=south_a.id,
        admin=admin.id,
        second_admin=second_admin.id,
        north_admin=north_admin.id,
        south_admin=south_admin.id,
        north_coach=north_coach.id,
        south_coach=south_coach.id,
        judge=judge.id,
        sponsor=sponsor.id,
        north_player=north_player.id,
        north_player2=north_player2.id,
        south_player=south_player.id,
        derby=derby.id,
        friendly=friendly.id,
    )
