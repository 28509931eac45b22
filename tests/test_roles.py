import pytest
from sqlalchemy import select

from schoolleague.errors import Forbidden, InvalidOperation, NotFound
from schoolleague.extensions import db
from schoolleague.models import Coach, Team, TeamMember, User, UserRole
from schoolleague.services.authorization import can_manage
from schoolleague.services.roles import (
    change_role,
    change_user_school,
    create_user,
    delete_user,
    remove_from_role,
)


def _user(user_id):
    return db.session.get(User, user_id)


def _coach_school(user_id):
    return db.session.execute(
        select(Coach.school_id).where(Coach.user_id == user_id)
    ).scalar_one_or_none()


class TestChangeRole:

    def test_requires_admin(self, league):
        with pytest.raises(Forbidden):
            change_role(league.north_admin, league.north_player, 'coach', league.north)
        assert _user(league.north_player).role is UserRole.PLAYER

    def test_admin_cannot_demote_self(self, league):
        with pytest.raises(InvalidOperation) as excinfo:
            change_role(league.admin, league.admin, 'player')
        assert excinfo.value.reason == 'self_demotion'
        assert _user(league.admin).role is UserRole.ADMIN

    def test_admin_may_reassert_own_admin_role(self, league):
        change = change_role(league.admin, league.admin, UserRole.ADMIN)
        assert change.new_role is UserRole.ADMIN

    def test_admin_can_demote_another_admin(self, league):
        change_role(league.admin, league.second_admin, 'judge')
        assert _user(league.second_admin).role is UserRole.JUDGE

    def test_promoting_player_to_coach_creates_link(self, league):
        change = change_role(league.admin, league.north_player2, 'coach', league.north)

        assert change.old_role is UserRole.PLAYER
        assert change.new_role is UserRole.COACH
        assert change.school_id == league.north
        assert _coach_school(league.north_player2) == league.north
        assert can_manage(league.north_player2, 'team', league.north_b)

    def test_coach_to_coach_retargets_link(self, league):
        change_role(league.admin, league.north_coach, 'coach', league.south)

        links = db.session.execute(
            select(Coach).where(Coach.user_id == league.north_coach)
        ).scalars().all()
        assert len(links) == 1
        assert _coach_school(league.north_coach) == league.south
        assert can_manage(league.north_coach, 'team', league.south_a)
        assert not can_manage(league.north_coach, 'team', league.north_a)

    def test_leaving_coach_role_removes_link(self, league):
        change_role(league.admin, league.north_coach, 'judge')

        assert _coach_school(league.north_coach) is None
        assert _user(league.north_coach).role is UserRole.JUDGE
        assert not can_manage(league.north_coach, 'team', league.north_a)

    def test_school_admin_scope_is_set_and_cleared(self, league):
        change_role(league.admin, league.judge, 'school_admin', league.south)
        assert _user(league.judge).owned_school_id == league.south
        assert can_manage(league.judge, 'school', league.south)

        change_role(league.admin, league.judge, 'sponsor')
        assert _user(league.judge).owned_school_id is None
        assert not can_manage(league.judge, 'school', league.south)

    @pytest.mark.parametrize('role', ['coach', 'school_admin'])
    def test_scoped_roles_require_school(self, league, role):
        with pytest.raises(InvalidOperation) as excinfo:
            change_role(league.admin, league.north_player, role)
        assert excinfo.value.reason == 'scope_school_required'

    def test_unknown_school_writes_nothing(self, league):
        with pytest.raises(NotFound):
            change_role(league.admin, league.north_player, 'coach', 'no-such-school')

        assert _user(league.north_player).role is UserRole.PLAYER
        assert _coach_school(league.north_player) is None

    def test_unknown_target(self, league):
        with pytest.raises(NotFound):
            change_role(league.admin, 'ghost', 'judge')

    def test_unknown_role(self, league):
        with pytest.raises(InvalidOperation) as excinfo:
            change_role(league.admin, league.north_player, 'captain')
        assert excinfo.value.reason == 'unknown_role'


class TestRemoveFromRole:

    def test_coach_becomes_player_without_link(self, league):
        change = remove_from_role(league.admin, league.south_coach)

        assert change.old_role is UserRole.COACH
        assert change.new_role is UserRole.PLAYER
        assert _coach_school(league.south_coach) is None

    def test_school_admin_loses_scope(self, league):
        remove_from_role(league.admin, league.north_admin)

        user = _user(league.north_admin)
        assert user.role is UserRole.PLAYER
        assert user.owned_school_id is None

    def test_self_target_rejected(self, league):
        with pytest.raises(InvalidOperation) as excinfo:
            remove_from_role(league.admin, league.admin)
        assert excinfo.value.reason == 'self_target'

    def test_non_admin_forbidden(self, league):
        with pytest.raises(Forbidden):
            remove_from_role(league.north_coach, league.north_player)


class TestDeleteUser:

    def test_deleting_captain_leaves_team_without_captain(self, league):
        change = delete_user(league.admin, league.north_player)

        assert change.deleted
        assert change.captaincies_cleared == (league.north_a,)
        assert _user(league.north_player) is None
        team = db.session.get(Team, league.north_a)
        assert team is not None
        assert team.captain_id is None
        members = db.session.execute(
            select(TeamMember.player_id).where(TeamMember.team_id == league.north_a)
        ).scalars().all()
        assert members == [league.north_player2]

    def test_deleting_coach_removes_link(self, league):
        delete_user(league.admin, league.south_coach)

        assert _user(league.south_coach) is None
        assert _coach_school(league.south_coach) is None
        assert db.session.get(Team, league.south_a) is not None

    def test_self_delete_rejected(self, league):
        with pytest.raises(InvalidOperation):
            delete_user(league.admin, league.admin)
        assert _user(league.admin) is not None

    def test_non_admin_forbidden(self, league):
        with pytest.raises(Forbidden):
            delete_user(league.north_admin, league.north_player)
        assert _user(league.north_player) is not None

    def test_unknown_target(self, league):
        with pytest.raises(NotFound):
            delete_user(league.admin, 'ghost')


class TestCreateUser:

    def test_create_coach_links_school(self, league):
        user = create_user(league.admin, 'New.Coach@League.test', 'secret-pass', 'New Coach', 'coach', league.south)

        assert user.email == 'new.coach@league.test'
        assert user.check_password('secret-pass')
        assert _coach_school(user.id) == league.south

    def test_create_player_enrolls_at_school(self, league):
        user = create_user(league.admin, 'dee@league.test', 'secret-pass', 'Dee', school_id=league.north)
        assert user.role is UserRole.PLAYER
        assert user.student_school_id == league.north

    def test_duplicate_email(self, league):
        with pytest.raises(InvalidOperation) as excinfo:
            create_user(league.admin, 'ANN@league.test', 'secret-pass', 'Ann Again')
        assert excinfo.value.reason == 'email_taken'

    def test_school_admin_requires_school(self, league):
        with pytest.raises(InvalidOperation):
            create_user(league.admin, 'boss@league.test', 'secret-pass', 'Boss', 'school_admin')

    def test_missing_fields(self, league):
        with pytest.raises(InvalidOperation) as excinfo:
            create_user(league.admin, '', 'secret-pass', 'Nobody')
        assert excinfo.value.reason == 'missing_fields'

    def test_non_admin_forbidden(self, league):
        with pytest.raises(Forbidden):
            create_user(league.north_admin, 'x@league.test', 'secret-pass', 'X')


class TestChangeUserSchool:

    def test_move_player(self, league):
        change_user_school(league.admin, league.north_player2, league.south)
        assert _user(league.north_player2).student_school_id == league.south

    def test_move_coach(self, league):
        change_user_school(league.admin, league.north_coach, league.south)
        assert _coach_school(league.north_coach) == league.south

    def test_move_school_admin(self, league):
        change_user_school(league.admin, league.north_admin, league.south)
        assert _user(league.north_admin).owned_school_id == league.south

    def test_role_without_school(self, league):
        with pytest.raises(InvalidOperation) as excinfo:
            change_user_school(league.admin, league.judge, league.south)
        assert excinfo.value.reason == 'role_has_no_school'
