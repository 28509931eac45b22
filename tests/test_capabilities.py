import pytest

from schoolleague.errors import NotFound
from schoolleague.models import UserRole
from schoolleague.services.capabilities import (
    CAPABILITY_MATRIX,
    NO_CAPABILITIES,
    ResourceClass,
    capabilities_for,
    capability_flags,
    permissions_for,
)


def test_every_role_has_an_entry():
    assert set(CAPABILITY_MATRIX) == set(UserRole)


@pytest.mark.parametrize('role', list(UserRole))
def test_lookup_is_deterministic(role):
    assert capabilities_for(role) == capabilities_for(role)
    assert capabilities_for(role.value) == capabilities_for(role)


@pytest.mark.parametrize('role', ['owner', 'ADMIN', '', None, 'superuser'])
def test_unknown_roles_fail_closed(role):
    caps = capabilities_for(role)
    assert caps is NO_CAPABILITIES
    assert caps.is_empty
    assert not caps.is_admin
    assert not any(caps.can_manage_all(r) or caps.can_manage_own(r) for r in ResourceClass)


def test_admin_manages_everything_globally():
    caps = capabilities_for(UserRole.ADMIN)
    assert caps.is_admin
    assert all(caps.can_manage_all(r) for r in ResourceClass)


def test_school_admin_is_scoped_to_own_school():
    caps = capabilities_for('school_admin')
    assert not caps.is_admin
    assert not any(caps.can_manage_all(r) for r in ResourceClass)
    assert all(caps.can_manage_own(r) for r in ResourceClass)


def test_coach_cannot_manage_schools_or_coaches():
    caps = capabilities_for(UserRole.COACH)
    assert caps.can_manage_own(ResourceClass.TEAM)
    assert caps.can_manage_own(ResourceClass.PLAYER)
    assert caps.can_manage_own(ResourceClass.MATCH)
    assert not caps.can_manage_own(ResourceClass.SCHOOL)
    assert not caps.can_manage_own(ResourceClass.COACH)


def test_judge_manages_all_matches_only():
    caps = capabilities_for(UserRole.JUDGE)
    assert caps.manage_all == frozenset({ResourceClass.MATCH})
    assert not caps.manage_own_scope


@pytest.mark.parametrize('role', [UserRole.PLAYER, UserRole.SPONSOR])
def test_players_and_sponsors_have_no_capabilities(role):
    assert capabilities_for(role).is_empty


def test_capability_flags_cover_every_resource():
    flags = capability_flags('coach')
    assert set(flags) == {r.value for r in ResourceClass}
    assert flags['team'] == {'manage_all': False, 'manage_own': True}
    assert flags['school'] == {'manage_all': False, 'manage_own': False}


def test_permissions_for_school_admin(league):
    summary = permissions_for(league.north_admin)
    assert summary['role'] == 'school_admin'
    assert summary['school_id'] == league.north
    assert summary['is_admin'] is False
    assert summary['can']['coach']['manage_own'] is True


def test_permissions_for_coach_uses_coach_link(league):
    summary = permissions_for(league.north_coach)
    assert summary['school_id'] == league.north


def test_permissions_for_unknown_user(app):
    with pytest.raises(NotFound):
        permissions_for('missing')


@pytest.mark.parametrize('value, expected', [
    ('coach', UserRole.COACH),
    (UserRole.JUDGE, UserRole.JUDGE),
    ('Coach', None),
    ('owner', None),
    (None, None),
])
def test_role_parsing_is_exact(value, expected):
    assert UserRole.parse(value) is expected
