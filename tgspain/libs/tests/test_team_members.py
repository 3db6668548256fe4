import pytest

from tgspain.apps.core.models import PlatformSettings, TeamMember, UserRole
from tgspain.libs.team_members import (
    MemberValidationCache, add_members, mentor_teams, validate_member_for_team
)
from tgspain.libs.tests.helpers import make_hub, make_team, make_user


@pytest.mark.django_db
def test_participant_is_accepted():
    hub = make_hub()
    result = validate_member_for_team(make_user(hub=hub), make_team(hub=hub))
    assert result.valid
    assert result.member_type == TeamMember.PARTICIPANT


@pytest.mark.django_db
def test_mentor_role_gives_mentor_membership():
    result = validate_member_for_team(make_user(role=UserRole.MENTOR), make_team())
    assert result.valid
    assert result.member_type == TeamMember.MENTOR


@pytest.mark.django_db
def test_unverified_users_are_skipped():
    result = validate_member_for_team(make_user(verified=False), make_team())
    assert not result.valid
    assert result.skipped
    assert result.reason == "Solo se pueden vincular usuarios verificados"


@pytest.mark.django_db
def test_admins_cannot_join_teams():
    result = validate_member_for_team(make_user(role=UserRole.ADMIN), make_team())
    assert not result.valid
    assert not result.skipped


@pytest.mark.django_db
def test_hub_must_match():
    team = make_team(hub=make_hub())
    result = validate_member_for_team(make_user(hub=make_hub()), team)
    assert not result.valid
    assert "hub distinto" in result.reason

    assert validate_member_for_team(make_user(hub=None), team).valid


@pytest.mark.django_db
def test_participant_limit_comes_from_platform_settings():
    PlatformSettings.set("max_team_participants", 2)
    team = make_team(participants=[make_user(), make_user()])

    result = validate_member_for_team(make_user(), team)
    assert not result.valid
    assert result.reason == "El equipo ya tiene el máximo de 2 estudiantes"

    # Mentors do not count against the limit
    assert validate_member_for_team(make_user(role=UserRole.MENTOR), team).valid


@pytest.mark.django_db
def test_add_members_tracks_the_limit_within_a_batch():
    PlatformSettings.set("max_team_participants", 2)
    team = make_team()
    first, second, third = make_user(), make_user(), make_user()
    mentor = make_user(role=UserRole.MENTOR)

    added, skipped = add_members(team, [first, second, third, mentor, first])

    assert [member.user for member in added] == [first, second, mentor]
    assert [(user, reason) for user, reason in skipped] == [
        (third, "El equipo ya tiene el máximo de 2 estudiantes"),
        (first, "El usuario ya es miembro del equipo"),
    ]
    assert team.members.count() == 3


@pytest.mark.django_db
def test_cache_loads_each_user_once(django_assert_num_queries):
    user = make_user()
    cache = MemberValidationCache()
    cache.prefetch_users([user.pk])
    with django_assert_num_queries(0):
        cache.profile(user)
        cache.user_roles(user)


@pytest.mark.django_db
def test_mentor_teams():
    mentor = make_user(role=UserRole.MENTOR)
    make_team(name="Zeta", mentors=[mentor])
    make_team(name="Alfa", mentors=[mentor], participants=[make_user()])
    make_team(name="Otro")

    assert [team.name for team in mentor_teams(mentor)] == ["Alfa", "Zeta"]
