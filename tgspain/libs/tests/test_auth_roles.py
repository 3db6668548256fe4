import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

from tgspain.apps.core.auth_roles import (
    can_validate_tickets, dashboard_path, has_any_role, is_admin, primary_role, user_roles
)
from tgspain.apps.core.models import UserRole
from tgspain.libs.tests.helpers import make_user


@pytest.mark.django_db
def test_primary_role_follows_priority():
    user = make_user(role=UserRole.PARTICIPANT)
    UserRole.objects.create(user=user, role=UserRole.MENTOR)
    UserRole.objects.create(user=user, role=UserRole.VOLUNTEER)

    assert sorted(user_roles(user)) == ["mentor", "participant", "volunteer"]
    assert primary_role(user) == UserRole.MENTOR
    assert has_any_role(user, UserRole.VOLUNTEER, UserRole.JUDGE)
    assert not is_admin(user)
    assert can_validate_tickets(user)


@pytest.mark.django_db
def test_superuser_counts_as_admin():
    user = get_user_model().objects.create_superuser(username="root", password="x",
                                                     email="root@example.com")
    assert user_roles(user) == [UserRole.ADMIN]
    assert primary_role(user) == UserRole.ADMIN
    assert can_validate_tickets(user)


@pytest.mark.django_db
def test_users_without_roles():
    assert user_roles(AnonymousUser()) == []
    assert primary_role(make_user(role=None)) is None


@pytest.mark.django_db
@pytest.mark.parametrize("role, path", [
    (UserRole.ADMIN, "/backoffice/"),
    (UserRole.CHAPTER_AMBASSADOR, "/backoffice/"),
    (UserRole.MENTOR, "/mentor/"),
    (UserRole.VOLUNTEER, "/validate/"),
    (UserRole.JUDGE, "/dashboard/"),
    (UserRole.PARTICIPANT, "/dashboard/"),
    (None, "/dashboard/"),
])
def test_dashboard_path(role, path):
    assert dashboard_path(role) == path
