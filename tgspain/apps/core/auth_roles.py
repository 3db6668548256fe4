from django.contrib.auth.decorators import user_passes_test
from django.urls import reverse

from tgspain.apps.core.models import UserRole

ROLE_PRIORITY = (
    UserRole.ADMIN,
    UserRole.CHAPTER_AMBASSADOR,
    UserRole.MENTOR,
    UserRole.JUDGE,
    UserRole.VOLUNTEER,
    UserRole.PARTICIPANT,
)

BACK_OFFICE_ROLES = (UserRole.ADMIN, UserRole.CHAPTER_AMBASSADOR)
TICKET_VALIDATOR_ROLES = (UserRole.VOLUNTEER, UserRole.ADMIN)


def user_roles(user):
    if not user or not user.is_authenticated:
        return []
    roles = list(user.roles.values_list("role", flat=True))
    if user.is_superuser and UserRole.ADMIN not in roles:
        roles.append(UserRole.ADMIN)
    return roles


def primary_role(user):
    """The highest-priority role a user holds, or None"""
    roles = user_roles(user)
    for role in ROLE_PRIORITY:
        if role in roles:
            return role
    return roles[0] if roles else None


def has_any_role(user, *roles):
    return any(role in roles for role in user_roles(user))


def is_admin(user):
    return has_any_role(user, UserRole.ADMIN)


def can_validate_tickets(user):
    return has_any_role(user, *TICKET_VALIDATOR_ROLES)


def dashboard_path(role):
    if role in BACK_OFFICE_ROLES:
        return reverse("admin_home")
    if role == UserRole.MENTOR:
        return reverse("mentor_dashboard")
    if role == UserRole.VOLUNTEER:
        return reverse("validate_tickets")
    return reverse("participant_dashboard")


def role_required(*roles, login_url="/403/"):
    """Like permission_required, but checks the user's platform roles"""
    return user_passes_test(lambda user: has_any_role(user, *roles),
                            login_url=login_url)


back_office_required = role_required(*BACK_OFFICE_ROLES)
admin_required = role_required(UserRole.ADMIN)
