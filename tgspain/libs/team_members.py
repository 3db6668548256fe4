"""
Rules for linking users to teams.

A member is accepted when the user is verified, is not an admin, belongs
to the same hub as the team (when both have one) and, for participants,
the team still has room. Mentors are not counted against the limit.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from django.db.models import Prefetch

from tgspain.apps.core.models import PlatformSettings, Profile, Team, TeamMember, UserRole

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTICIPANTS = 5


@dataclass
class MemberValidation:
    valid: bool
    reason: Optional[str] = None
    member_type: Optional[str] = None
    skipped: bool = False


def max_participants():
    return int(PlatformSettings.get("max_team_participants",
                                    DEFAULT_MAX_PARTICIPANTS))


class MemberValidationCache:
    """Profiles, roles and participant counts loaded once for a batch"""

    def __init__(self):
        self.profiles = {}
        self.roles = defaultdict(set)
        self.participant_counts = {}

    def prefetch_users(self, user_ids):
        missing = [pk for pk in user_ids if pk not in self.profiles]
        if not missing:
            return
        for profile in Profile.objects.filter(user_id__in=missing):
            self.profiles[profile.user_id] = profile
        for user_id, role in UserRole.objects.filter(
                user_id__in=missing).values_list("user_id", "role"):
            self.roles[user_id].add(role)

    def prefetch_team(self, team):
        if team.pk not in self.participant_counts:
            self.participant_counts[team.pk] = team.members.filter(
                member_type=TeamMember.PARTICIPANT).count()

    def profile(self, user):
        self.prefetch_users([user.pk])
        return self.profiles.get(user.pk)

    def user_roles(self, user):
        self.prefetch_users([user.pk])
        return self.roles[user.pk]

    def participant_count(self, team):
        self.prefetch_team(team)
        return self.participant_counts[team.pk]

    def add_participant(self, team):
        self.prefetch_team(team)
        self.participant_counts[team.pk] += 1


def validate_member_for_team(user, team, cache=None):
    cache = cache or MemberValidationCache()
    profile = cache.profile(user)

    if profile is None or not profile.is_verified:
        return MemberValidation(
            valid=False,
            reason="Solo se pueden vincular usuarios verificados",
            skipped=True,
        )

    roles = cache.user_roles(user)
    if UserRole.ADMIN in roles or user.is_superuser:
        return MemberValidation(
            valid=False,
            reason="Los administradores no pueden ser miembros de un equipo",
        )

    if team.hub_id and profile.hub_id and team.hub_id != profile.hub_id:
        return MemberValidation(
            valid=False,
            reason="El usuario pertenece a un hub distinto al del equipo",
        )

    member_type = (TeamMember.MENTOR if UserRole.MENTOR in roles
                   else TeamMember.PARTICIPANT)

    if member_type == TeamMember.PARTICIPANT:
        limit = max_participants()
        if cache.participant_count(team) >= limit:
            return MemberValidation(
                valid=False,
                reason=f"El equipo ya tiene el máximo de {limit} estudiantes",
                member_type=member_type,
            )

    return MemberValidation(valid=True, member_type=member_type)


def add_members(team, users):
    """
    Link users to a team, returning (added members, [(user, reason)] skipped)
    """
    cache = MemberValidationCache()
    cache.prefetch_users([user.pk for user in users])
    cache.prefetch_team(team)
    existing = set(team.members.values_list("user_id", flat=True))

    added, skipped = [], []
    for user in users:
        if user.pk in existing:
            skipped.append((user, "El usuario ya es miembro del equipo"))
            continue
        result = validate_member_for_team(user, team, cache)
        if not result.valid:
            logger.info("Not linking user %s to team %s: %s",
                        user.pk, team.pk, result.reason)
            skipped.append((user, result.reason))
            continue
        added.append(TeamMember.objects.create(team=team, user=user,
                                               member_type=result.member_type))
        existing.add(user.pk)
        if result.member_type == TeamMember.PARTICIPANT:
            cache.add_participant(team)
    return added, skipped


def mentor_teams(user):
    memberships = TeamMember.objects.select_related("user__profile")
    return (Team.objects
            .filter(members__user=user, members__member_type=TeamMember.MENTOR)
            .select_related("hub")
            .prefetch_related(Prefetch("members", queryset=memberships))
            .distinct()
            .order_by("name"))
