import math
from dataclasses import dataclass, field
from typing import List

from tgspain.apps.core.models import Team, TeamMember
from tgspain.apps.events.models import EventRegistration
from tgspain.apps.workshops.models import WorkshopPreference
from tgspain.libs.workshop_logic import member_name


@dataclass
class TeamMemberStatus:
    user_id: int
    name: str
    member_type: str
    is_registered: bool


@dataclass
class TeamEventStats:
    team_id: int
    team_name: str
    total_participants: int = 0
    registered_participants: int = 0
    total_mentors: int = 0
    registered_mentors: int = 0
    members: List[TeamMemberStatus] = field(default_factory=list)

    @property
    def total_members(self):
        return self.total_participants + self.total_mentors

    @property
    def registered_members(self):
        return self.registered_participants + self.registered_mentors

    @property
    def completion_percentage(self):
        if not self.total_members:
            return 0
        # half percentages round up
        return math.floor(self.registered_members / self.total_members * 100 + 0.5)

    @property
    def is_complete(self):
        return self.total_members > 0 and self.registered_members == self.total_members

    def as_dict(self):
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "total_participants": self.total_participants,
            "registered_participants": self.registered_participants,
            "total_mentors": self.total_mentors,
            "registered_mentors": self.registered_mentors,
            "completion_percentage": self.completion_percentage,
            "members": [
                {"user_id": member.user_id, "name": member.name,
                 "member_type": member.member_type,
                 "is_registered": member.is_registered}
                for member in self.members
            ],
        }


def _live_registrations(event):
    return (EventRegistration.objects
            .filter(event=event, is_companion=False)
            .exclude(registration_status=EventRegistration.CANCELLED))


def event_team_stats(event):
    """Per-team registration progress; incomplete teams first, then by name"""
    registered = {}
    for team_id, user_id in (_live_registrations(event)
                             .filter(team__isnull=False)
                             .values_list("team_id", "user_id")):
        registered.setdefault(team_id, set()).add(user_id)
    if not registered:
        return []

    stats = {team.pk: TeamEventStats(team_id=team.pk, team_name=team.name)
             for team in Team.objects.filter(pk__in=list(registered))}
    members = (TeamMember.objects
               .filter(team_id__in=list(stats))
               .select_related("user__profile")
               .order_by("member_type", "joined_at"))
    for member in members:
        team_stats = stats[member.team_id]
        is_registered = member.user_id in registered[member.team_id]
        if member.member_type == TeamMember.MENTOR:
            team_stats.total_mentors += 1
            team_stats.registered_mentors += is_registered
        else:
            team_stats.total_participants += 1
            team_stats.registered_participants += is_registered
        team_stats.members.append(TeamMemberStatus(
            user_id=member.user_id,
            name=member_name(member.user),
            member_type=member.member_type,
            is_registered=is_registered,
        ))

    return sorted(stats.values(),
                  key=lambda team_stats: (team_stats.completion_percentage == 100,
                                          team_stats.team_name.lower()))


def all_teams_preferences(event):
    """Every registered team with its submitted preferences, for the admin overview"""
    registrations = list(_live_registrations(event).values_list("team_id", "user_id"))
    team_ids = {team_id for team_id, _ in registrations if team_id}
    users_without_team = [user_id for team_id, user_id in registrations
                          if not team_id and user_id]
    if users_without_team:
        team_ids.update(TeamMember.objects
                        .filter(user_id__in=users_without_team)
                        .values_list("team_id", flat=True))
    if not team_ids:
        return []

    member_counts = {}
    for team_id in TeamMember.objects.filter(team_id__in=team_ids).values_list(
            "team_id", flat=True):
        member_counts[team_id] = member_counts.get(team_id, 0) + 1

    preferences = {}
    for preference in (WorkshopPreference.objects
                       .filter(event=event, team_id__in=team_ids)
                       .select_related("workshop", "submitted_by__profile")
                       .order_by("preference_order")):
        entry = preferences.setdefault(preference.team_id, {
            "preferences": [],
            "submitted_by": (member_name(preference.submitted_by)
                             if preference.submitted_by else "Desconocido"),
            "submitted_at": preference.submitted_at,
        })
        entry["preferences"].append({
            "order": preference.preference_order,
            "workshop_id": preference.workshop_id,
            "workshop_name": preference.workshop.name,
        })

    return [
        {
            "team_id": team.pk,
            "team_name": team.name,
            "category": team.category,
            "participant_count": member_counts.get(team.pk) or 1,
            "has_preferences": team.pk in preferences,
            "preferences_data": preferences.get(team.pk),
        }
        for team in Team.objects.filter(pk__in=team_ids).order_by("name")
    ]
