from dataclasses import dataclass
from typing import Optional

from tgspain.apps.core.models import TeamMember
from tgspain.apps.events.models import Event, EventRegistration
from tgspain.apps.workshops.models import WorkshopPreference
from tgspain.libs.team_members import mentor_teams
from tgspain.libs.workshop_logic import member_name


@dataclass
class EligibleTeam:
    team_id: int
    team_name: str
    event_id: int
    event_name: str
    has_submitted_preferences: bool
    submitted_by: Optional[str] = None

    def as_dict(self):
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "event_id": self.event_id,
            "event_name": self.event_name,
            "has_submitted_preferences": self.has_submitted_preferences,
            "submitted_by": self.submitted_by,
        }


def open_preference_events():
    return Event.objects.filter(workshop_preferences_open=True,
                                status=Event.PUBLISHED).order_by("date")


def eligible_teams_for_mentor(user):
    """
    (team, event) pairs the mentor can submit workshop preferences for: the
    event takes preferences and at least one participant of the team holds
    a live registration for it
    """
    teams = {team.pk: team for team in mentor_teams(user)}
    events = {event.pk: event for event in open_preference_events()}
    if not teams or not events:
        return []

    participants = {}
    for team_id, user_id in TeamMember.objects.filter(
            team_id__in=list(teams),
            member_type=TeamMember.PARTICIPANT).values_list("team_id", "user_id"):
        participants.setdefault(user_id, set()).add(team_id)
    if not participants:
        return []

    registered_pairs = set()
    for event_id, user_id in (EventRegistration.objects
                              .filter(event_id__in=list(events),
                                      user_id__in=list(participants))
                              .exclude(registration_status=EventRegistration.CANCELLED)
                              .values_list("event_id", "user_id")):
        for team_id in participants[user_id]:
            registered_pairs.add((team_id, event_id))

    submitters = {}
    for preference in (WorkshopPreference.objects
                       .filter(team_id__in=list(teams), event_id__in=list(events))
                       .select_related("submitted_by__profile")
                       .order_by("submitted_at")):
        key = (preference.team_id, preference.event_id)
        if key not in submitters:
            submitter = preference.submitted_by
            submitters[key] = member_name(submitter) if submitter else "Otro mentor"

    eligible = []
    for team_id, event_id in sorted(registered_pairs,
                                    key=lambda pair: (events[pair[1]].date,
                                                      teams[pair[0]].name)):
        key = (team_id, event_id)
        eligible.append(EligibleTeam(
            team_id=team_id,
            team_name=teams[team_id].name,
            event_id=event_id,
            event_name=events[event_id].name,
            has_submitted_preferences=key in submitters,
            submitted_by=submitters.get(key),
        ))
    return eligible
