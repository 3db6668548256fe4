import logging

from django.db import transaction

from tgspain.apps.core.models import AuditLog, TeamMember
from tgspain.apps.workshops.models import Workshop, WorkshopPreference
from tgspain.libs.errors import PreferencesAlreadySubmittedError, PreferencesError

logger = logging.getLogger(__name__)


def team_preferences(team, event):
    return (WorkshopPreference.objects
            .filter(team=team, event=event)
            .select_related("workshop", "submitted_by__profile")
            .order_by("preference_order"))


def _ordered_workshops(event, workshop_ids):
    workshop_ids = [int(pk) for pk in workshop_ids]
    if len(set(workshop_ids)) != len(workshop_ids):
        raise PreferencesError("No puedes repetir un taller en tus preferencias")
    workshops = Workshop.objects.in_bulk(workshop_ids)
    if len(workshops) != len(workshop_ids) or any(
            workshop.event_id != event.pk for workshop in workshops.values()):
        raise PreferencesError("Algún taller no pertenece a este evento")
    return [workshops[pk] for pk in workshop_ids]


def _store(team, event, workshops, submitted_by):
    WorkshopPreference.objects.bulk_create([
        WorkshopPreference(team=team, event=event, workshop=workshop,
                           preference_order=order, submitted_by=submitted_by)
        for order, workshop in enumerate(workshops, start=1)
    ])


def submit_preferences(team, event, workshop_ids, user):
    """A mentor's ranked workshop list. Each team submits only once per event"""
    if not (event.workshop_preferences_open and event.is_published):
        raise PreferencesError("Este evento no acepta preferencias de talleres")
    if not TeamMember.objects.filter(team=team, user=user,
                                     member_type=TeamMember.MENTOR).exists():
        raise PreferencesError("Solo las mentoras del equipo pueden enviar preferencias")
    workshops = _ordered_workshops(event, workshop_ids)
    if not workshops:
        raise PreferencesError("Ordena al menos un taller")

    with transaction.atomic():
        if WorkshopPreference.objects.select_for_update().filter(
                team=team, event=event).exists():
            raise PreferencesAlreadySubmittedError()
        _store(team, event, workshops, user)
        AuditLog.record(user, "submit_workshop_preferences", team,
                        {"event": event.pk, "workshops": [w.pk for w in workshops]})
    logger.info("Team %s submitted %s workshop preferences for event %s",
                team.pk, len(workshops), event.pk)


def update_preferences(team, event, workshop_ids, admin=None):
    """Replace a team's preferences, keeping whoever submitted them originally"""
    workshops = _ordered_workshops(event, workshop_ids)
    with transaction.atomic():
        existing = WorkshopPreference.objects.filter(team=team, event=event)
        first = existing.order_by("submitted_at").first()
        submitted_by = first.submitted_by if first else admin
        existing.delete()
        _store(team, event, workshops, submitted_by)
        AuditLog.record(admin, "update_workshop_preferences", team,
                        {"event": event.pk, "workshops": [w.pk for w in workshops]})
