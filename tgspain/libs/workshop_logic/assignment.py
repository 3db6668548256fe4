"""
Workshop assignment for an event.

Every registered team gets two workshops, A and B, in different time
slots. Teams are served first come first served (by their first
registration) one preference level at a time, so every team gets a shot
at its first choice before anyone is placed on a second choice. Room in a
workshop is counted in participants, not teams.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional

from django.db import transaction

from tgspain.apps.events.models import EventRegistration
from tgspain.apps.workshops.models import (
    Workshop, WorkshopAssignment, WorkshopPreference, WorkshopTimeSlot
)
from tgspain.libs.errors import AssignmentError

logger = logging.getLogger(__name__)


@dataclass
class Placement:
    workshop_id: int
    workshop_name: str
    slot_number: int


@dataclass
class TeamAssignment:
    team_id: int
    team_name: str
    participant_count: int
    preferences: dict = field(default_factory=dict)
    workshop_a: Optional[Placement] = None
    workshop_b: Optional[Placement] = None
    preference_matched_a: Optional[int] = None
    preference_matched_b: Optional[int] = None
    errors: List[str] = field(default_factory=list)

    @property
    def fully_assigned(self):
        return self.workshop_a is not None and self.workshop_b is not None

    def as_dict(self):
        def placement(value):
            if value is None:
                return None
            return {"workshop_id": value.workshop_id,
                    "workshop_name": value.workshop_name,
                    "slot_number": value.slot_number}

        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "participant_count": self.participant_count,
            "workshop_a": placement(self.workshop_a),
            "workshop_b": placement(self.workshop_b),
            "preference_matched_a": self.preference_matched_a,
            "preference_matched_b": self.preference_matched_b,
            "errors": self.errors,
        }


def registered_teams(event):
    """Teams with a live registration, in order of their first registration"""
    teams = OrderedDict()
    registrations = (EventRegistration.objects
                     .filter(event=event, team__isnull=False, is_companion=False)
                     .exclude(registration_status=EventRegistration.CANCELLED)
                     .select_related("team")
                     .order_by("created_at", "pk"))
    for registration in registrations:
        entry = teams.get(registration.team_id)
        if entry is None:
            teams[registration.team_id] = TeamAssignment(
                team_id=registration.team_id,
                team_name=registration.team.name,
                participant_count=1,
            )
        else:
            entry.participant_count += 1

    for preference in WorkshopPreference.objects.filter(
            event=event, team_id__in=list(teams)).order_by("preference_order"):
        teams[preference.team_id].preferences[preference.preference_order] = \
            preference.workshop_id
    return list(teams.values())


def _place(team, preference_level, workshops, slots, occupancy, avoid=None):
    workshop_id = team.preferences.get(preference_level)
    workshop = workshops.get(workshop_id)
    if workshop is None:
        return None
    if avoid is not None and workshop_id == avoid.workshop_id:
        return None
    for slot in slots:
        if avoid is not None and slot.slot_number == avoid.slot_number:
            continue
        taken = occupancy[workshop_id][slot.slot_number]
        if taken + team.participant_count <= workshop.max_capacity:
            occupancy[workshop_id][slot.slot_number] = taken + team.participant_count
            return Placement(workshop_id, workshop.name, slot.slot_number)
    return None


def compute_assignments(teams, workshops, slots):
    workshops = {workshop.pk: workshop for workshop in workshops}
    slots = sorted(slots, key=lambda slot: slot.slot_number)
    occupancy = {workshop_id: {slot.slot_number: 0 for slot in slots}
                 for workshop_id in workshops}
    levels = range(1, len(workshops) + 1)

    for level in levels:
        for team in teams:
            if team.workshop_a is None:
                team.workshop_a = _place(team, level, workshops, slots, occupancy)
                if team.workshop_a is not None:
                    team.preference_matched_a = level

    for level in levels:
        for team in teams:
            if team.workshop_b is None:
                team.workshop_b = _place(team, level, workshops, slots, occupancy,
                                         avoid=team.workshop_a)
                if team.workshop_b is not None:
                    team.preference_matched_b = level

    for team in teams:
        if team.workshop_a is None:
            team.errors.append("No se pudo asignar Taller A")
        if team.workshop_b is None:
            team.errors.append("No se pudo asignar Taller B")
        if team.fully_assigned:
            if team.workshop_a.slot_number == team.workshop_b.slot_number:
                team.errors.append("Conflicto: mismo turno para A y B")
            if team.workshop_a.workshop_id == team.workshop_b.workshop_id:
                team.errors.append("Conflicto: mismo taller para A y B")
    return teams


def assignment_stats(results):
    preference_counts = {}
    for result in results:
        for matched in (result.preference_matched_a, result.preference_matched_b):
            if matched:
                preference_counts[matched] = preference_counts.get(matched, 0) + 1
    return {
        "total_teams": len(results),
        "fully_assigned": sum(1 for r in results if r.fully_assigned),
        "partially_assigned": sum(1 for r in results
                                  if (r.workshop_a is None) != (r.workshop_b is None)),
        "unassigned": sum(1 for r in results
                          if r.workshop_a is None and r.workshop_b is None),
        "preference_stats": [{"preference": level, "count": count}
                             for level, count in sorted(preference_counts.items())],
    }


def run_assignment(event, dry_run=False):
    workshops = list(Workshop.objects.filter(event=event))
    slots = list(WorkshopTimeSlot.objects.filter(event=event).order_by("slot_number"))
    if not workshops or not slots:
        raise AssignmentError("Faltan talleres o turnos configurados")

    results = compute_assignments(registered_teams(event), workshops, slots)
    stats = assignment_stats(results)

    if not dry_run:
        slots_by_number = {slot.slot_number: slot for slot in slots}
        new_assignments = []
        for result in results:
            for slot_label, placement, matched in (
                    (WorkshopAssignment.SLOT_A, result.workshop_a, result.preference_matched_a),
                    (WorkshopAssignment.SLOT_B, result.workshop_b, result.preference_matched_b)):
                if placement is None:
                    continue
                new_assignments.append(WorkshopAssignment(
                    team_id=result.team_id,
                    event=event,
                    workshop_id=placement.workshop_id,
                    time_slot=slots_by_number[placement.slot_number],
                    assignment_slot=slot_label,
                    preference_matched=matched,
                    assignment_type=WorkshopAssignment.ALGORITHM,
                ))
        with transaction.atomic():
            WorkshopAssignment.objects.filter(event=event).delete()
            WorkshopAssignment.objects.bulk_create(new_assignments)
        logger.info("Stored %s workshop assignments for event %s",
                    len(new_assignments), event.pk)

    return results, stats


def manual_assign(event, team, workshop, time_slot, assignment_slot, user):
    if workshop.event_id != event.pk or time_slot.event_id != event.pk:
        raise AssignmentError("El taller y el turno deben pertenecer al evento")
    other = (WorkshopAssignment.objects
             .filter(event=event, team=team)
             .exclude(assignment_slot=assignment_slot)
             .first())
    if other is not None and other.time_slot_id == time_slot.pk:
        raise AssignmentError("Conflicto: mismo turno para A y B")
    if other is not None and other.workshop_id == workshop.pk:
        raise AssignmentError("Conflicto: mismo taller para A y B")

    assignment, _ = WorkshopAssignment.objects.update_or_create(
        event=event,
        team=team,
        assignment_slot=assignment_slot,
        defaults={
            "workshop": workshop,
            "time_slot": time_slot,
            "assignment_type": WorkshopAssignment.MANUAL,
            "preference_matched": None,
            "assigned_by": user,
        },
    )
    return assignment


def clear_assignments(event):
    deleted, _ = WorkshopAssignment.objects.filter(event=event).delete()
    return deleted


def save_time_slots(event, slots):
    """Replace the event's time slots with [(start_time, end_time)], numbered in order"""
    with transaction.atomic():
        WorkshopTimeSlot.objects.filter(event=event).delete()
        return [
            WorkshopTimeSlot.objects.create(event=event, slot_number=number,
                                            start_time=start, end_time=end)
            for number, (start, end) in enumerate(slots, start=1)
        ]
