from django.http import JsonResponse
from django.shortcuts import get_object_or_404, render, reverse
from django.views.decorators.http import require_http_methods

from tgspain.apps.core.auth_roles import back_office_required, role_required
from tgspain.apps.core.helpers import redirect_and_flash_error, redirect_and_flash_success
from tgspain.apps.core.models import Team, UserRole
from tgspain.apps.events.models import Event
from tgspain.apps.workshops.forms import (
    ManualAssignmentForm, PreferencesForm, TimeSlotFormSet
)
from tgspain.apps.workshops.models import WorkshopAssignment
from tgspain.libs.errors import AssignmentError, PreferencesError
from tgspain.libs.team_members import mentor_teams
from tgspain.libs.workshop_logic import assignment, preferences, stats
from tgspain.libs.workshop_logic.eligibility import eligible_teams_for_mentor


@role_required(UserRole.MENTOR, UserRole.ADMIN)
def mentor_dashboard(request):
    return render(request, "workshops/mentor_dashboard.html", {
        "teams": mentor_teams(request.user),
        "eligible": eligible_teams_for_mentor(request.user),
    })


@role_required(UserRole.MENTOR)
@require_http_methods(["GET", "POST"])
def submit_preferences(request, event_id, team_id):
    eligible = {(entry.team_id, entry.event_id): entry
                for entry in eligible_teams_for_mentor(request.user)}
    entry = eligible.get((int(team_id), int(event_id)))
    if entry is None:
        return redirect_and_flash_error(
            request, "Este equipo no puede enviar preferencias para este evento",
            path=reverse("mentor_dashboard"))
    if entry.has_submitted_preferences:
        return redirect_and_flash_error(
            request, "Las preferencias ya fueron enviadas para este equipo",
            path=reverse("mentor_dashboard"))

    event = get_object_or_404(Event, pk=event_id)
    team = get_object_or_404(Team, pk=team_id)
    workshops = event.workshops.all()
    form = PreferencesForm(request.POST or None, workshops=workshops)
    if request.method == "POST" and form.is_valid():
        try:
            preferences.submit_preferences(team, event, form.ordered_workshop_ids(),
                                           request.user)
        except PreferencesError as e:
            form.add_error(None, str(e))
        else:
            return redirect_and_flash_success(request, "Preferencias enviadas",
                                              path=reverse("mentor_dashboard"))
    return render(request, "workshops/preferences_form.html", {
        "form": form,
        "event": event,
        "team": team,
    })


### BACK OFFICE ###


@back_office_required
def preferences_overview(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    teams = stats.all_teams_preferences(event)
    return render(request, "workshops/preferences_overview.html", {
        "event": event,
        "teams": teams,
        "submitted": sum(1 for team in teams if team["has_preferences"]),
    })


@back_office_required
@require_http_methods(["GET", "POST"])
def edit_preferences(request, event_id, team_id):
    event = get_object_or_404(Event, pk=event_id)
    team = get_object_or_404(Team, pk=team_id)
    current = [p.workshop_id for p in preferences.team_preferences(team, event)]
    form = PreferencesForm(request.POST or None, workshops=event.workshops.all(),
                           initial_order=current)
    if request.method == "POST" and form.is_valid():
        try:
            preferences.update_preferences(team, event, form.ordered_workshop_ids(),
                                           request.user)
        except PreferencesError as e:
            form.add_error(None, str(e))
        else:
            return redirect_and_flash_success(
                request, f"Preferencias de {team.name} actualizadas",
                path=reverse("preferences_overview", args=[event.pk]))
    return render(request, "workshops/preferences_form.html", {
        "form": form,
        "event": event,
        "team": team,
    })


@back_office_required
def team_stats(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    return JsonResponse({
        "event_id": event.pk,
        "teams": [team.as_dict() for team in stats.event_team_stats(event)],
    })


@back_office_required
@require_http_methods(["GET", "POST"])
def assignments(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    path = reverse("workshop_assignments", args=[event.pk])
    preview = None

    if request.method == "POST":
        action = request.POST.get("action")
        if action == "clear":
            deleted = assignment.clear_assignments(event)
            return redirect_and_flash_success(
                request, f"{deleted} asignación(es) eliminadas", path=path)
        try:
            results, result_stats = assignment.run_assignment(
                event, dry_run=action != "run")
        except AssignmentError as e:
            return redirect_and_flash_error(request, str(e), path=path)
        if action == "run":
            return redirect_and_flash_success(
                request,
                f"Asignación guardada: {result_stats['fully_assigned']} de "
                f"{result_stats['total_teams']} equipos completos",
                path=path)
        preview = {"results": results, "stats": result_stats}

    current = (WorkshopAssignment.objects
               .filter(event=event)
               .select_related("team", "workshop", "time_slot")
               .order_by("team__name", "assignment_slot"))
    return render(request, "workshops/assignments.html", {
        "event": event,
        "preview": preview,
        "assignments": current,
        "manual_form": ManualAssignmentForm(event=event),
        "teams": Team.objects.filter(
            pk__in=[entry.team_id for entry in assignment.registered_teams(event)]),
    })


@back_office_required
@require_http_methods(["POST"])
def manual_assignment(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    path = reverse("workshop_assignments", args=[event.pk])
    form = ManualAssignmentForm(request.POST, event=event)
    if not form.is_valid():
        return redirect_and_flash_error(request, "Datos de asignación no válidos", path=path)
    team = get_object_or_404(Team, pk=form.cleaned_data["team_id"])
    try:
        assignment.manual_assign(event, team, form.cleaned_data["workshop"],
                                 form.cleaned_data["time_slot"],
                                 form.cleaned_data["assignment_slot"], request.user)
    except AssignmentError as e:
        return redirect_and_flash_error(request, str(e), path=path)
    return redirect_and_flash_success(request, f"Asignación de {team.name} guardada",
                                      path=path)


@back_office_required
@require_http_methods(["GET", "POST"])
def time_slots(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    if request.method == "POST":
        formset = TimeSlotFormSet(request.POST, prefix="slots")
        if formset.is_valid():
            slots = sorted(
                ((form.cleaned_data["start_time"], form.cleaned_data["end_time"])
                 for form in formset
                 if form.cleaned_data and not form.cleaned_data.get("DELETE")),
                key=lambda slot: slot[0])
            assignment.save_time_slots(event, slots)
            return redirect_and_flash_success(
                request, f"{len(slots)} turno(s) guardados",
                path=reverse("workshop_time_slots", args=[event.pk]))
    else:
        formset = TimeSlotFormSet(prefix="slots", initial=[
            {"start_time": slot.start_time, "end_time": slot.end_time}
            for slot in event.workshop_time_slots.all()
        ])
    return render(request, "workshops/time_slots.html", {
        "event": event,
        "formset": formset,
    })
