import json
import logging

from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render, reverse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from tgspain.apps.core.auth_roles import (
    BACK_OFFICE_ROLES, TICKET_VALIDATOR_ROLES, back_office_required,
    can_validate_tickets, has_any_role, role_required
)
from tgspain.apps.core.helpers import (
    client_ip, redirect_and_flash_error, redirect_and_flash_success
)
from tgspain.apps.core.models import Profile
from tgspain.apps.events.forms import (
    CompanionFormSet, EventEmailForm, RegistrationForm, companion_data
)
from tgspain.apps.events.models import (
    Companion, Event, EventRegistration, EventTicketConsent
)
from tgspain.libs import consent, event_registration
from tgspain.libs.errors import ConsentValidationError, RegistrationError
from tgspain.libs.tickets import event_today, qr_code_png
from tgspain.libs.ticket_validation import validate_ticket

logger = logging.getLogger(__name__)

VALIDATION_MESSAGES = {
    "not_found": "Entrada no encontrada",
    "cancelled": "Esta entrada está cancelada",
    "already_checked_in": "Esta entrada ya fue validada",
    "wrong_date": "Esta entrada no es para el evento de hoy",
}

CONSENT_MESSAGES = {
    "not_found": "El enlace de consentimiento no es válido",
    "registration_cancelled": "La inscripción ha sido cancelada",
    "already_checked_in": "La entrada ya fue validada en el evento",
    "event_already_passed": "El evento ya ha pasado",
}


def _visible_event(event_id):
    return get_object_or_404(Event, pk=event_id, status=Event.PUBLISHED)


def event_list(request):
    return render(request, "events/event_list.html", {
        "events": event_registration.published_events().filter(date__gte=event_today()),
    })


def event_detail(request, event_id):
    event = _visible_event(event_id)
    return render(request, "events/event_detail.html", {
        "event": event,
        "ticket_types": event.ticket_types.filter(is_active=True),
        "registration": event_registration.existing_registration(event, request.user),
        "registration_open": event.is_registration_open(event_today()),
    })


def _initial_registration_data(user):
    profile = Profile.objects.filter(user=user).first()
    membership = event_registration.user_team_membership(user)
    initial = {"email": user.email}
    if profile is not None:
        initial.update(first_name=profile.first_name, last_name=profile.last_name,
                       email=profile.email or user.email, dni=profile.dni,
                       phone=profile.phone, tg_email=profile.tg_email)
    if membership is not None:
        initial["team_name"] = membership.team.name
    return initial


@require_http_methods(["GET", "POST"])
def register(request, event_id):
    event = _visible_event(event_id)
    existing = event_registration.existing_registration(event, request.user)
    if existing is not None:
        return redirect_and_flash_error(
            request, "Ya estás inscrito en este evento. Consulta tus entradas.",
            path=reverse("ticket_detail", args=[existing.pk]))

    if request.method == "POST":
        form = RegistrationForm(request.POST, event=event)
        formset = CompanionFormSet(request.POST, prefix="companions")
        if form.is_valid() and formset.is_valid():
            data = dict(form.cleaned_data)
            ticket_type = data.pop("ticket_type")
            try:
                registration = event_registration.register_for_event(
                    event, request.user, ticket_type, data, companion_data(formset))
            except RegistrationError as e:
                form.add_error(None, str(e))
            else:
                return redirect_and_flash_success(
                    request, "¡Inscripción confirmada!",
                    path=reverse("ticket_detail", args=[registration.pk]))
    else:
        form = RegistrationForm(event=event,
                                initial=_initial_registration_data(request.user))
        formset = CompanionFormSet(prefix="companions")

    return render(request, "events/register.html", {
        "event": event,
        "form": form,
        "formset": formset,
    })


def _can_see_registration(user, registration):
    return registration.user_id == user.pk or has_any_role(
        user, *(BACK_OFFICE_ROLES + TICKET_VALIDATOR_ROLES))


def ticket_detail(request, registration_id):
    registration = get_object_or_404(
        EventRegistration.objects.select_related("event", "ticket_type", "team"),
        pk=registration_id)
    if not _can_see_registration(request.user, registration):
        return redirect("/403/")
    return render(request, "events/ticket_detail.html", {
        "registration": registration,
        "companions": registration.companions.all(),
        "consent": getattr(registration, "consent", None),
    })


def ticket_qr(request, qr_code):
    """PNG for a ticket code; public so the image loads inside emails"""
    exists = (EventRegistration.objects.filter(qr_code=qr_code).exists()
              or Companion.objects.filter(qr_code=qr_code).exists())
    if not exists:
        return HttpResponse(status=404)
    response = HttpResponse(qr_code_png(qr_code), content_type="image/png")
    response["Cache-Control"] = "public, max-age=86400"
    return response


def my_tickets(request):
    registrations = (EventRegistration.objects
                     .filter(user=request.user)
                     .select_related("event", "ticket_type")
                     .prefetch_related("companions")
                     .order_by("-event__date"))
    return render(request, "events/my_tickets.html", {"registrations": registrations})


@require_http_methods(["POST"])
def cancel(request, registration_id):
    registration = get_object_or_404(EventRegistration, pk=registration_id)
    try:
        event_registration.cancel_registration(registration, request.user)
    except RegistrationError as e:
        return redirect_and_flash_error(request, str(e),
                                        path=reverse("my_tickets"))
    return redirect_and_flash_success(request, "Inscripción cancelada",
                                      path=reverse("my_tickets"))


### TICKET VALIDATION ###


@role_required(*TICKET_VALIDATOR_ROLES)
@require_http_methods(["GET", "POST"])
def validate_tickets(request, qr_code=""):
    result = None
    if request.method == "POST":
        qr_code = request.POST.get("qr_code", "")
        result = validate_ticket(qr_code, request.user)
    return render(request, "events/validate_tickets.html", {
        "qr_code": qr_code,
        "result": result,
        "error_message": VALIDATION_MESSAGES.get(result.error) if result else None,
    })


@require_http_methods(["POST"])
def api_validate_ticket(request):
    if request.user.is_anonymous:
        return JsonResponse({"error": "unauthorized"}, status=401)
    if not can_validate_tickets(request.user):
        return JsonResponse({"error": "forbidden"}, status=403)
    try:
        body = json.loads(request.body or b"{}")
    except ValueError:
        return JsonResponse({"error": "invalid_json"}, status=400)
    if not isinstance(body, dict):
        return JsonResponse({"error": "invalid_json"}, status=400)

    result = validate_ticket(str(body.get("qr_code") or ""), request.user)
    return JsonResponse(result.as_dict())


### CONSENT ###


def _json_body(request):
    try:
        body = json.loads(request.body or b"{}")
    except ValueError:
        raise ConsentValidationError("Cuerpo de la petición no válido")
    if not isinstance(body, dict):
        raise ConsentValidationError("Cuerpo de la petición no válido")
    return body


@require_http_methods(["GET", "POST"])
def consent_page(request):
    token = request.GET.get("token") or request.POST.get("consent_token", "")
    info = consent.consent_info(token) if token else {"error": "not_found"}
    if "error" in info:
        return render(request, "events/consent.html", {
            "error_message": CONSENT_MESSAGES[info["error"]],
        }, status=404)

    context = {"info": info, "token": token, "values": {},
               "relationships": EventTicketConsent.RELATIONSHIP_CHOICES}
    if request.method == "POST":
        payload = request.POST.dict()
        payload["consent_token"] = token
        context["values"] = payload
        try:
            result = consent.submit_consent(payload, client_ip(request))
        except ConsentValidationError as e:
            context["error_message"] = str(e)
        else:
            if "error" in result:
                context["error_message"] = CONSENT_MESSAGES[result["error"]]
            else:
                context["signed"] = True
    return render(request, "events/consent.html", context)


@csrf_exempt
@require_http_methods(["POST"])
def api_consent_info(request):
    try:
        info = consent.consent_info(_json_body(request).get("token"))
    except ConsentValidationError as e:
        return JsonResponse({"error": "validation_error", "message": str(e)}, status=400)
    if "error" in info:
        return JsonResponse(info, status=404)
    return JsonResponse(info)


@csrf_exempt
@require_http_methods(["POST"])
def api_consent_submit(request):
    try:
        result = consent.submit_consent(_json_body(request), client_ip(request))
    except ConsentValidationError as e:
        return JsonResponse({"error": "validation_error", "message": str(e)}, status=400)
    if result.get("error") == "not_found":
        return JsonResponse(result, status=404)
    if "error" in result:
        return JsonResponse(result, status=409)
    return JsonResponse(result)


### BACK OFFICE ###


@back_office_required
def admin_event_registrations(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    registrations = (event.registrations
                     .select_related("ticket_type", "team", "consent")
                     .prefetch_related("companions")
                     .order_by("registration_status", "last_name"))
    return render(request, "events/admin_registrations.html", {
        "event": event,
        "registrations": registrations,
        "email_form": EventEmailForm(),
        "emails": event.emails.all(),
    })


@back_office_required
@require_http_methods(["POST"])
def admin_cancel(request, registration_id):
    registration = get_object_or_404(EventRegistration, pk=registration_id)
    path = reverse("admin_event_registrations", args=[registration.event_id])
    try:
        event_registration.admin_cancel_registration(registration, request.user)
    except RegistrationError as e:
        return redirect_and_flash_error(request, str(e), path=path)
    return redirect_and_flash_success(
        request, f"Inscripción {registration.registration_number} cancelada", path=path)


@back_office_required
@require_http_methods(["POST"])
def send_event_email(request, event_id):
    event = get_object_or_404(Event, pk=event_id)
    path = reverse("admin_event_registrations", args=[event.pk])
    form = EventEmailForm(request.POST)
    if not form.is_valid():
        return redirect_and_flash_error(request, "Completa el asunto y el mensaje", path=path)
    statuses = [EventRegistration.CONFIRMED]
    if form.cleaned_data["include_checked_in"]:
        statuses.append(EventRegistration.CHECKED_IN)
    email = event_registration.send_event_email(event, form.cleaned_data["subject"],
                                                form.cleaned_data["body"],
                                                request.user, statuses)
    return redirect_and_flash_success(
        request, f"Email enviado a {email.recipients_count} persona(s)", path=path)
