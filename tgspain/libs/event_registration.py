import logging

from django.db import transaction
from django.db.models import F

from tgspain.apps.core.auth_roles import has_any_role
from tgspain.apps.core.models import AuditLog, Profile, TeamMember
from tgspain.apps.events.models import (
    Companion, Event, EventEmail, EventRegistration, TicketType
)
from tgspain.libs import notifications
from tgspain.libs.email_service import deliver
from tgspain.libs.errors import AlreadyRegisteredError, CapacityError, RegistrationError
from tgspain.libs.tickets import event_today, generate_qr_code, generate_registration_number
from tgspain.libs.validation import clean_dni

logger = logging.getLogger(__name__)


def published_events():
    return (Event.objects.filter(status=Event.PUBLISHED)
            .prefetch_related("ticket_types")
            .order_by("date", "name"))


def existing_registration(event, user):
    return (EventRegistration.objects
            .filter(event=event, user=user, is_companion=False)
            .exclude(registration_status=EventRegistration.CANCELLED)
            .first())


def user_team_membership(user):
    return (TeamMember.objects.filter(user=user)
            .select_related("team")
            .order_by("member_type", "joined_at")
            .first())


def _check_ticket_type(ticket_type, user, profile, membership):
    if not ticket_type.is_active:
        raise RegistrationError("Este tipo de entrada no está disponible")
    if ticket_type.requires_verification and not (profile and profile.is_verified):
        raise RegistrationError("Necesitas una cuenta verificada para esta entrada")
    if ticket_type.allowed_roles and not has_any_role(user, *ticket_type.allowed_roles):
        raise RegistrationError("Tu rol no permite seleccionar esta entrada")
    if ticket_type.requires_team and membership is None:
        raise RegistrationError("Esta entrada requiere pertenecer a un equipo")


def _adjust_counters(registration, delta):
    counters = [(Event.objects.filter(pk=registration.event_id), "current_registrations")]
    if registration.ticket_type_id:
        counters.append((TicketType.objects.filter(pk=registration.ticket_type_id),
                         "current_count"))
    for queryset, field in counters:
        if delta >= 0:
            queryset.update(**{field: F(field) + delta})
            continue
        # Counters are unsigned, clamp at zero instead of going negative
        queryset.filter(**{f"{field}__lt": -delta}).update(**{field: 0})
        queryset.filter(**{f"{field}__gte": -delta}).update(**{field: F(field) + delta})


def register_for_event(event, user, ticket_type, data, companions=()):
    """
    Create a confirmed registration (and its companions) for a user.

    `data` holds the attendee fields from the registration form and
    `companions` a list of dicts with first_name, last_name, dni and
    relationship. Raises RegistrationError when any rule is broken.
    """
    companions = list(companions)
    today = event_today()
    if not event.is_registration_open(today):
        raise RegistrationError("Las inscripciones para este evento están cerradas")
    if ticket_type.event_id != event.pk:
        raise RegistrationError("El tipo de entrada no pertenece a este evento")
    if existing_registration(event, user) is not None:
        raise AlreadyRegisteredError()

    profile = Profile.objects.filter(user=user).first()
    membership = user_team_membership(user)
    _check_ticket_type(ticket_type, user, profile, membership)

    if len(companions) > ticket_type.max_companions:
        raise RegistrationError(
            f"Este tipo de entrada permite como máximo "
            f"{ticket_type.max_companions} acompañante(s)")

    dni = clean_dni(data.get("dni"), required=False)
    if dni is None:
        raise RegistrationError("El DNI/NIE no es válido")

    with transaction.atomic():
        locked = TicketType.objects.select_for_update().get(pk=ticket_type.pk)
        available = locked.max_capacity - locked.current_count
        if available < 1 + len(companions):
            raise CapacityError(available, len(companions))

        registration = EventRegistration.objects.create(
            event=event,
            ticket_type=locked,
            user=user,
            team=membership.team if membership else None,
            team_name=membership.team.name if membership else data.get("team_name", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            email=data.get("email") or user.email,
            dni=dni,
            phone=data.get("phone", ""),
            tg_email=data.get("tg_email", ""),
            image_consent=bool(data.get("image_consent")),
            data_consent=bool(data.get("data_consent")),
            qr_code=generate_qr_code(),
            registration_number=generate_registration_number(),
            registration_status=EventRegistration.CONFIRMED,
        )
        for companion in companions:
            Companion.objects.create(
                event_registration=registration,
                first_name=companion.get("first_name", ""),
                last_name=companion.get("last_name", ""),
                dni=clean_dni(companion.get("dni"), required=False) or "",
                relationship=companion.get("relationship", ""),
                qr_code=generate_qr_code(),
            )
        _adjust_counters(registration, 1 + len(companions))
        AuditLog.record(user, "register", registration,
                        {"event": event.pk, "companions": len(companions)})

    logger.info("Registration %s created for event %s with %s companion(s)",
                registration.registration_number, event.pk, len(companions))
    deliver([notifications.registration_confirmation(registration),
             notifications.event_consent(registration)],
            f"registration {registration.registration_number}")
    return registration


def cancel_registration(registration, user):
    if registration.user_id != user.pk:
        raise RegistrationError("No puedes cancelar esta entrada")
    if registration.is_cancelled:
        raise RegistrationError("Esta entrada ya está cancelada")
    if registration.is_checked_in:
        raise RegistrationError("No se puede cancelar una entrada ya validada")

    with transaction.atomic():
        updated = (EventRegistration.objects
                   .filter(pk=registration.pk)
                   .exclude(registration_status=EventRegistration.CANCELLED)
                   .update(registration_status=EventRegistration.CANCELLED))
        if not updated:
            raise RegistrationError("Esta entrada ya está cancelada")
        _adjust_counters(registration, -(1 + registration.companions.count()))
        AuditLog.record(user, "cancel_registration", registration)

    registration.registration_status = EventRegistration.CANCELLED
    return registration


def admin_cancel_registration(registration, admin):
    """Cancel on behalf of the attendee, dropping their companions"""
    if registration.is_cancelled:
        raise RegistrationError("Esta entrada ya está cancelada")
    with transaction.atomic():
        deleted, _ = registration.companions.all().delete()
        registration.registration_status = EventRegistration.CANCELLED
        registration.save(update_fields=["registration_status"])
        _adjust_counters(registration, -(1 + deleted))
        AuditLog.record(admin, "admin_cancel_registration", registration,
                        {"companions_deleted": deleted})
    return registration


def send_event_email(event, subject, body, sender, statuses=None):
    statuses = statuses or [EventRegistration.CONFIRMED, EventRegistration.CHECKED_IN]
    registrations = (event.registrations
                     .filter(registration_status__in=statuses)
                     .exclude(email=""))
    seen, requests = set(), []
    for registration in registrations:
        address = registration.email.lower()
        if address in seen:
            continue
        seen.add(address)
        requests.append(notifications.event_announcement(event, registration, subject, body))

    sent = deliver(requests, f"event {event.pk} announcement")
    return EventEmail.objects.create(event=event, subject=subject, body=body,
                                     recipients_count=sent, sent_by=sender)
