"""
Check-in of QR tickets at the event door.

A code is looked up among registrations first and companions second.
Each ticket can be checked in exactly once: the final write only touches
rows that are still unchecked, so two volunteers scanning the same code
at the same time get one success and one `already_checked_in`.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from django.utils import timezone

from tgspain.apps.core.models import AuditLog
from tgspain.apps.events.models import Companion, EventRegistration
from tgspain.libs.tickets import event_today

logger = logging.getLogger(__name__)

NOT_FOUND = "not_found"
CANCELLED = "cancelled"
ALREADY_CHECKED_IN = "already_checked_in"
WRONG_DATE = "wrong_date"


@dataclass
class TicketValidationResult:
    valid: bool
    error: Optional[str] = None
    registration: dict = field(default_factory=dict)

    def as_dict(self):
        if self.valid:
            return {"valid": True, "registration": self.registration}
        return {"valid": False, "error": self.error}


def _failure(error):
    return TicketValidationResult(valid=False, error=error)


def validate_ticket(qr_code, validator, today=None):
    code = (qr_code or "").strip()
    if not code:
        return _failure(NOT_FOUND)
    today = today or event_today()

    registration = (EventRegistration.objects
                    .select_related("event", "ticket_type")
                    .filter(qr_code=code)
                    .first())
    if registration is not None:
        return _check_in_registration(registration, validator, today)

    companion = (Companion.objects
                 .select_related("event_registration__event")
                 .filter(qr_code=code)
                 .first())
    if companion is not None:
        return _check_in_companion(companion, validator, today)

    return _failure(NOT_FOUND)


def _check_in_registration(registration, validator, today):
    if registration.is_cancelled:
        return _failure(CANCELLED)
    if registration.is_checked_in:
        return _failure(ALREADY_CHECKED_IN)
    if registration.event.date != today:
        return _failure(WRONG_DATE)

    updated = (EventRegistration.objects
               .filter(pk=registration.pk, checked_in_at__isnull=True)
               .exclude(registration_status__in=[EventRegistration.CANCELLED,
                                                 EventRegistration.CHECKED_IN])
               .update(checked_in_at=timezone.now(),
                       checked_in_by=validator,
                       registration_status=EventRegistration.CHECKED_IN))
    if not updated:
        return _failure(ALREADY_CHECKED_IN)

    AuditLog.record(validator, "check_in", registration,
                    {"qr_code": registration.qr_code})
    logger.info("Checked in registration %s", registration.registration_number)
    return TicketValidationResult(valid=True, registration={
        "id": registration.pk,
        "display_name": registration.display_name or "Asistente",
        "ticket_type": registration.ticket_type.name if registration.ticket_type else "General",
        "event_name": registration.event.name or "Evento",
        "team_name": registration.team_name or None,
        "is_companion": False,
    })


def _check_in_companion(companion, validator, today):
    parent = companion.event_registration
    if parent.is_cancelled:
        return _failure(CANCELLED)
    if companion.checked_in_at is not None:
        return _failure(ALREADY_CHECKED_IN)
    if parent.event.date != today:
        return _failure(WRONG_DATE)

    updated = (Companion.objects
               .filter(pk=companion.pk, checked_in_at__isnull=True)
               .update(checked_in_at=timezone.now()))
    if not updated:
        return _failure(ALREADY_CHECKED_IN)

    AuditLog.record(validator, "check_in_companion", companion,
                    {"qr_code": companion.qr_code, "registration": parent.pk})
    logger.info("Checked in companion %s of registration %s",
                companion.qr_code, parent.registration_number)
    return TicketValidationResult(valid=True, registration={
        "id": companion.pk,
        "display_name": companion.display_name or "Acompañante",
        "ticket_type": companion.relationship or "Acompañante",
        "event_name": parent.event.name or "Evento",
        "team_name": parent.team_name or None,
        "is_companion": True,
    })
