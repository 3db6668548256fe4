import logging
import uuid
from datetime import datetime, time

from django.utils import timezone

from tgspain.apps.core.models import AuditLog
from tgspain.apps.events.models import EventRegistration, EventTicketConsent
from tgspain.libs.errors import ConsentValidationError
from tgspain.libs.tickets import event_timezone
from tgspain.libs.validation import (
    MAX_DNI_LENGTH, MAX_NAME_LENGTH, clean_dni, validate_signature_name
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("consent_token", "signer_full_name", "signer_dni",
                   "signer_relationship")
RELATIONSHIPS = [choice for choice, _ in EventTicketConsent.RELATIONSHIP_CHOICES]


def _registration_for_token(token):
    try:
        token = uuid.UUID(str(token))
    except (TypeError, ValueError, AttributeError):
        return None
    return (EventRegistration.objects
            .select_related("event")
            .filter(consent_token=token)
            .first())


def consent_info(token):
    """Public details shown on the consent page for a registration token"""
    if not token:
        raise ConsentValidationError("Falta el token de consentimiento")
    registration = _registration_for_token(token)
    if registration is None:
        return {"error": "not_found"}
    event = registration.event
    return {
        "participant_name": registration.display_name,
        "event_name": event.name,
        "event_date": event.date.isoformat(),
        "event_location_name": event.location_name,
        "event_location_address": event.location_address,
        "event_location_city": event.location_city,
        "already_signed": hasattr(registration, "consent"),
    }


def _clean_payload(payload):
    missing = [name for name in REQUIRED_FIELDS if not payload.get(name)]
    if missing:
        raise ConsentValidationError(
            f"Faltan campos obligatorios: {', '.join(missing)}")

    relationship = payload["signer_relationship"]
    if relationship not in RELATIONSHIPS:
        raise ConsentValidationError("Relación con la participante no válida")

    dni = clean_dni(str(payload["signer_dni"]))
    if dni is None:
        raise ConsentValidationError("El DNI/NIE del firmante no es válido")

    signer_name = validate_signature_name(payload["signer_full_name"],
                                          "El nombre del firmante")
    signature = validate_signature_name(payload.get("signature"),
                                        "La firma")

    minor_age = payload.get("minor_age")
    try:
        minor_age = int(minor_age)
    except (TypeError, ValueError):
        minor_age = None
    if minor_age is not None and not 0 <= minor_age <= 17:
        minor_age = None

    return {
        "signer_full_name": signer_name,
        "signer_dni": dni[:MAX_DNI_LENGTH],
        "signer_relationship": relationship,
        "signature": signature,
        "minor_name": str(payload.get("minor_name") or "").strip()[:MAX_NAME_LENGTH],
        "minor_age": minor_age,
    }


def _event_has_passed(event):
    end_of_day = datetime.combine(event.date, time.max, tzinfo=event_timezone())
    return end_of_day < timezone.now()


def submit_consent(payload, ip_address=None):
    """
    Store (or replace) the signed consent for a registration. Returns
    {"success": True} or {"error": <code>}; raises ConsentValidationError
    when the submitted data is invalid.
    """
    cleaned = _clean_payload(payload)
    registration = _registration_for_token(payload["consent_token"])
    if registration is None:
        return {"error": "not_found"}
    if registration.is_cancelled:
        return {"error": "registration_cancelled"}
    if registration.is_checked_in:
        return {"error": "already_checked_in"}
    if _event_has_passed(registration.event):
        return {"error": "event_already_passed"}

    consent, created = EventTicketConsent.objects.update_or_create(
        event_registration=registration,
        defaults=dict(cleaned, ip_address=ip_address or None, signed_at=timezone.now()),
    )
    AuditLog.record(None, "sign_consent" if created else "resign_consent", consent,
                    {"registration": registration.pk,
                     "relationship": cleaned["signer_relationship"]})
    logger.info("Consent %s for registration %s",
                "signed" if created else "re-signed", registration.registration_number)
    return {"success": True}
