import datetime
import uuid

import pytest

from tgspain.apps.core.models import AuditLog
from tgspain.apps.events.models import EventRegistration, EventTicketConsent
from tgspain.libs import consent
from tgspain.libs.errors import ConsentValidationError
from tgspain.libs.tests.helpers import make_event, make_registration
from tgspain.libs.tickets import event_today


@pytest.fixture
def registration(db):
    event = make_event(name="Final Technovation", location_name="Campus",
                       location_city="Madrid")
    return make_registration(event, first_name="Lucía", last_name="García")


def payload(registration, **overrides):
    data = {
        "consent_token": str(registration.consent_token),
        "signer_full_name": "María García",
        "signer_dni": "12345678Z",
        "signer_relationship": EventTicketConsent.MOTHER,
        "signature": "María García",
        "minor_name": "Lucía García",
        "minor_age": "12",
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
def test_consent_info(registration):
    info = consent.consent_info(str(registration.consent_token))

    assert info["participant_name"] == "Lucía García"
    assert info["event_name"] == "Final Technovation"
    assert info["event_date"] == registration.event.date.isoformat()
    assert info["event_location_city"] == "Madrid"
    assert info["already_signed"] is False


@pytest.mark.django_db
def test_consent_info_unknown_token():
    assert consent.consent_info(str(uuid.uuid4())) == {"error": "not_found"}
    assert consent.consent_info("not-a-token") == {"error": "not_found"}
    with pytest.raises(ConsentValidationError):
        consent.consent_info("")


@pytest.mark.django_db
def test_submit_consent_stores_signature(registration):
    assert consent.submit_consent(payload(registration), "10.0.0.1") == {"success": True}

    signed = EventTicketConsent.objects.get(event_registration=registration)
    assert signed.signer_full_name == "María García"
    assert signed.signer_dni == "12345678Z"
    assert signed.minor_age == 12
    assert signed.ip_address == "10.0.0.1"
    assert AuditLog.objects.filter(action="sign_consent").count() == 1
    assert consent.consent_info(str(registration.consent_token))["already_signed"]


@pytest.mark.django_db
def test_signing_again_replaces_the_consent(registration):
    consent.submit_consent(payload(registration))
    consent.submit_consent(payload(registration,
                                   signer_full_name="Pedro García",
                                   signature="Pedro García",
                                   signer_relationship=EventTicketConsent.FATHER))

    signed = EventTicketConsent.objects.get()
    assert signed.signer_full_name == "Pedro García"
    assert signed.signer_relationship == EventTicketConsent.FATHER
    assert AuditLog.objects.filter(action="resign_consent").count() == 1


@pytest.mark.django_db
@pytest.mark.parametrize("overrides, message", [
    ({"signer_dni": ""}, "Faltan campos obligatorios: signer_dni"),
    ({"signer_relationship": "cousin"}, "Relación con la participante no válida"),
    ({"signer_dni": "ABC"}, "El DNI/NIE del firmante no es válido"),
    ({"signer_full_name": "María"}, "debe incluir nombre y apellidos"),
    ({"signature": "Ma"}, "al menos 3 caracteres"),
])
def test_invalid_consent_data(registration, overrides, message):
    with pytest.raises(ConsentValidationError) as exc_info:
        consent.submit_consent(payload(registration, **overrides))
    assert message in str(exc_info.value)
    assert not EventTicketConsent.objects.exists()


@pytest.mark.django_db
def test_out_of_range_minor_age_is_dropped(registration):
    consent.submit_consent(payload(registration, minor_age="25"))
    assert EventTicketConsent.objects.get().minor_age is None


@pytest.mark.django_db
@pytest.mark.parametrize("status, error", [
    (EventRegistration.CANCELLED, "registration_cancelled"),
    (EventRegistration.CHECKED_IN, "already_checked_in"),
])
def test_consent_refused_for_closed_registrations(registration, status, error):
    registration.registration_status = status
    registration.save()
    assert consent.submit_consent(payload(registration)) == {"error": error}


@pytest.mark.django_db
def test_consent_refused_after_the_event(registration):
    event = registration.event
    event.date = event_today() - datetime.timedelta(days=2)
    event.save()
    assert consent.submit_consent(payload(registration)) == {
        "error": "event_already_passed"}


@pytest.mark.django_db
def test_consent_for_unknown_token(registration):
    result = consent.submit_consent(payload(registration,
                                            consent_token=str(uuid.uuid4())))
    assert result == {"error": "not_found"}
