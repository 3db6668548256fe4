import json
import uuid

import pytest
from django.urls import reverse

from tgspain.apps.events.models import EventRegistration, EventTicketConsent
from tgspain.libs.tests.helpers import make_event, make_registration


@pytest.fixture
def registration(db):
    return make_registration(make_event(name="Final"), first_name="Lucía",
                             last_name="García")


def signed_form(registration, **overrides):
    data = {
        "consent_token": str(registration.consent_token),
        "signer_full_name": "María García",
        "signer_dni": "12345678Z",
        "signer_relationship": EventTicketConsent.MOTHER,
        "signature": "María García",
    }
    data.update(overrides)
    return data


def post_json(client, name, body):
    return client.post(reverse(name), data=json.dumps(body),
                       content_type="application/json")


@pytest.mark.django_db
def test_consent_info_api_is_public(client, registration):
    response = post_json(client, "api_consent_info",
                         {"token": str(registration.consent_token)})
    assert response.status_code == 200
    assert response.json()["participant_name"] == "Lucía García"
    assert response.json()["already_signed"] is False

    missing = post_json(client, "api_consent_info", {"token": str(uuid.uuid4())})
    assert missing.status_code == 404
    assert missing.json() == {"error": "not_found"}

    empty = post_json(client, "api_consent_info", {})
    assert empty.status_code == 400
    assert empty.json()["error"] == "validation_error"


@pytest.mark.django_db
def test_consent_submit_api(client, registration):
    response = post_json(client, "api_consent_submit", signed_form(registration))
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert EventTicketConsent.objects.get().event_registration == registration

    invalid = post_json(client, "api_consent_submit",
                        signed_form(registration, signer_dni="nope"))
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "validation_error",
                              "message": "El DNI/NIE del firmante no es válido"}


@pytest.mark.django_db
def test_consent_submit_api_state_errors(client, registration):
    registration.registration_status = EventRegistration.CHECKED_IN
    registration.save()

    response = post_json(client, "api_consent_submit", signed_form(registration))
    assert response.status_code == 409
    assert response.json() == {"error": "already_checked_in"}

    missing = post_json(client, "api_consent_submit",
                        signed_form(registration, consent_token=str(uuid.uuid4())))
    assert missing.status_code == 404


@pytest.mark.django_db
def test_consent_page(client, registration):
    url = f"{reverse('consent_page')}?token={registration.consent_token}"

    page = client.get(url)
    assert page.status_code == 200
    assert "Lucía García" in page.content.decode()

    signed = client.post(url, signed_form(registration))
    assert "ha quedado registrado" in signed.content.decode()
    assert EventTicketConsent.objects.filter(event_registration=registration).exists()

    rejected = client.post(url, signed_form(registration, signature="x"))
    assert "al menos 3 caracteres" in rejected.content.decode()


@pytest.mark.django_db
def test_consent_page_with_a_bad_token(client):
    response = client.get(f"{reverse('consent_page')}?token=nope")
    assert response.status_code == 404
    assert "El enlace de consentimiento no es válido" in response.content.decode()
