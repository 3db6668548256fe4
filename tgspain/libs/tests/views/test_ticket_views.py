import json

import pytest
from django.urls import reverse

from tgspain.apps.core.models import UserRole
from tgspain.apps.events.models import EventRegistration
from tgspain.libs.tests.helpers import make_event, make_registration, make_user
from tgspain.libs.tickets import event_today


@pytest.fixture
def todays_ticket(db):
    return make_registration(make_event(date=event_today()), team_name="Las Coders")


def post_json(client, url, body):
    return client.post(url, data=body if isinstance(body, str) else json.dumps(body),
                       content_type="application/json")


@pytest.mark.django_db
def test_validate_api_requires_login(client, todays_ticket):
    response = post_json(client, reverse("api_validate_ticket"),
                         {"qr_code": todays_ticket.qr_code})
    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized"}


@pytest.mark.django_db
def test_validate_api_requires_a_validator_role(client, todays_ticket):
    client.force_login(make_user(role=UserRole.MENTOR))
    response = post_json(client, reverse("api_validate_ticket"),
                         {"qr_code": todays_ticket.qr_code})
    assert response.status_code == 403
    assert response.json() == {"error": "forbidden"}


@pytest.mark.django_db
def test_validate_api_rejects_bad_json(client):
    client.force_login(make_user(role=UserRole.VOLUNTEER))
    response = post_json(client, reverse("api_validate_ticket"), "{not json")
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_json"}


@pytest.mark.django_db
def test_validate_api_checks_in_once(client, todays_ticket):
    client.force_login(make_user(role=UserRole.VOLUNTEER))
    url = reverse("api_validate_ticket")

    first = post_json(client, url, {"qr_code": todays_ticket.qr_code})
    assert first.status_code == 200
    assert first.json()["valid"] is True
    assert first.json()["registration"]["team_name"] == "Las Coders"

    second = post_json(client, url, {"qr_code": todays_ticket.qr_code})
    assert second.status_code == 200
    assert second.json() == {"valid": False, "error": "already_checked_in"}

    unknown = post_json(client, url, {"qr_code": "TGM-2025-NOPE0000"})
    assert unknown.json() == {"valid": False, "error": "not_found"}

    todays_ticket.refresh_from_db()
    assert todays_ticket.registration_status == EventRegistration.CHECKED_IN


@pytest.mark.django_db
def test_validate_page(client, todays_ticket):
    client.force_login(make_user(role=UserRole.VOLUNTEER))

    page = client.get(reverse("validate_ticket_code", args=[todays_ticket.qr_code]))
    assert page.status_code == 200
    assert todays_ticket.qr_code in page.content.decode()

    response = client.post(reverse("validate_tickets"), {"qr_code": todays_ticket.qr_code})
    assert "Entrada válida" in response.content.decode()
    response = client.post(reverse("validate_tickets"), {"qr_code": todays_ticket.qr_code})
    assert "Esta entrada ya fue validada" in response.content.decode()


@pytest.mark.django_db
def test_validate_page_is_for_validators_only(client):
    client.force_login(make_user())
    response = client.get(reverse("validate_tickets"))
    assert response.status_code == 302
    assert response.url.startswith("/403/")


@pytest.mark.django_db
def test_qr_png_is_public(client, todays_ticket):
    response = client.get(reverse("ticket_qr", args=[todays_ticket.qr_code]))
    assert response.status_code == 200
    assert response["Content-Type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")

    assert client.get("/qr/TGM-2025-UNKNOWN0.png").status_code == 404


@pytest.mark.django_db
def test_ticket_detail_visibility(client):
    owner = make_user()
    registration = make_registration(make_event(), user=owner)
    url = reverse("ticket_detail", args=[registration.pk])

    client.force_login(owner)
    response = client.get(url)
    assert response.status_code == 200
    assert registration.qr_code in response.content.decode()

    client.force_login(make_user())
    assert client.get(url).url == "/403/"

    client.force_login(make_user(role=UserRole.VOLUNTEER))
    assert client.get(url).status_code == 200
