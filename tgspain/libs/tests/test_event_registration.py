import datetime

import pytest

from tgspain.apps.core.models import AuditLog, UserRole
from tgspain.apps.events.models import Companion, Event, EventEmail, EventRegistration
from tgspain.libs import event_registration
from tgspain.libs.errors import AlreadyRegisteredError, CapacityError, RegistrationError
from tgspain.libs.tests.helpers import (
    make_event, make_registration, make_team, make_ticket_type, make_user
)
from tgspain.libs.tickets import event_today


def attendee(**overrides):
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "dni": "12345678-z",
        "data_consent": True,
        "image_consent": False,
    }
    data.update(overrides)
    return data


def companion(first_name="Marta", relationship="Madre"):
    return {"first_name": first_name, "last_name": "Pérez", "dni": "",
            "relationship": relationship}


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    def fake_deliver(requests, context, service=None):
        requests = list(requests)
        sent.extend(requests)
        return len(requests)

    monkeypatch.setattr(event_registration, "deliver", fake_deliver)
    return sent


@pytest.fixture
def event(db):
    return make_event(name="Evento intermedio Madrid")


@pytest.fixture
def ticket_type(event):
    return make_ticket_type(event, max_capacity=5, max_companions=2)


@pytest.mark.django_db
def test_register_creates_confirmed_ticket(event, ticket_type, sent_emails):
    user = make_user(email="ada@example.com")
    team = make_team(name="Las Coders", participants=[user])

    registration = event_registration.register_for_event(
        event, user, ticket_type, attendee(), [companion(), companion("Luis", "Padre")])

    assert registration.registration_status == EventRegistration.CONFIRMED
    assert registration.team == team
    assert registration.team_name == "Las Coders"
    assert registration.dni == "12345678Z"
    assert registration.qr_code.startswith("TGM-")
    assert registration.data_consent and not registration.image_consent
    companions = list(registration.companions.all())
    assert len(companions) == 2
    assert len({c.qr_code for c in companions} | {registration.qr_code}) == 3

    ticket_type.refresh_from_db()
    event.refresh_from_db()
    assert ticket_type.current_count == 3
    assert event.current_registrations == 3
    assert AuditLog.objects.filter(action="register").count() == 1

    assert [request.tags["type"] for request in sent_emails] == [
        "registration_confirmation", "event_consent"]
    assert str(registration.consent_token) in sent_emails[1].text_body


@pytest.mark.django_db
def test_register_refuses_a_second_registration(event, ticket_type, sent_emails):
    user = make_user()
    event_registration.register_for_event(event, user, ticket_type, attendee())

    with pytest.raises(AlreadyRegisteredError):
        event_registration.register_for_event(event, user, ticket_type, attendee())


@pytest.mark.django_db
def test_cancelled_registration_allows_registering_again(event, ticket_type, sent_emails):
    user = make_user()
    make_registration(event, user=user, status=EventRegistration.CANCELLED)

    registration = event_registration.register_for_event(event, user, ticket_type,
                                                         attendee())
    assert registration.registration_status == EventRegistration.CONFIRMED


@pytest.mark.django_db
@pytest.mark.parametrize("fields", [
    {"status": Event.DRAFT},
    {"registration_close_date": event_today() - datetime.timedelta(days=1)},
    {"registration_open_date": event_today() + datetime.timedelta(days=1)},
    {"date": event_today() - datetime.timedelta(days=1)},
])
def test_register_outside_the_window(fields, sent_emails):
    closed_event = make_event(**fields)
    ticket_type = make_ticket_type(closed_event)

    with pytest.raises(RegistrationError) as exc_info:
        event_registration.register_for_event(closed_event, make_user(), ticket_type,
                                              attendee())
    assert "cerradas" in str(exc_info.value)


@pytest.mark.django_db
def test_ticket_type_from_another_event(event, sent_emails):
    other = make_ticket_type(make_event())
    with pytest.raises(RegistrationError) as exc_info:
        event_registration.register_for_event(event, make_user(), other, attendee())
    assert "no pertenece" in str(exc_info.value)


@pytest.mark.django_db
def test_ticket_type_rules(event, sent_emails):
    inactive = make_ticket_type(event, name="Antigua", is_active=False)
    mentors_only = make_ticket_type(event, name="Mentoras",
                                    allowed_roles=[UserRole.MENTOR])
    team_only = make_ticket_type(event, name="Equipos", requires_team=True)
    verified_only = make_ticket_type(event, name="Verificadas")
    participant = make_user()

    cases = [
        (inactive, participant, "no está disponible"),
        (mentors_only, participant, "Tu rol no permite"),
        (team_only, participant, "requiere pertenecer a un equipo"),
        (verified_only, make_user(verified=False), "cuenta verificada"),
    ]
    for ticket_type, user, message in cases:
        with pytest.raises(RegistrationError) as exc_info:
            event_registration.register_for_event(event, user, ticket_type, attendee())
        assert message in str(exc_info.value)

    mentor = make_user(role=UserRole.MENTOR)
    assert event_registration.register_for_event(event, mentor, mentors_only, attendee())


@pytest.mark.django_db
def test_too_many_companions(event, ticket_type, sent_emails):
    with pytest.raises(RegistrationError) as exc_info:
        event_registration.register_for_event(
            event, make_user(), ticket_type, attendee(),
            [companion(), companion(), companion()])
    assert "como máximo 2 acompañante(s)" in str(exc_info.value)


@pytest.mark.django_db
def test_invalid_dni(event, ticket_type, sent_emails):
    with pytest.raises(RegistrationError) as exc_info:
        event_registration.register_for_event(event, make_user(), ticket_type,
                                              attendee(dni="1234"))
    assert "DNI/NIE no es válido" in str(exc_info.value)


@pytest.mark.django_db
def test_capacity_counts_companions(event, sent_emails):
    ticket_type = make_ticket_type(event, max_capacity=2, max_companions=2)

    with pytest.raises(CapacityError) as exc_info:
        event_registration.register_for_event(event, make_user(), ticket_type,
                                              attendee(), [companion(), companion()])
    assert "Plazas libres: 2, necesitas 3 (incluyendo 2 acompañante(s))" in \
        str(exc_info.value)

    event_registration.register_for_event(event, make_user(), ticket_type, attendee(),
                                          [companion()])
    with pytest.raises(CapacityError) as exc_info:
        event_registration.register_for_event(event, make_user(), ticket_type, attendee())
    assert str(exc_info.value) == "No hay plazas disponibles para este tipo de entrada"
    assert EventRegistration.objects.count() == 1


@pytest.mark.django_db
def test_cancel_registration(event, ticket_type, sent_emails):
    user = make_user()
    registration = event_registration.register_for_event(
        event, user, ticket_type, attendee(), [companion()])

    with pytest.raises(RegistrationError) as exc_info:
        event_registration.cancel_registration(registration, make_user())
    assert "No puedes cancelar" in str(exc_info.value)

    event_registration.cancel_registration(registration, user)

    registration.refresh_from_db()
    ticket_type.refresh_from_db()
    event.refresh_from_db()
    assert registration.registration_status == EventRegistration.CANCELLED
    assert ticket_type.current_count == 0
    assert event.current_registrations == 0

    with pytest.raises(RegistrationError) as exc_info:
        event_registration.cancel_registration(registration, user)
    assert str(exc_info.value) == "Esta entrada ya está cancelada"


@pytest.mark.django_db
def test_checked_in_ticket_cannot_be_cancelled(event, ticket_type):
    user = make_user()
    registration = make_registration(event, user=user, ticket_type=ticket_type,
                                     status=EventRegistration.CHECKED_IN)
    with pytest.raises(RegistrationError):
        event_registration.cancel_registration(registration, user)


@pytest.mark.django_db
def test_counters_never_go_below_zero(event, ticket_type):
    user = make_user()
    registration = make_registration(event, user=user, ticket_type=ticket_type)
    Companion.objects.create(event_registration=registration, qr_code="TGM-2025-AAAAAAAA")

    event_registration.cancel_registration(registration, user)

    ticket_type.refresh_from_db()
    event.refresh_from_db()
    assert ticket_type.current_count == 0
    assert event.current_registrations == 0


@pytest.mark.django_db
def test_admin_cancel_removes_companions(event, ticket_type, sent_emails):
    admin = make_user(role=UserRole.ADMIN)
    registration = event_registration.register_for_event(
        event, make_user(), ticket_type, attendee(), [companion(), companion()])

    event_registration.admin_cancel_registration(registration, admin)

    registration.refresh_from_db()
    ticket_type.refresh_from_db()
    assert registration.registration_status == EventRegistration.CANCELLED
    assert not Companion.objects.exists()
    assert ticket_type.current_count == 0
    log = AuditLog.objects.get(action="admin_cancel_registration")
    assert log.user == admin
    assert log.changes == {"companions_deleted": 2}

    with pytest.raises(RegistrationError):
        event_registration.admin_cancel_registration(registration, admin)


@pytest.mark.django_db
def test_send_event_email_reaches_each_address_once(event, sent_emails):
    sender = make_user(role=UserRole.ADMIN)
    make_registration(event, email="a@example.com")
    make_registration(event, email="A@example.com")
    make_registration(event, email="b@example.com", status=EventRegistration.CHECKED_IN)
    make_registration(event, email="c@example.com", status=EventRegistration.CANCELLED)

    email = event_registration.send_event_email(event, "Horario", "Empezamos a las 10",
                                                sender)

    assert email.recipients_count == 2
    assert sorted(r.to_address.lower() for r in sent_emails) == ["a@example.com",
                                                                  "b@example.com"]
    assert all(not request.transactional for request in sent_emails)
    assert EventEmail.objects.get().sent_by == sender

    only_confirmed = event_registration.send_event_email(
        event, "Recordatorio", "Trae tu entrada", sender,
        statuses=[EventRegistration.CONFIRMED])
    assert only_confirmed.recipients_count == 1
