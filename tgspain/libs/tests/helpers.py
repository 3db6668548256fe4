"""Factories for building platform data in tests"""
import datetime
import itertools

from django.contrib.auth import get_user_model

from tgspain.apps.core.models import Hub, Profile, Team, TeamMember, UserRole
from tgspain.apps.events.models import Event, EventRegistration, TicketType
from tgspain.apps.workshops.models import Workshop, WorkshopTimeSlot
from tgspain.libs.tickets import event_today, generate_qr_code, generate_registration_number

_counter = itertools.count(1)


def make_user(email=None, role=UserRole.PARTICIPANT, verified=True, hub=None,
              password="password", **profile_fields):
    """A user with a profile (created by the post_save signal) and one role"""
    email = email or f"user{next(_counter)}@example.com"
    user = get_user_model().objects.create_user(username=email, email=email,
                                                password=password)
    profile = Profile.objects.get(user=user)
    profile.verification_status = Profile.VERIFIED if verified else Profile.PENDING
    profile.hub = hub
    profile.onboarding_completed = True
    profile.first_name = profile_fields.pop("first_name", "Ada")
    profile.last_name = profile_fields.pop("last_name", f"Lovelace {next(_counter)}")
    for name, value in profile_fields.items():
        setattr(profile, name, value)
    profile.save()
    if role:
        UserRole.objects.create(user=user, role=role)
    return user


def make_hub(name=None):
    return Hub.objects.create(name=name or f"Hub {next(_counter)}")


def make_team(name=None, hub=None, participants=(), mentors=(), **fields):
    team = Team.objects.create(name=name or f"Team {next(_counter)}", hub=hub, **fields)
    for user in participants:
        TeamMember.objects.create(team=team, user=user,
                                  member_type=TeamMember.PARTICIPANT)
    for user in mentors:
        TeamMember.objects.create(team=team, user=user, member_type=TeamMember.MENTOR)
    return team


def make_event(name=None, date=None, status=Event.PUBLISHED, **fields):
    return Event.objects.create(
        name=name or f"Event {next(_counter)}",
        date=date or event_today() + datetime.timedelta(days=7),
        status=status,
        **fields,
    )


def make_ticket_type(event, name="General", max_capacity=50, **fields):
    return TicketType.objects.create(event=event, name=name,
                                     max_capacity=max_capacity, **fields)


def make_registration(event, user=None, team=None, ticket_type=None,
                      status=EventRegistration.CONFIRMED, **fields):
    """Insert a registration directly, skipping the registration rules"""
    return EventRegistration.objects.create(
        event=event,
        user=user,
        team=team,
        ticket_type=ticket_type,
        first_name=fields.pop("first_name", "Grace"),
        last_name=fields.pop("last_name", "Hopper"),
        email=fields.pop("email", user.email if user else "guest@example.com"),
        qr_code=generate_qr_code(),
        registration_number=generate_registration_number(),
        registration_status=status,
        **fields,
    )


def make_workshop(event, name=None, max_capacity=10, **fields):
    return Workshop.objects.create(event=event, name=name or f"Workshop {next(_counter)}",
                                   max_capacity=max_capacity, **fields)


def make_time_slots(event, count=2):
    return [
        WorkshopTimeSlot.objects.create(event=event, slot_number=number,
                                        start_time=datetime.time(9 + number, 0),
                                        end_time=datetime.time(10 + number, 0))
        for number in range(1, count + 1)
    ]
