import uuid

from django.conf import settings
from django.db import models

from tgspain.apps.core.models import Team


class Event(models.Model):
    INTERMEDIATE = "intermediate"
    REGIONAL_FINAL = "regional_final"
    WORKSHOP = "workshop"
    EVENT_TYPE_CHOICES = (
        (INTERMEDIATE, "Evento intermedio"),
        (REGIONAL_FINAL, "Final regional"),
        (WORKSHOP, "Taller"),
    )

    DRAFT = "draft"
    PUBLISHED = "published"
    STATUS_CHOICES = (
        (DRAFT, "Borrador"),
        (PUBLISHED, "Publicado"),
    )

    name = models.CharField(max_length=200)
    event_type = models.CharField(max_length=30,
                                  choices=EVENT_TYPE_CHOICES,
                                  default=INTERMEDIATE)
    date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=DRAFT)
    description = models.TextField(blank=True)
    location_name = models.CharField(max_length=200, blank=True)
    location_address = models.CharField(max_length=300, blank=True)
    location_city = models.CharField(max_length=100, blank=True)
    image_url = models.URLField(blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    max_capacity = models.PositiveIntegerField(null=True, blank=True)
    current_registrations = models.PositiveIntegerField(default=0)
    registration_open_date = models.DateField(null=True, blank=True)
    registration_close_date = models.DateField(null=True, blank=True)
    workshop_preferences_open = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "name"]

    def __str__(self):
        return f"{self.name} ({self.date})"

    @property
    def is_published(self):
        return self.status == self.PUBLISHED

    def is_registration_open(self, today):
        if not self.is_published:
            return False
        if self.registration_open_date and today < self.registration_open_date:
            return False
        if self.registration_close_date and today > self.registration_close_date:
            return False
        return today <= self.date


class TicketType(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    max_capacity = models.PositiveIntegerField(default=0)
    current_count = models.PositiveIntegerField(default=0)
    max_companions = models.PositiveIntegerField(default=0)
    # Empty list means every role may pick this ticket
    allowed_roles = models.JSONField(default=list, blank=True)
    requires_team = models.BooleanField(default=False)
    requires_verification = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self):
        return f"{self.event.name}: {self.name}"

    @property
    def available_spots(self):
        return max(self.max_capacity - self.current_count, 0)


class EventRegistration(models.Model):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    CHECKED_IN = "checked_in"
    STATUS_CHOICES = (
        (CONFIRMED, "Confirmada"),
        (CANCELLED, "Cancelada"),
        (CHECKED_IN, "Check-in realizado"),
    )

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    ticket_type = models.ForeignKey(TicketType,
                                    on_delete=models.SET_NULL,
                                    null=True,
                                    blank=True,
                                    related_name="registrations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL,
                             on_delete=models.SET_NULL,
                             null=True,
                             blank=True,
                             related_name="event_registrations")
    team = models.ForeignKey(Team,
                             on_delete=models.SET_NULL,
                             null=True,
                             blank=True,
                             related_name="event_registrations")
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    dni = models.CharField(max_length=15, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    team_name = models.CharField(max_length=200, blank=True)
    tg_email = models.EmailField(blank=True)
    is_companion = models.BooleanField(default=False)
    qr_code = models.CharField(max_length=30, unique=True)
    registration_number = models.CharField(max_length=30, unique=True)
    registration_status = models.CharField(max_length=20,
                                           choices=STATUS_CHOICES,
                                           default=CONFIRMED)
    image_consent = models.BooleanField(default=False)
    data_consent = models.BooleanField(default=False)
    consent_token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_in_by = models.ForeignKey(settings.AUTH_USER_MODEL,
                                      on_delete=models.SET_NULL,
                                      null=True,
                                      blank=True,
                                      related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.registration_number} ({self.display_name})"

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_cancelled(self):
        return self.registration_status == self.CANCELLED

    @property
    def is_checked_in(self):
        return (self.checked_in_at is not None
                or self.registration_status == self.CHECKED_IN)


class Companion(models.Model):
    event_registration = models.ForeignKey(EventRegistration,
                                           on_delete=models.CASCADE,
                                           related_name="companions")
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    dni = models.CharField(max_length=15, blank=True)
    relationship = models.CharField(max_length=50, blank=True)
    qr_code = models.CharField(max_length=30, unique=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.display_name} ({self.qr_code})"

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class EventTicketConsent(models.Model):
    SELF = "self"
    MOTHER = "madre"
    FATHER = "padre"
    GUARDIAN = "tutor"
    RELATIONSHIP_CHOICES = (
        (SELF, "Yo mismo/a"),
        (MOTHER, "Madre"),
        (FATHER, "Padre"),
        (GUARDIAN, "Tutor/a legal"),
    )

    event_registration = models.OneToOneField(EventRegistration,
                                              on_delete=models.CASCADE,
                                              related_name="consent")
    signer_full_name = models.CharField(max_length=200)
    signer_dni = models.CharField(max_length=15)
    signer_relationship = models.CharField(max_length=10, choices=RELATIONSHIP_CHOICES)
    signature = models.CharField(max_length=200)
    minor_name = models.CharField(max_length=200, blank=True)
    minor_age = models.PositiveSmallIntegerField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    signed_at = models.DateTimeField()

    def __str__(self):
        return f"Consent {self.event_registration.registration_number}"


class EventVolunteer(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="volunteers")
    user = models.ForeignKey(settings.AUTH_USER_MODEL,
                             on_delete=models.CASCADE,
                             related_name="volunteer_shifts")
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "user"],
                                    name="unique_event_volunteer"),
        ]


class EventEmail(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="emails")
    subject = models.CharField(max_length=200)
    body = models.TextField()
    recipients_count = models.IntegerField(default=0)
    sent_by = models.ForeignKey(settings.AUTH_USER_MODEL,
                                on_delete=models.SET_NULL,
                                null=True,
                                blank=True,
                                related_name="+")
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sent_at"]
