from django.conf import settings
from django.db import models

from tgspain.apps.core.models import Team
from tgspain.apps.events.models import Event


class Workshop(models.Model):
    BEGINNER = "beginner"
    JUNIOR = "junior"
    SENIOR = "senior"
    GENERAL = "general"
    CATEGORY_CHOICES = (
        (BEGINNER, "Beginner"),
        (JUNIOR, "Junior"),
        (SENIOR, "Senior"),
        (GENERAL, "General"),
    )

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="workshops")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=GENERAL)
    max_capacity = models.PositiveIntegerField(default=0)
    location = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class WorkshopTimeSlot(models.Model):
    event = models.ForeignKey(Event,
                              on_delete=models.CASCADE,
                              related_name="workshop_time_slots")
    slot_number = models.PositiveIntegerField()
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["slot_number"]
        constraints = [
            models.UniqueConstraint(fields=["event", "slot_number"],
                                    name="unique_event_slot_number"),
        ]

    def __str__(self):
        return (f"Turno {self.slot_number} "
                f"({self.start_time:%H:%M}-{self.end_time:%H:%M})")


class WorkshopPreference(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="workshop_preferences")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="workshop_preferences")
    workshop = models.ForeignKey(Workshop, on_delete=models.CASCADE, related_name="preferences")
    preference_order = models.PositiveIntegerField()
    submitted_by = models.ForeignKey(settings.AUTH_USER_MODEL,
                                     on_delete=models.SET_NULL,
                                     null=True,
                                     blank=True,
                                     related_name="+")
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["team", "preference_order"]
        constraints = [
            models.UniqueConstraint(fields=["team", "event", "workshop"],
                                    name="unique_team_event_workshop"),
            models.UniqueConstraint(fields=["team", "event", "preference_order"],
                                    name="unique_team_event_order"),
        ]

    def __str__(self):
        return f"{self.team} #{self.preference_order}: {self.workshop}"


class WorkshopAssignment(models.Model):
    SLOT_A = "A"
    SLOT_B = "B"
    SLOT_CHOICES = (
        (SLOT_A, "Taller A"),
        (SLOT_B, "Taller B"),
    )

    ALGORITHM = "algorithm"
    MANUAL = "manual"
    TYPE_CHOICES = (
        (ALGORITHM, "Algoritmo"),
        (MANUAL, "Manual"),
    )

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="workshop_assignments")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="workshop_assignments")
    workshop = models.ForeignKey(Workshop, on_delete=models.CASCADE, related_name="assignments")
    time_slot = models.ForeignKey(WorkshopTimeSlot,
                                  on_delete=models.CASCADE,
                                  related_name="assignments")
    assignment_slot = models.CharField(max_length=1, choices=SLOT_CHOICES)
    preference_matched = models.PositiveIntegerField(null=True, blank=True)
    assignment_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=ALGORITHM)
    assigned_by = models.ForeignKey(settings.AUTH_USER_MODEL,
                                    on_delete=models.SET_NULL,
                                    null=True,
                                    blank=True,
                                    related_name="+")
    assigned_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["team", "assignment_slot"]
        constraints = [
            models.UniqueConstraint(fields=["team", "event", "assignment_slot"],
                                    name="unique_team_event_assignment_slot"),
        ]

    def __str__(self):
        return f"{self.team} {self.assignment_slot}: {self.workshop} @ {self.time_slot}"
