from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("core", "0001_initial"),
        ("events", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Workshop",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(choices=[("beginner", "Beginner"), ("junior", "Junior"), ("senior", "Senior"), ("general", "General")], default="general", max_length=20)),
                ("max_capacity", models.PositiveIntegerField(default=0)),
                ("location", models.CharField(blank=True, max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="workshops", to="events.event")),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="WorkshopTimeSlot",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slot_number", models.PositiveIntegerField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="workshop_time_slots", to="events.event")),
            ],
            options={
                "ordering": ["slot_number"],
                "constraints": [models.UniqueConstraint(fields=("event", "slot_number"), name="unique_event_slot_number")],
            },
        ),
        migrations.CreateModel(
            name="WorkshopPreference",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("preference_order", models.PositiveIntegerField()),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="workshop_preferences", to="events.event")),
                ("submitted_by", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("team", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="workshop_preferences", to="core.team")),
                ("workshop", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="preferences", to="workshops.workshop")),
            ],
            options={
                "ordering": ["team", "preference_order"],
                "constraints": [
                    models.UniqueConstraint(fields=("team", "event", "workshop"), name="unique_team_event_workshop"),
                    models.UniqueConstraint(fields=("team", "event", "preference_order"), name="unique_team_event_order"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WorkshopAssignment",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("assignment_slot", models.CharField(choices=[("A", "Taller A"), ("B", "Taller B")], max_length=1)),
                ("preference_matched", models.PositiveIntegerField(blank=True, null=True)),
                ("assignment_type", models.CharField(choices=[("algorithm", "Algoritmo"), ("manual", "Manual")], default="algorithm", max_length=20)),
                ("assigned_at", models.DateTimeField(auto_now=True)),
                ("assigned_by", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="workshop_assignments", to="events.event")),
                ("team", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="workshop_assignments", to="core.team")),
                ("time_slot", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="assignments", to="workshops.workshoptimeslot")),
                ("workshop", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="assignments", to="workshops.workshop")),
            ],
            options={
                "ordering": ["team", "assignment_slot"],
                "constraints": [models.UniqueConstraint(fields=("team", "event", "assignment_slot"), name="unique_team_event_assignment_slot")],
            },
        ),
    ]
