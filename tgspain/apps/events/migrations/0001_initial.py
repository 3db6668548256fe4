import uuid

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("event_type", models.CharField(choices=[("intermediate", "Evento intermedio"), ("regional_final", "Final regional"), ("workshop", "Taller")], default="intermediate", max_length=30)),
                ("date", models.DateField()),
                ("status", models.CharField(choices=[("draft", "Borrador"), ("published", "Publicado")], default="draft", max_length=20)),
                ("description", models.TextField(blank=True)),
                ("location_name", models.CharField(blank=True, max_length=200)),
                ("location_address", models.CharField(blank=True, max_length=300)),
                ("location_city", models.CharField(blank=True, max_length=100)),
                ("image_url", models.URLField(blank=True)),
                ("start_time", models.TimeField(blank=True, null=True)),
                ("end_time", models.TimeField(blank=True, null=True)),
                ("max_capacity", models.PositiveIntegerField(blank=True, null=True)),
                ("current_registrations", models.PositiveIntegerField(default=0)),
                ("registration_open_date", models.DateField(blank=True, null=True)),
                ("registration_close_date", models.DateField(blank=True, null=True)),
                ("workshop_preferences_open", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["date", "name"]},
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                ("max_capacity", models.PositiveIntegerField(default=0)),
                ("current_count", models.PositiveIntegerField(default=0)),
                ("max_companions", models.PositiveIntegerField(default=0)),
                ("allowed_roles", models.JSONField(blank=True, default=list)),
                ("requires_team", models.BooleanField(default=False)),
                ("requires_verification", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.IntegerField(default=0)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="ticket_types", to="events.event")),
            ],
            options={"ordering": ["sort_order", "name"]},
        ),
        migrations.CreateModel(
            name="EventRegistration",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(blank=True, max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("dni", models.CharField(blank=True, max_length=15)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("team_name", models.CharField(blank=True, max_length=200)),
                ("tg_email", models.EmailField(blank=True, max_length=254)),
                ("is_companion", models.BooleanField(default=False)),
                ("qr_code", models.CharField(max_length=30, unique=True)),
                ("registration_number", models.CharField(max_length=30, unique=True)),
                ("registration_status", models.CharField(choices=[("confirmed", "Confirmada"), ("cancelled", "Cancelada"), ("checked_in", "Check-in realizado")], default="confirmed", max_length=20)),
                ("image_consent", models.BooleanField(default=False)),
                ("data_consent", models.BooleanField(default=False)),
                ("consent_token", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("checked_in_by", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="registrations", to="events.event")),
                ("team", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="event_registrations", to="core.team")),
                ("ticket_type", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="registrations", to="events.tickettype")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="event_registrations", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["created_at"]},
        ),
        migrations.CreateModel(
            name="Companion",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(blank=True, max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("dni", models.CharField(blank=True, max_length=15)),
                ("relationship", models.CharField(blank=True, max_length=50)),
                ("qr_code", models.CharField(max_length=30, unique=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("event_registration", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="companions", to="events.eventregistration")),
            ],
        ),
        migrations.CreateModel(
            name="EventTicketConsent",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("signer_full_name", models.CharField(max_length=200)),
                ("signer_dni", models.CharField(max_length=15)),
                ("signer_relationship", models.CharField(choices=[("self", "Yo mismo/a"), ("madre", "Madre"), ("padre", "Padre"), ("tutor", "Tutor/a legal")], max_length=10)),
                ("signature", models.CharField(max_length=200)),
                ("minor_name", models.CharField(blank=True, max_length=200)),
                ("minor_age", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("signed_at", models.DateTimeField()),
                ("event_registration", models.OneToOneField(on_delete=models.deletion.CASCADE, related_name="consent", to="events.eventregistration")),
            ],
        ),
        migrations.CreateModel(
            name="EventVolunteer",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="volunteers", to="events.event")),
                ("user", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="volunteer_shifts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("event", "user"), name="unique_event_volunteer")],
            },
        ),
        migrations.CreateModel(
            name="EventEmail",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("subject", models.CharField(max_length=200)),
                ("body", models.TextField()),
                ("recipients_count", models.IntegerField(default=0)),
                ("sent_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="emails", to="events.event")),
                ("sent_by", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-sent_at"]},
        ),
    ]
