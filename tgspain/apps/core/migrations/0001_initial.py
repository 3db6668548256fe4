from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PlatformSettings",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=50, unique=True)),
                ("value", models.IntegerField(blank=True, null=True)),
                ("value_string", models.CharField(blank=True, max_length=500, null=True)),
            ],
            options={"verbose_name_plural": "platform settings"},
        ),
        migrations.CreateModel(
            name="Hub",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("organization", models.CharField(blank=True, max_length=200)),
                ("location", models.CharField(blank=True, max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("coordinator", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="coordinated_hubs", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("tg_email", models.EmailField(blank=True, max_length=254)),
                ("tg_id", models.CharField(blank=True, max_length=50)),
                ("verification_status", models.CharField(choices=[("pending", "Pendiente"), ("verified", "Verificado"), ("rejected", "Rechazado"), ("manual_review", "Revisión manual")], default="pending", max_length=20)),
                ("first_name", models.CharField(blank=True, max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("dni", models.CharField(blank=True, max_length=15)),
                ("postal_code", models.CharField(blank=True, max_length=10)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=100)),
                ("school_name", models.CharField(blank=True, max_length=200)),
                ("company_name", models.CharField(blank=True, max_length=200)),
                ("parent_name", models.CharField(blank=True, max_length=200)),
                ("parent_email", models.EmailField(blank=True, max_length=254)),
                ("profile_type", models.CharField(blank=True, max_length=50)),
                ("onboarding_completed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("hub", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="profiles", to="core.hub")),
                ("user", models.OneToOneField(on_delete=models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="UserRole",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("participant", "Participante"), ("mentor", "Mentor"), ("judge", "Juez"), ("volunteer", "Voluntario"), ("chapter_ambassador", "Chapter Ambassador"), ("admin", "Administrador")], max_length=30)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="roles", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("user", "role"), name="unique_user_role")],
            },
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("tg_team_id", models.CharField(blank=True, max_length=50, null=True, unique=True)),
                ("category", models.CharField(blank=True, choices=[("beginner", "Beginner"), ("junior", "Junior"), ("senior", "Senior")], max_length=20)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=100)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("hub", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="teams", to="core.hub")),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="TeamMember",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("member_type", models.CharField(choices=[("participant", "Participante"), ("mentor", "Mentor")], default="participant", max_length=20)),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("team", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="members", to="core.team")),
                ("user", models.ForeignKey(on_delete=models.deletion.CASCADE, related_name="team_memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("team", "user"), name="unique_team_member")],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("entity_type", models.CharField(max_length=50)),
                ("entity_id", models.CharField(blank=True, max_length=50)),
                ("changes", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-timestamp"]},
        ),
        migrations.CreateModel(
            name="CSVImport",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file_name", models.CharField(max_length=255)),
                ("status", models.CharField(choices=[("pending", "Pendiente"), ("processing", "Procesando"), ("completed", "Completada"), ("failed", "Fallida")], default="pending", max_length=20)),
                ("users_csv", models.TextField(blank=True)),
                ("teams_csv", models.TextField(blank=True)),
                ("admin_email", models.EmailField(blank=True, max_length=254)),
                ("total_records", models.IntegerField(default=0)),
                ("records_processed", models.IntegerField(default=0)),
                ("records_new", models.IntegerField(default=0)),
                ("records_updated", models.IntegerField(default=0)),
                ("records_activated", models.IntegerField(default=0)),
                ("errors", models.JSONField(blank=True, default=list)),
                ("imported_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("uploaded_by", models.ForeignKey(blank=True, null=True, on_delete=models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-imported_at"], "verbose_name": "CSV import"},
        ),
    ]
