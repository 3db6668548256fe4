from django.conf import settings
from django.db import models

from tgspain.libs import cache_logic


class PlatformSettings(models.Model):
    key = models.CharField(max_length=50, unique=True)
    value = models.IntegerField(null=True, blank=True)
    value_string = models.CharField(max_length=500, null=True, blank=True)

    class Meta:
        verbose_name_plural = "platform settings"

    def __str__(self):
        display_value = (self.value_string if self.value_string is not None
                         else self.value)
        return f"{self.key} => {display_value}"

    @classmethod
    def get(cls, key, default=None):
        def safe_get():
            setting = cls.objects.filter(key=key).first()
            if setting is not None:
                return (setting.value_string if setting.value_string
                        is not None else setting.value)
            return None

        result = cache_logic.cache_fxn_key(
            safe_get,
            f"platform_settings_{key}",
            cache_logic.PERSISTENT,
        )
        if result is None and default is None:
            raise ValueError(f"No PlatformSettings with key '{key}'")
        elif result is None:
            return default
        else:
            return result

    @classmethod
    def set(cls, key, value):
        if isinstance(value, str):
            value_string = value
            value_num = None
        else:
            value_num = value
            value_string = None

        cls.objects.update_or_create(
            key=key,
            defaults={"value": value_num, "value_string": value_string},
        )

    def delete(self, using=None, keep_parents=False):
        cache_logic.invalidate_cache(f"platform_settings_{self.key}",
                                     cache_logic.PERSISTENT)
        super(PlatformSettings, self).delete(using, keep_parents)

    def save(self, *args, **kwargs):
        cache_logic.invalidate_cache(f"platform_settings_{self.key}",
                                     cache_logic.PERSISTENT)
        super(PlatformSettings, self).save(*args, **kwargs)


class Hub(models.Model):
    name = models.CharField(max_length=100, unique=True)
    organization = models.CharField(max_length=200, blank=True)
    location = models.CharField(max_length=200, blank=True)
    coordinator = models.ForeignKey(settings.AUTH_USER_MODEL,
                                    on_delete=models.SET_NULL,
                                    null=True,
                                    blank=True,
                                    related_name="coordinated_hubs")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Profile(models.Model):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    MANUAL_REVIEW = "manual_review"
    VERIFICATION_CHOICES = (
        (PENDING, "Pendiente"),
        (VERIFIED, "Verificado"),
        (REJECTED, "Rechazado"),
        (MANUAL_REVIEW, "Revisión manual"),
    )

    REQUIRED_FIELDS = ("first_name", "last_name", "date_of_birth", "dni",
                       "hub", "postal_code")
    CSV_OPTIONAL_FIELDS = ("phone", "city", "state", "school_name",
                           "company_name", "parent_name", "parent_email")

    user = models.OneToOneField(settings.AUTH_USER_MODEL,
                                on_delete=models.CASCADE,
                                related_name="profile")
    email = models.EmailField(blank=True)
    tg_email = models.EmailField(blank=True)
    tg_id = models.CharField(max_length=50, blank=True)
    verification_status = models.CharField(max_length=20,
                                           choices=VERIFICATION_CHOICES,
                                           default=PENDING)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    dni = models.CharField(max_length=15, blank=True)
    postal_code = models.CharField(max_length=10, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    school_name = models.CharField(max_length=200, blank=True)
    company_name = models.CharField(max_length=200, blank=True)
    parent_name = models.CharField(max_length=200, blank=True)
    parent_email = models.EmailField(blank=True)
    profile_type = models.CharField(max_length=50, blank=True)
    hub = models.ForeignKey(Hub,
                            on_delete=models.SET_NULL,
                            null=True,
                            blank=True,
                            related_name="profiles")
    onboarding_completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name or self.email

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_verified(self):
        return self.verification_status == self.VERIFIED

    def missing_fields(self):
        return [field for field in self.REQUIRED_FIELDS + self.CSV_OPTIONAL_FIELDS
                if not getattr(self, field)]

    def has_missing_fields(self):
        return any(not getattr(self, field) for field in self.REQUIRED_FIELDS)


class UserRole(models.Model):
    PARTICIPANT = "participant"
    MENTOR = "mentor"
    JUDGE = "judge"
    VOLUNTEER = "volunteer"
    CHAPTER_AMBASSADOR = "chapter_ambassador"
    ADMIN = "admin"
    ROLE_CHOICES = (
        (PARTICIPANT, "Participante"),
        (MENTOR, "Mentor"),
        (JUDGE, "Juez"),
        (VOLUNTEER, "Voluntario"),
        (CHAPTER_AMBASSADOR, "Chapter Ambassador"),
        (ADMIN, "Administrador"),
    )

    user = models.ForeignKey(settings.AUTH_USER_MODEL,
                             on_delete=models.CASCADE,
                             related_name="roles")
    role = models.CharField(max_length=30, choices=ROLE_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "role"],
                                    name="unique_user_role"),
        ]

    def __str__(self):
        return f"{self.user} => {self.role}"


class Team(models.Model):
    BEGINNER = "beginner"
    JUNIOR = "junior"
    SENIOR = "senior"
    CATEGORY_CHOICES = (
        (BEGINNER, "Beginner"),
        (JUNIOR, "Junior"),
        (SENIOR, "Senior"),
    )

    name = models.CharField(max_length=200)
    tg_team_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, blank=True)
    hub = models.ForeignKey(Hub,
                            on_delete=models.SET_NULL,
                            null=True,
                            blank=True,
                            related_name="teams")
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class TeamMember(models.Model):
    PARTICIPANT = "participant"
    MENTOR = "mentor"
    MEMBER_TYPE_CHOICES = (
        (PARTICIPANT, "Participante"),
        (MENTOR, "Mentor"),
    )

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    user = models.ForeignKey(settings.AUTH_USER_MODEL,
                             on_delete=models.CASCADE,
                             related_name="team_memberships")
    member_type = models.CharField(max_length=20,
                                   choices=MEMBER_TYPE_CHOICES,
                                   default=PARTICIPANT)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["team", "user"],
                                    name="unique_team_member"),
        ]

    def __str__(self):
        return f"{self.user} ({self.member_type}) @ {self.team}"


class AuditLog(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL,
                             on_delete=models.SET_NULL,
                             null=True,
                             blank=True,
                             related_name="+")
    action = models.CharField(max_length=50)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=50, blank=True)
    changes = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp"]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"

    @classmethod
    def record(cls, user, action, entity, changes=None):
        return cls.objects.create(
            user=user if user is not None and user.is_authenticated else None,
            action=action,
            entity_type=entity._meta.model_name,
            entity_id=str(entity.pk),
            changes=changes or {},
        )


class CSVImport(models.Model):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    STATUS_CHOICES = (
        (PENDING, "Pendiente"),
        (PROCESSING, "Procesando"),
        (COMPLETED, "Completada"),
        (FAILED, "Fallida"),
    )

    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL,
                                    on_delete=models.SET_NULL,
                                    null=True,
                                    blank=True,
                                    related_name="+")
    file_name = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    users_csv = models.TextField(blank=True)
    teams_csv = models.TextField(blank=True)
    admin_email = models.EmailField(blank=True)
    total_records = models.IntegerField(default=0)
    records_processed = models.IntegerField(default=0)
    records_new = models.IntegerField(default=0)
    records_updated = models.IntegerField(default=0)
    records_activated = models.IntegerField(default=0)
    errors = models.JSONField(default=list, blank=True)
    imported_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-imported_at"]
        verbose_name = "CSV import"

    def __str__(self):
        return f"{self.file_name} ({self.status})"
