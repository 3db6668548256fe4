import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from tgspain.apps.core.models import Profile, UserRole
from tgspain.libs.data_import import CsvWorkbook, InvalidWorkbookException, WorkbookImporter, field
from tgspain.libs.validation import is_valid_email, normalize_email

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ("Email",)

ROLE_MAP = {
    "student": UserRole.PARTICIPANT,
    "participant": UserRole.PARTICIPANT,
    "mentor": UserRole.MENTOR,
    "judge": UserRole.JUDGE,
    "chapter_ambassador": UserRole.CHAPTER_AMBASSADOR,
}

PROFILE_COLUMNS = {
    "first_name": ("First name", "first_name"),
    "last_name": ("Last name", "last_name"),
    "phone": ("Phone number", "phone"),
    "tg_id": ("Participant ID", "Mentor ID", "tg_id"),
    "parent_name": ("Parent guardian name", "parent_name"),
    "parent_email": ("Parent guardian email", "parent_email"),
    "school_name": ("School name", "school_name"),
    "company_name": ("Company name", "company_name"),
    "city": ("City", "city"),
    "state": ("State", "state"),
    "profile_type": ("Profile type", "profile_type"),
}


def import_users(file_contents):
    try:
        workbook = CsvWorkbook(file_contents, REQUIRED_HEADERS)
    except InvalidWorkbookException as exc:
        return None, [{"error": f"CSV de usuarios: {exc}"}]
    importer = UserImporter(workbook)
    return importer, importer.import_data()


def map_role(profile_type):
    """Registry profile type to platform role. Admin is never granted"""
    key = "_".join((profile_type or "").lower().split())
    role = ROLE_MAP.get(key)
    if role == UserRole.ADMIN:
        return None
    return role


def extract_profile_fields(row):
    return {name: field(row, *columns) for name, columns in PROFILE_COLUMNS.items()}


def assign_role(user, role):
    """A registry import leaves each user with a single non-admin role"""
    if not role:
        return
    UserRole.objects.filter(user=user).exclude(
        role__in=[role, UserRole.ADMIN]).delete()
    UserRole.objects.get_or_create(user=user, role=role)


class UserImporter(WorkbookImporter):
    def prepare_rows(self):
        by_email = {}
        duplicates = 0
        for row_number, row in enumerate(self.workbook.rows()):
            email = normalize_email(field(row, "Email", "email"))
            if not email:
                self.error("Fila sin email", row_number)
                continue
            if not is_valid_email(email):
                self.error("Email no válido", row_number, email=email)
                continue
            if email in by_email:
                duplicates += 1
            # Last row for an email wins
            by_email[email] = (row_number, row)
        if duplicates:
            self.error(f"{duplicates} fila(s) con email duplicado; se usa la última")
        return list(by_email.values())

    def import_row(self, row, row_number):
        email = normalize_email(field(row, "Email", "email"))
        data = extract_profile_fields(row)
        role = map_role(data["profile_type"])
        profile = (Profile.objects.select_related("user")
                   .filter(email__iexact=email).first())

        try:
            with transaction.atomic():
                if profile is None:
                    self.create_user(email, data, role)
                    self.new += 1
                elif profile.verification_status == Profile.PENDING:
                    self.apply(profile, data, verify=True)
                    assign_role(profile.user, role)
                    self.activated += 1
                elif self.has_changes(profile, data, role):
                    self.apply(profile, data)
                    assign_role(profile.user, role)
                    self.updated += 1
        except DatabaseError as exc:
            logger.exception("Could not import user row %s", row_number)
            self.error(f"Error al procesar el usuario: {exc}", row_number, email=email)

    def create_user(self, email, data, role):
        user_model = get_user_model()
        user = user_model.objects.filter(email__iexact=email).first()
        if user is None:
            user = user_model.objects.create_user(
                username=email[:150],
                email=email,
                first_name=data["first_name"][:150],
                last_name=data["last_name"][:150],
            )
        profile, _ = Profile.objects.get_or_create(user=user)
        profile.email = email
        self.apply(profile, data, verify=True)
        assign_role(user, role)
        logger.info("Imported new user %s", user.pk)
        return user

    @staticmethod
    def apply(profile, data, verify=False):
        for name, value in data.items():
            if value:
                max_length = Profile._meta.get_field(name).max_length
                setattr(profile, name, value[:max_length])
        if verify:
            profile.verification_status = Profile.VERIFIED
        profile.save()

    @staticmethod
    def has_changes(profile, data, role):
        for name, value in data.items():
            if value and (getattr(profile, name) or "") != value:
                return True
        if role:
            current = set(profile.user.roles.values_list("role", flat=True))
            current.discard(UserRole.ADMIN)
            return current != {role}
        return False
