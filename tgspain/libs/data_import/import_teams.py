import logging

from django.db import DatabaseError, transaction

from tgspain.apps.core.models import Profile, Team, TeamMember
from tgspain.libs.data_import import CsvWorkbook, InvalidWorkbookException, WorkbookImporter, field
from tgspain.libs.validation import normalize_email

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ("Team ID",)

CATEGORY_VALUES = {
    "beginner": Team.BEGINNER,
    "junior": Team.JUNIOR,
    "senior": Team.SENIOR,
}


def import_teams(file_contents):
    try:
        workbook = CsvWorkbook(file_contents, REQUIRED_HEADERS)
    except InvalidWorkbookException as exc:
        return None, [{"error": f"CSV de equipos: {exc}"}]
    importer = TeamImporter(workbook)
    return importer, importer.import_data()


def parse_email_list(value):
    return [email for email in (normalize_email(part) for part in (value or "").split(","))
            if email and "@" in email]


class TeamImporter(WorkbookImporter):
    def prepare_rows(self):
        by_team_id = {}
        for row_number, row in enumerate(self.workbook.rows()):
            tg_team_id = field(row, "Team ID", "team_id")
            if not tg_team_id:
                self.error("Fila sin Team ID", row_number)
                continue
            by_team_id[tg_team_id] = (row_number, row)
        return list(by_team_id.values())

    def import_row(self, row, row_number):
        tg_team_id = field(row, "Team ID", "team_id")
        try:
            with transaction.atomic():
                team = self.upsert_team(tg_team_id, row)
                self.link_members(team, row, row_number)
        except DatabaseError as exc:
            logger.exception("Could not import team %s", tg_team_id)
            self.error(f"Error al procesar el equipo {tg_team_id}: {exc}", row_number)

    def upsert_team(self, tg_team_id, row):
        values = {
            "name": field(row, "Name", "name")[:200],
            "category": CATEGORY_VALUES.get(field(row, "Division", "division").lower(), ""),
            "city": field(row, "City", "city")[:100],
            "state": field(row, "State", "state")[:100],
        }
        team = Team.objects.filter(tg_team_id=tg_team_id).first()
        if team is None:
            values["name"] = values["name"] or f"Team {tg_team_id}"
            self.new += 1
            return Team.objects.create(tg_team_id=tg_team_id, **values)

        changed = [name for name, value in values.items()
                   if value and getattr(team, name) != value]
        if changed:
            for name in changed:
                setattr(team, name, values[name])
            team.save()
            self.updated += 1
        return team

    def link_members(self, team, row, row_number):
        wanted = [(email, TeamMember.PARTICIPANT)
                  for email in parse_email_list(field(row, "Student emails", "student_emails"))]
        wanted += [(email, TeamMember.MENTOR)
                   for email in parse_email_list(field(row, "Mentor emails", "mentor_emails"))]
        if not wanted:
            return

        profiles = {
            normalize_email(profile.email): profile
            for profile in Profile.objects.filter(
                verification_status=Profile.VERIFIED,
                email__in=[email for email, _ in wanted])
        }
        existing = set(team.members.values_list("user_id", flat=True))

        for email, member_type in wanted:
            profile = profiles.get(email)
            if profile is None:
                label = "estudiante" if member_type == TeamMember.PARTICIPANT else "mentor"
                self.error(f"Email de {label} sin usuario verificado (equipo {team.tg_team_id})",
                           row_number, email=email)
                continue
            if profile.user_id in existing:
                continue
            TeamMember.objects.create(team=team, user_id=profile.user_id,
                                      member_type=member_type)
            existing.add(profile.user_id)
