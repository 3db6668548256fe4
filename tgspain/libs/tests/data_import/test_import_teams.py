import pytest

from tgspain.apps.core.models import Team, TeamMember, UserRole
from tgspain.libs.data_import.import_teams import TeamImporter, import_teams, parse_email_list
from tgspain.libs.tests.data_import import MockWorkbook
from tgspain.libs.tests.helpers import make_team, make_user


def row(team_id, **fields):
    data = {"Team ID": team_id}
    data.update(fields)
    return data


@pytest.mark.django_db
def test_teams_are_created_with_their_members():
    student = make_user(email="student@example.com")
    mentor = make_user(email="mentor@example.com", role=UserRole.MENTOR)

    importer = TeamImporter(MockWorkbook([
        row("T-1", Name="Las Coders", Division="Junior", City="Madrid",
            **{"Student emails": "Student@example.com, nobody@example.com",
               "Mentor emails": "mentor@example.com"}),
        row("T-2", Division="unknown"),
    ]))
    errors = importer.import_data()

    assert importer.new == 2
    assert errors == [{
        "error": "Email de estudiante sin usuario verificado (equipo T-1)",
        "row": 2,
        "email": "nobody@example.com",
    }]

    team = Team.objects.get(tg_team_id="T-1")
    assert team.name == "Las Coders"
    assert team.category == Team.JUNIOR
    assert team.city == "Madrid"
    members = {(m.user, m.member_type) for m in team.members.all()}
    assert members == {(student, TeamMember.PARTICIPANT), (mentor, TeamMember.MENTOR)}

    unnamed = Team.objects.get(tg_team_id="T-2")
    assert unnamed.name == "Team T-2"
    assert unnamed.category == ""


@pytest.mark.django_db
def test_existing_teams_are_updated():
    make_team(name="Viejo nombre", tg_team_id="T-1", city="Sevilla")
    make_team(name="Igual", tg_team_id="T-2")

    importer = TeamImporter(MockWorkbook([
        row("T-1", Name="Nuevo nombre", City=""),
        row("T-2", Name="Igual"),
    ]))
    importer.import_data()

    assert importer.updated == 1
    assert importer.new == 0
    team = Team.objects.get(tg_team_id="T-1")
    assert team.name == "Nuevo nombre"
    assert team.city == "Sevilla"


@pytest.mark.django_db
def test_members_are_not_linked_twice():
    student = make_user(email="student@example.com")
    team = make_team(tg_team_id="T-1", participants=[student])

    importer = TeamImporter(MockWorkbook([
        row("T-1", **{"Student emails": "student@example.com"}),
    ]))
    assert not importer.import_data()
    assert team.members.count() == 1


@pytest.mark.django_db
def test_unverified_members_are_reported():
    make_user(email="pending@example.com", verified=False)

    importer = TeamImporter(MockWorkbook([
        row("T-1", **{"Mentor emails": "pending@example.com"}),
    ]))
    errors = importer.import_data()

    assert errors[0]["error"] == "Email de mentor sin usuario verificado (equipo T-1)"
    assert not TeamMember.objects.exists()


@pytest.mark.django_db
def test_rows_without_team_id():
    importer = TeamImporter(MockWorkbook([row(""), row("T-9"), row("T-9", Name="Final")]))
    errors = importer.import_data()

    assert errors == [{"error": "Fila sin Team ID", "row": 2}]
    assert importer.processed == 1
    assert Team.objects.get().name == "Final"


@pytest.mark.django_db
def test_import_teams_requires_team_id_column():
    importer, errors = import_teams(b"Name\nLas Coders\n")
    assert importer is None
    assert errors == [{"error": "CSV de equipos: Faltan columnas obligatorias: Team ID"}]


def test_parse_email_list():
    assert parse_email_list(" A@x.com,, b@y.com ,nope") == ["a@x.com", "b@y.com"]
    assert parse_email_list("") == []
