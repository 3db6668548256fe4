import pytest

from tgspain.apps.core.models import AuditLog, CSVImport, Profile, Team
from tgspain.libs.data_import import process
from tgspain.libs.tests.helpers import make_user

USERS_CSV = ("Email,First name,Profile type\n"
             "ada@example.com,Ada,Student\n"
             "grace@example.com,Grace,Mentor\n"
             "broken,Nope,Student\n")
TEAMS_CSV = ("Team ID,Name,Student emails,Mentor emails\n"
             "T-1,Las Coders,ada@example.com,grace@example.com\n")


@pytest.fixture
def sent(monkeypatch):
    requests = []

    def fake_deliver(batch, context, service=None):
        batch = list(batch)
        requests.extend(batch)
        return len(batch)

    monkeypatch.setattr(process, "deliver", fake_deliver)
    return requests


@pytest.mark.django_db
def test_users_are_imported_before_teams(sent):
    admin = make_user(email="admin@example.com")
    csv_import = CSVImport.objects.create(uploaded_by=admin, file_name="export.csv",
                                          users_csv=USERS_CSV, teams_csv=TEAMS_CSV,
                                          admin_email="admin@example.com")

    result = process.process_import(csv_import)

    assert result.status == CSVImport.COMPLETED
    assert result.records_new == 3
    assert result.records_processed == 3
    assert result.total_records == 3
    assert result.completed_at is not None
    assert result.errors == [{"error": "Email no válido", "row": 4, "email": "broken"}]

    team = Team.objects.get(tg_team_id="T-1")
    assert team.members.count() == 2
    assert Profile.objects.get(email="ada@example.com").is_verified

    assert AuditLog.objects.get(action="csv_import").changes["errors"] == 1
    assert len(sent) == 1
    assert sent[0].to_address == "admin@example.com"
    assert sent[0].subject.startswith("Importación completada: 3 nuevos")


@pytest.mark.django_db
def test_only_pending_imports_are_processed(sent):
    csv_import = CSVImport.objects.create(file_name="a.csv", users_csv=USERS_CSV,
                                          status=CSVImport.COMPLETED)

    assert process.process_import(csv_import).status == CSVImport.COMPLETED
    assert not Profile.objects.filter(email="ada@example.com").exists()


@pytest.mark.django_db
def test_empty_import_fails(sent):
    csv_import = CSVImport.objects.create(file_name="empty.csv")

    result = process.process_import(csv_import)

    assert result.status == CSVImport.FAILED
    assert result.errors == [{"error": "La importación no contiene ningún CSV"}]
    assert not sent


@pytest.mark.django_db
def test_bad_headers_are_reported(sent):
    csv_import = CSVImport.objects.create(file_name="bad.csv",
                                          users_csv="Nombre\nAda\n",
                                          admin_email="admin@example.com")

    result = process.process_import(csv_import)

    assert result.status == CSVImport.COMPLETED
    assert result.errors == [
        {"error": "CSV de usuarios: Faltan columnas obligatorias: Email"}]
    assert "1 errores" in sent[0].subject
