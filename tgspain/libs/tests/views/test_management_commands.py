from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.test import TestCase

from tgspain.apps.core.models import CSVImport, Profile
from tgspain.apps.workshops.models import WorkshopAssignment, WorkshopPreference
from tgspain.libs.tests.helpers import (
    make_event, make_registration, make_team, make_time_slots, make_workshop
)


@pytest.mark.django_db
class TestProcessCsvImportCommand(TestCase):
    def test_pending_imports_are_processed(self):
        pending = CSVImport.objects.create(
            file_name="usuarios.csv",
            users_csv="Email,Profile type\nada@example.com,Student\n")
        CSVImport.objects.create(file_name="hecho.csv", status=CSVImport.COMPLETED)

        out = StringIO()
        call_command("process_csv_import", stdout=out)

        pending.refresh_from_db()
        self.assertEqual(pending.status, CSVImport.COMPLETED)
        self.assertTrue(Profile.objects.filter(email="ada@example.com").exists())
        self.assertIn("usuarios.csv: completed (1 new", out.getvalue())
        self.assertNotIn("hecho.csv", out.getvalue())

    def test_unknown_ids_are_an_error(self):
        with self.assertRaises(CommandError):
            call_command("process_csv_import", "999")


@pytest.mark.django_db
class TestRunWorkshopAssignmentCommand(TestCase):
    def setUp(self):
        self.event = make_event()
        workshops = [make_workshop(self.event, name="Apps"),
                     make_workshop(self.event, name="Robots")]
        make_time_slots(self.event)
        team = make_team(name="Las Coders")
        make_registration(self.event, team=team)
        for order, workshop in enumerate(workshops, start=1):
            WorkshopPreference.objects.create(team=team, event=self.event,
                                              workshop=workshop, preference_order=order)

    def test_dry_run_prints_without_saving(self):
        out = StringIO()
        call_command("run_workshop_assignment", str(self.event.pk), "--dry-run", stdout=out)

        self.assertIn("Las Coders", out.getvalue())
        self.assertIn("1 teams: 1 fully assigned", out.getvalue())
        self.assertFalse(WorkshopAssignment.objects.exists())

    def test_run_saves_assignments(self):
        call_command("run_workshop_assignment", str(self.event.pk), stdout=StringIO())
        self.assertEqual(WorkshopAssignment.objects.count(), 2)

    def test_missing_configuration(self):
        with self.assertRaises(CommandError):
            call_command("run_workshop_assignment", str(make_event().pk))
        with self.assertRaises(CommandError):
            call_command("run_workshop_assignment", "999")
