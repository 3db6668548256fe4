from django.core.management.base import BaseCommand, CommandError

from tgspain.apps.events.models import Event
from tgspain.libs.errors import AssignmentError
from tgspain.libs.workshop_logic.assignment import run_assignment


class Command(BaseCommand):
    help = "Assign workshops A and B to every team registered for an event"

    def add_arguments(self, parser):
        parser.add_argument("event_id", type=int)
        parser.add_argument("--dry-run",
                            dest="dry_run",
                            action="store_true",
                            default=False,
                            help="Print the assignment without saving it")

    def handle(self, *args, **options):
        event = Event.objects.filter(pk=options["event_id"]).first()
        if event is None:
            raise CommandError(f"Event {options['event_id']} does not exist")
        try:
            results, stats = run_assignment(event, dry_run=options["dry_run"])
        except AssignmentError as e:
            raise CommandError(str(e))

        for result in results:
            workshop_a = result.workshop_a.workshop_name if result.workshop_a else "-"
            workshop_b = result.workshop_b.workshop_name if result.workshop_b else "-"
            line = f"{result.team_name.ljust(30)} | {workshop_a.ljust(25)} | {workshop_b}"
            if result.errors:
                line += f"  ({'; '.join(result.errors)})"
            self.stdout.write(line)

        self.stdout.write(
            f"{stats['total_teams']} teams: {stats['fully_assigned']} fully assigned, "
            f"{stats['partially_assigned']} partially, {stats['unassigned']} unassigned")
        if options["dry_run"]:
            self.stdout.write("Dry run, nothing was saved")
