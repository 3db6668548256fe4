from django.core.management.base import BaseCommand, CommandError

from tgspain.apps.core.models import CSVImport
from tgspain.libs.data_import.process import process_import


class Command(BaseCommand):
    help = "Process pending CSV imports (all of them, or the given ids)"

    def add_arguments(self, parser):
        parser.add_argument("import_ids", nargs="*", type=int,
                            help="ids of the imports to process")

    def handle(self, *args, **options):
        imports = CSVImport.objects.filter(status=CSVImport.PENDING)
        if options["import_ids"]:
            imports = CSVImport.objects.filter(pk__in=options["import_ids"])
            missing = set(options["import_ids"]) - set(imports.values_list("pk", flat=True))
            if missing:
                raise CommandError(f"Unknown CSV imports: {sorted(missing)}")

        for csv_import in imports.order_by("imported_at"):
            result = process_import(csv_import)
            self.stdout.write(
                f"{result.pk} {result.file_name}: {result.status} "
                f"({result.records_new} new, {result.records_updated} updated, "
                f"{result.records_activated} activated, {len(result.errors)} errors)")
