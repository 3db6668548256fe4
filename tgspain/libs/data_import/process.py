import logging

from django.db import transaction
from django.utils import timezone

from tgspain.apps.core.models import AuditLog, CSVImport
from tgspain.libs import notifications
from tgspain.libs.data_import.import_teams import import_teams
from tgspain.libs.data_import.import_users import import_users
from tgspain.libs.email_service import deliver
from tgspain.libs.errors import ImportProcessingError, emit_current_exception

logger = logging.getLogger(__name__)


def claim(csv_import):
    """Move a pending import to processing. False if someone else got it first"""
    claimed = (CSVImport.objects
               .filter(pk=csv_import.pk, status=CSVImport.PENDING)
               .update(status=CSVImport.PROCESSING))
    return bool(claimed)


def _add_counts(csv_import, importer):
    if importer is None:
        return
    csv_import.records_processed += importer.processed
    csv_import.records_new += importer.new
    csv_import.records_updated += importer.updated
    csv_import.records_activated += importer.activated


def process_import(csv_import):
    """
    Run a pending import: users first, so the team rows can link the
    freshly verified members. Returns the refreshed CSVImport.
    """
    if not claim(csv_import):
        logger.info("CSV import %s is not pending, skipping", csv_import.pk)
        csv_import.refresh_from_db()
        return csv_import

    csv_import.refresh_from_db()
    errors = []
    try:
        if not (csv_import.users_csv or csv_import.teams_csv):
            raise ImportProcessingError("La importación no contiene ningún CSV")
        if csv_import.users_csv:
            importer, user_errors = import_users(csv_import.users_csv)
            _add_counts(csv_import, importer)
            errors += user_errors
        if csv_import.teams_csv:
            importer, team_errors = import_teams(csv_import.teams_csv)
            _add_counts(csv_import, importer)
            errors += team_errors
    except Exception as exc:
        logger.exception("CSV import %s failed", csv_import.pk)
        emit_current_exception()
        csv_import.status = CSVImport.FAILED
        errors.append({"error": str(exc)})
    else:
        csv_import.status = CSVImport.COMPLETED

    csv_import.errors = errors
    csv_import.total_records = csv_import.records_processed
    csv_import.completed_at = timezone.now()
    with transaction.atomic():
        csv_import.save()
        AuditLog.record(csv_import.uploaded_by, "csv_import", csv_import, {
            "status": csv_import.status,
            "new": csv_import.records_new,
            "updated": csv_import.records_updated,
            "activated": csv_import.records_activated,
            "errors": len(errors),
        })

    logger.info("CSV import %s %s: %s processed, %s errors", csv_import.pk,
                csv_import.status, csv_import.records_processed, len(errors))
    if csv_import.admin_email:
        deliver([notifications.import_summary(csv_import)],
                f"CSV import {csv_import.pk}")
    return csv_import
