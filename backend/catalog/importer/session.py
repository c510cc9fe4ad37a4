"""
Import session orchestration.

A session walks the rows of one file strictly in order. Each row is mapped and then
persisted inside its own ``transaction.atomic()`` block, so a bad row lands in the
FailedImportRow queue without touching the rows around it. Later rows may reuse
artists created by earlier ones, which is why rows are never processed in parallel.
"""

import csv
import hashlib
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from catalog.exceptions import OrchestrationError, RowError, SessionStateError
from catalog.importer.classifier import configured_thresholds
from catalog.importer.columns import MappingConfig, RawRow, parse_csv
from catalog.importer.mapper import map_row
from catalog.importer.persist import persist_row
from catalog.importer.progress import build_progress
from catalog.importer.resolver import ArtistResolver
from catalog.models import FailedImportRow, ImportSession

logger = logging.getLogger(__name__)

POLICY_COMPLETED = "completed"
POLICY_ANY = "any"

BLOCKING_STATUSES = {
    POLICY_COMPLETED: {ImportSession.Status.COMPLETED, ImportSession.Status.IN_PROGRESS},
    POLICY_ANY: {
        ImportSession.Status.COMPLETED,
        ImportSession.Status.IN_PROGRESS,
        ImportSession.Status.FAILED,
        ImportSession.Status.CANCELLED,
    },
}

COUNTER_FIELDS = [
    "total_rows",
    "rows_processed",
    "success_count",
    "error_count",
    "releases_created",
    "releases_updated",
    "tracks_created",
]

LOG_EVERY = 500


def import_setting(name, default):
    return getattr(settings, "CATALOG_IMPORT", {}).get(name, default)


def error_limit() -> int:
    return import_setting("ERROR_PREVIEW_LIMIT", 10)


@dataclass
class ImportResult:
    session: ImportSession
    duplicate: bool = False
    cancelled: bool = False
    errors: list = field(default_factory=list)

    def to_dict(self) -> dict:
        session = self.session
        return {
            "session_id": session.pk,
            "status": session.status,
            "duplicate": self.duplicate,
            "total_rows": session.total_rows,
            "rows_processed": session.rows_processed,
            "success_count": session.success_count,
            "error_count": session.error_count,
            "releases_created": session.releases_created,
            "releases_updated": session.releases_updated,
            "tracks_created": session.tracks_created,
            "errors": self.errors,
        }


def compute_file_hash(content) -> str:
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def find_duplicate_session(file_hash, policy=None):
    policy = policy or import_setting("DUPLICATE_POLICY", POLICY_COMPLETED)
    if policy not in BLOCKING_STATUSES:
        raise OrchestrationError(f"Unknown duplicate import policy '{policy}'.")
    return (
        ImportSession.objects.filter(file_hash=file_hash, status__in=BLOCKING_STATUSES[policy])
        .order_by("-started_at", "-pk")
        .first()
    )


def begin_session(file_name, file_hash, mapping_config=None, user=None, total_rows=0, policy=None):
    """Return ``(session, created)``. An existing session with the same file hash is reused."""
    existing = find_duplicate_session(file_hash, policy)
    if existing is not None:
        logger.info(
            "Skipping import of %s: file already handled by session %s (%s)",
            file_name,
            existing.pk,
            existing.status,
        )
        return existing, False

    session = ImportSession.objects.create(
        file_name=file_name[:255],
        file_hash=file_hash,
        mapping_config=mapping_config.to_dict() if mapping_config else {},
        total_rows=total_rows,
        created_by=user if user is not None and user.is_authenticated else None,
    )
    return session, True


def error_preview(session, limit=None) -> list:
    limit = limit or error_limit()
    rows = session.failed_rows.order_by("row_number")[:limit]
    return [{"row": row.row_number, "message": row.message} for row in rows]


def _row_error_message(exc) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(exc.messages)
    if isinstance(exc, RowError):
        return exc.message
    return str(exc) or exc.__class__.__name__


def _persist_one(raw_row, config, resolver, session, thresholds):
    draft = map_row(raw_row, config, thresholds)
    with transaction.atomic():
        return persist_row(draft, resolver, session=session)


def _fail_session(session, message):
    session.status = ImportSession.Status.FAILED
    session.error_message = message
    session.completed_at = timezone.now()
    session.save(update_fields=COUNTER_FIELDS + ["status", "error_message", "completed_at"])
    logger.error("Import session %s failed: %s", session.pk, message)


def _is_cancelled(session) -> bool:
    status = ImportSession.objects.filter(pk=session.pk).values_list("status", flat=True).first()
    return status == ImportSession.Status.CANCELLED


def run_import(session, rows, mapping_config=None, resolver=None, on_progress=None) -> ImportResult:
    """
    Process ``rows`` for an in-progress session.

    Row-level failures are queued and never stop the run. The session status is
    re-read before every row so an administrative cancel takes effect between rows.
    Anything unexpected marks the session failed and raises OrchestrationError.
    """
    if session.is_terminal:
        raise SessionStateError(f"Import session {session.pk} is already {session.status}.")

    rows = list(rows)
    resolver = resolver or ArtistResolver()
    thresholds = configured_thresholds()
    save_interval = max(int(import_setting("PROGRESS_SAVE_INTERVAL", 10)), 1)

    try:
        config = mapping_config or MappingConfig.from_dict(session.mapping_config or {})
    except ValueError as exc:
        _fail_session(session, f"Invalid mapping config: {exc}")
        raise OrchestrationError(str(exc)) from exc

    session.total_rows = len(rows)
    session.save(update_fields=["total_rows"])
    logger.info("Import session %s started: %s rows from %s", session.pk, len(rows), session.file_name)

    cancelled = False
    try:
        for row_number, raw in enumerate(rows, start=1):
            if _is_cancelled(session):
                cancelled = True
                break

            raw_row = raw if isinstance(raw, RawRow) else RawRow(raw)
            try:
                result = _persist_one(raw_row, config, resolver, session, thresholds)
            except (RowError, ValidationError, DatabaseError) as exc:
                resolver.rollback()
                message = _row_error_message(exc)
                FailedImportRow.objects.update_or_create(
                    session=session,
                    row_number=row_number,
                    defaults={"data": raw_row.to_dict(), "message": message},
                )
                session.error_count += 1
                logger.warning("Import session %s row %s failed: %s", session.pk, row_number, message)
            else:
                resolver.commit()
                session.success_count += 1
                session.tracks_created += result.tracks_created
                if result.created:
                    session.releases_created += 1
                else:
                    session.releases_updated += 1

            session.rows_processed = row_number
            if row_number % save_interval == 0:
                session.save(update_fields=COUNTER_FIELDS)
            if row_number % LOG_EVERY == 0:
                logger.info(
                    "Import session %s: %s/%s rows processed", session.pk, row_number, session.total_rows
                )
            if on_progress is not None:
                on_progress(build_progress(session, f"Processing row {row_number} of {session.total_rows}"))
    except Exception as exc:
        _fail_session(session, str(exc) or exc.__class__.__name__)
        raise OrchestrationError(f"Import session {session.pk} failed: {exc}") from exc

    session.save(update_fields=COUNTER_FIELDS)
    if not cancelled:
        ImportSession.objects.filter(pk=session.pk, status=ImportSession.Status.IN_PROGRESS).update(
            status=ImportSession.Status.COMPLETED,
            completed_at=timezone.now(),
        )
    session.refresh_from_db(fields=["status", "completed_at", "cancel_reason"])
    cancelled = session.status == ImportSession.Status.CANCELLED

    logger.info(
        "Import session %s %s: %s succeeded, %s failed, %s releases created, %s updated",
        session.pk,
        session.status,
        session.success_count,
        session.error_count,
        session.releases_created,
        session.releases_updated,
    )
    return ImportResult(session=session, cancelled=cancelled, errors=error_preview(session))


def import_csv_file(file_name, content, mapping_config=None, user=None, on_progress=None, policy=None) -> ImportResult:
    """Hash, parse and import one uploaded file. Re-importing an unchanged file is a no-op."""
    file_hash = compute_file_hash(content)
    session, created = begin_session(file_name, file_hash, mapping_config, user=user, policy=policy)
    if not created:
        return ImportResult(session=session, duplicate=True, errors=error_preview(session))

    try:
        text = content.decode("utf-8-sig") if isinstance(content, bytes) else content
        headers, rows = parse_csv(text)
    except (UnicodeDecodeError, csv.Error) as exc:
        _fail_session(session, f"Could not read {file_name}: {exc}")
        raise OrchestrationError(f"Could not read {file_name}: {exc}") from exc
    if not headers:
        _fail_session(session, f"{file_name} has no header row.")
        raise OrchestrationError(f"{file_name} has no header row.")

    config = mapping_config or MappingConfig.for_headers(headers)
    session.mapping_config = config.to_dict()
    session.save(update_fields=["mapping_config"])
    return run_import(session, rows, config, on_progress=on_progress)


def get_session(session_or_id) -> ImportSession:
    if isinstance(session_or_id, ImportSession):
        return session_or_id
    try:
        return ImportSession.objects.get(pk=session_or_id)
    except (ImportSession.DoesNotExist, ValueError, TypeError):
        raise OrchestrationError(f"Import session {session_or_id} not found.") from None


def cancel_session(session_or_id, reason="") -> ImportSession:
    session = get_session(session_or_id)
    updated = ImportSession.objects.filter(pk=session.pk, status=ImportSession.Status.IN_PROGRESS).update(
        status=ImportSession.Status.CANCELLED,
        cancel_reason=(reason or "")[:255],
        completed_at=timezone.now(),
    )
    session.refresh_from_db()
    if not updated:
        raise SessionStateError(f"Import session {session.pk} is already {session.status}.")
    logger.info("Import session %s cancelled: %s", session.pk, reason or "no reason given")
    return session


def cancel_all_sessions(reason="Cancelled by administrator") -> int:
    count = ImportSession.objects.filter(status=ImportSession.Status.IN_PROGRESS).update(
        status=ImportSession.Status.CANCELLED,
        cancel_reason=reason[:255],
        completed_at=timezone.now(),
    )
    if count:
        logger.info("Cancelled %s in-progress import sessions", count)
    return count


def reprocess_failed_rows(session_or_id, resolver=None) -> dict:
    """
    Retry every queued row of a session. Rows that now succeed leave the queue;
    rows that fail again stay, with their attempt count bumped.
    """
    session = get_session(session_or_id)
    resolver = resolver or ArtistResolver()
    thresholds = configured_thresholds()
    queued = list(session.failed_rows.order_by("row_number"))
    if not queued:
        return {"reprocessed": 0, "success_count": 0, "error_count": 0, "errors": []}

    try:
        config = MappingConfig.from_dict(session.mapping_config or {})
    except ValueError as exc:
        raise OrchestrationError(f"Import session {session.pk} has an invalid mapping config: {exc}") from exc

    success_count = 0
    errors = []
    for failed in queued:
        raw_row = RawRow(failed.data)
        row_config = config if config.columns else MappingConfig.for_headers(list(raw_row))
        try:
            result = _persist_one(raw_row, row_config, resolver, session, thresholds)
        except (RowError, ValidationError, DatabaseError) as exc:
            resolver.rollback()
            failed.attempts += 1
            failed.message = _row_error_message(exc)
            failed.save(update_fields=["attempts", "message", "updated_at"])
            errors.append({"row": failed.row_number, "message": failed.message})
            continue

        resolver.commit()
        failed.delete()
        success_count += 1
        session.success_count += 1
        session.tracks_created += result.tracks_created
        if result.created:
            session.releases_created += 1
        else:
            session.releases_updated += 1

    session.error_count = session.failed_rows.count()
    session.save(update_fields=COUNTER_FIELDS)
    logger.info(
        "Reprocessed %s failed rows for session %s: %s fixed, %s still failing",
        len(queued),
        session.pk,
        success_count,
        len(errors),
    )
    return {
        "reprocessed": len(queued),
        "success_count": success_count,
        "error_count": len(errors),
        "errors": errors[: error_limit()],
    }


def session_progress(session_or_id) -> dict:
    session = get_session(session_or_id)
    session.refresh_from_db()
    operations = {
        ImportSession.Status.COMPLETED: "Import completed",
        ImportSession.Status.FAILED: "Import failed",
        ImportSession.Status.CANCELLED: "Import cancelled",
    }
    operation = operations.get(
        session.status,
        f"Processing row {min(session.rows_processed + 1, session.total_rows)} of {session.total_rows}",
    )
    return build_progress(session, operation, errors=error_preview(session)).to_dict()
