import csv

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from catalog.exceptions import OrchestrationError, SessionStateError
from catalog.forms import CsvImportForm
from catalog.importer.columns import MappingConfig, parse_csv
from catalog.importer.session import (
    cancel_all_sessions,
    cancel_session,
    compute_file_hash,
    error_limit,
    find_duplicate_session,
    import_csv_file,
    reprocess_failed_rows,
    session_progress,
)
from catalog.models import ImportSession
from catalog.permissions import assert_can_run_import
from catalog.views.utils import error_response, json_payload, with_trigger

PREVIEW_ROWS = 5
MAX_FAILED_ROWS_PAGE = 100


@login_required
@require_POST
def import_preview(request: HttpRequest) -> JsonResponse:
    assert_can_run_import(request.user)
    upload = request.FILES.get("csv_file")
    if not upload:
        return error_response("CSV file is required.")

    content = upload.read()
    try:
        headers, rows = parse_csv(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, csv.Error) as exc:
        return error_response(f"Could not read {upload.name}: {exc}")
    if not headers:
        return error_response(f"{upload.name} has no header row.")

    file_hash = compute_file_hash(content)
    try:
        duplicate = find_duplicate_session(file_hash)
    except OrchestrationError as exc:
        return error_response(str(exc))
    mapping = MappingConfig.for_headers(headers)
    return JsonResponse(
        {
            "file_name": upload.name,
            "file_hash": file_hash,
            "headers": headers,
            "row_count": len(rows),
            "mapping": mapping.to_dict(),
            "mapped_columns": mapping.mapped_count,
            "sample_rows": [row.to_dict() for row in rows[:PREVIEW_ROWS]],
            "duplicate_session_id": duplicate.pk if duplicate else None,
        }
    )


@login_required
@require_POST
def import_start(request: HttpRequest) -> JsonResponse:
    assert_can_run_import(request.user)
    form = CsvImportForm(request.POST, request.FILES)
    if not form.is_valid():
        return JsonResponse({"error": "Invalid import request.", "fields": form.errors.get_json_data()}, status=400)

    upload = form.cleaned_data["csv_file"]
    try:
        result = import_csv_file(
            upload.name,
            upload.read(),
            mapping_config=form.cleaned_data["mapping"],
            user=request.user,
        )
    except OrchestrationError as exc:
        return error_response(str(exc))

    response = JsonResponse(result.to_dict())
    return with_trigger(request, response, "import:finished", {"session_id": result.session.pk})


@login_required
@require_GET
def import_progress(request: HttpRequest, session_id: int) -> JsonResponse:
    assert_can_run_import(request.user)
    session = get_object_or_404(ImportSession, pk=session_id)
    return JsonResponse(session_progress(session))


@login_required
@require_POST
def import_cancel(request: HttpRequest, session_id: int) -> JsonResponse:
    assert_can_run_import(request.user)
    session = get_object_or_404(ImportSession, pk=session_id)
    try:
        payload = json_payload(request)
    except ValueError as exc:
        return error_response(str(exc))
    try:
        session = cancel_session(session, payload.get("reason") or "Cancelled by user")
    except SessionStateError as exc:
        return error_response(str(exc), status=409)

    response = JsonResponse({"session_id": session.pk, "status": session.status})
    return with_trigger(request, response, "import:cancelled", {"session_id": session.pk})


@login_required
@require_POST
def import_cancel_all(request: HttpRequest) -> JsonResponse:
    assert_can_run_import(request.user)
    count = cancel_all_sessions()
    response = JsonResponse({"cancelled": count})
    return with_trigger(request, response, "import:cancelled", {"count": count})


@login_required
@require_GET
def import_failed_rows(request: HttpRequest, session_id: int) -> JsonResponse:
    assert_can_run_import(request.user)
    session = get_object_or_404(ImportSession, pk=session_id)
    try:
        limit = int(request.GET.get("limit", error_limit()))
    except (TypeError, ValueError):
        limit = error_limit()
    limit = min(max(limit, 1), MAX_FAILED_ROWS_PAGE)

    queue = session.failed_rows.order_by("row_number")
    return JsonResponse(
        {
            "session_id": session.pk,
            "total": queue.count(),
            "rows": [
                {
                    "row": row.row_number,
                    "message": row.message,
                    "attempts": row.attempts,
                    "data": row.data,
                }
                for row in queue[:limit]
            ],
        }
    )


@login_required
@require_POST
def import_reprocess(request: HttpRequest, session_id: int) -> JsonResponse:
    assert_can_run_import(request.user)
    session = get_object_or_404(ImportSession, pk=session_id)
    try:
        result = reprocess_failed_rows(session)
    except OrchestrationError as exc:
        return error_response(str(exc))

    response = JsonResponse({"session_id": session.pk, **result})
    return with_trigger(request, response, "import:reprocessed", {"session_id": session.pk})
