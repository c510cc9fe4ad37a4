from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_POST

from catalog.importer.repair import find_title_problems, repair_import_employees, repair_release_titles
from catalog.permissions import assert_can_repair_data
from catalog.views.utils import as_bool, error_response, json_payload, with_trigger


def _release_ids(value):
    if value in (None, ""):
        return None
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    if not isinstance(value, list):
        raise ValueError("release_ids must be a list.")
    try:
        return [int(item) for item in value]
    except (TypeError, ValueError):
        raise ValueError("release_ids must be integers.") from None


@login_required
@require_POST
def repair_releases(request: HttpRequest) -> JsonResponse:
    assert_can_repair_data(request.user)
    try:
        payload = json_payload(request)
        release_ids = _release_ids(payload.get("release_ids"))
    except ValueError as exc:
        return error_response(str(exc))

    action = payload.get("action")
    if action == "identify":
        findings = find_title_problems(release_ids)
        return JsonResponse(
            {
                "count": len(findings),
                "releases": [
                    {
                        "id": finding.release_id,
                        "title": finding.title,
                        "reason": finding.reason,
                        "suggested_title": finding.suggested_title,
                        "source": finding.source,
                    }
                    for finding in findings
                ],
            }
        )
    if action == "fix":
        report = repair_release_titles(dry_run=as_bool(payload.get("dry_run")), release_ids=release_ids)
        response = JsonResponse(report.to_dict())
        return with_trigger(request, response, "repair:releases", {"fixed": report.fixed})
    return error_response("Unknown action. Use 'identify' or 'fix'.")


@login_required
@require_POST
def repair_employees(request: HttpRequest) -> JsonResponse:
    assert_can_repair_data(request.user)
    try:
        payload = json_payload(request)
    except ValueError as exc:
        return error_response(str(exc))

    report = repair_import_employees(dry_run=as_bool(payload.get("dry_run")))
    response = JsonResponse(report.to_dict())
    return with_trigger(request, response, "repair:employees", {"deleted": report.employees_deleted})
