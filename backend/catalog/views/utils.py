import json

from django.http import JsonResponse


def json_payload(request) -> dict:
    """Request body as a dict, from JSON or form-encoded POST data."""
    if request.content_type == "application/json":
        try:
            payload = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValueError("Request body is not valid JSON.") from None
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object.")
        return payload
    return request.POST.dict()


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def error_response(message, status=400) -> JsonResponse:
    return JsonResponse({"error": message}, status=status)


def with_trigger(request, response, event, detail=None):
    """Attach an HX-Trigger event for htmx callers."""
    if getattr(request, "htmx", False):
        response["HX-Trigger"] = json.dumps({event: detail if detail is not None else True})
    return response
