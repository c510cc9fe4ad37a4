from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from catalog.exceptions import ArtistNotFoundError, MergeConflictError
from catalog.importer.merge import find_duplicate_artists, merge_artists, merge_preview
from catalog.permissions import assert_can_merge_artists
from catalog.views.utils import error_response, json_payload, with_trigger


@login_required
@require_POST
def artist_merge(request: HttpRequest) -> JsonResponse:
    assert_can_merge_artists(request.user)
    try:
        payload = json_payload(request)
    except ValueError as exc:
        return error_response(str(exc))

    source_id = payload.get("source_id")
    target_id = payload.get("target_id")
    if not source_id or not target_id:
        return error_response("Source and target artist IDs are required.")

    try:
        result = merge_artists(
            source_id,
            target_id,
            secondary_id=payload.get("secondary_id") or None,
            secondary_name=payload.get("secondary_name") or None,
            track_overrides=payload.get("track_overrides"),
            release_overrides=payload.get("release_overrides"),
        )
    except ArtistNotFoundError as exc:
        return error_response(str(exc), status=404)
    except MergeConflictError as exc:
        return error_response(str(exc), status=409)
    except ValueError as exc:
        return error_response(str(exc))

    response = JsonResponse(result.to_dict())
    return with_trigger(request, response, "artists:merged", {"target_id": result.target_id})


@login_required
@require_GET
def artist_duplicates(request: HttpRequest) -> JsonResponse:
    assert_can_merge_artists(request.user)
    groups = find_duplicate_artists()
    return JsonResponse(
        {
            "groups": [
                [
                    {"id": artist.pk, "name": artist.name, "release_count": artist.release_count}
                    for artist in group
                ]
                for group in groups
            ]
        }
    )


@login_required
@require_GET
def artist_merge_preview(request: HttpRequest, artist_id: int) -> JsonResponse:
    assert_can_merge_artists(request.user)
    try:
        preview = merge_preview(artist_id)
    except ArtistNotFoundError as exc:
        return error_response(str(exc), status=404)
    return JsonResponse(preview)
