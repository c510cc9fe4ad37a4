import logging
from dataclasses import dataclass

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from django.utils.text import slugify

from catalog.exceptions import RowError
from catalog.importer.resolver import unique_artists
from catalog.models import (
    Artist,
    Employee,
    PlatformRequest,
    Release,
    ReleaseArtist,
    Track,
    TrackArtist,
)

logger = logging.getLogger(__name__)

TRACK_FIELDS = ("performer", "composer", "band", "producer", "studio", "record_label", "genre")


@dataclass
class PersistResult:
    release: Release
    created: bool
    tracks_created: int


def imported_email_domain() -> str:
    return getattr(settings, "CATALOG_IMPORT", {}).get("IMPORTED_EMAIL_DOMAIN", "ar.imported.local")


def find_or_create_employee(name, email_domain=None):
    """Find an A&R employee by name, creating a placeholder login for unknown names."""
    name = " ".join((name or "").split())
    if not name:
        return None
    employee = Employee.objects.filter(name__iexact=name).order_by("pk").first()
    if employee is not None:
        return employee

    email_domain = email_domain or imported_email_domain()
    User = get_user_model()
    base = slugify(name).replace("-", ".")[:100] or "ar"
    username = base
    counter = 1
    while User.objects.filter(username=username).exists():
        counter += 1
        username = f"{base}{counter}"
    user = User.objects.create_user(
        username=username,
        email=f"{username}@{email_domain}",
        first_name=name[:150],
    )
    employee = Employee.objects.create(name=name, user=user)
    logger.info("Created A&R employee %s for imported name '%s'", employee.pk, name)
    return employee


def _release_artists(draft, resolver):
    if draft.artist_names:
        return resolver.resolve(draft.artist_names)
    try:
        artist = Artist.objects.filter(pk=int(draft.artist_id)).first()
    except (TypeError, ValueError):
        artist = None
    if artist is None:
        raise RowError(f"Artist ID '{draft.artist_id}' does not exist.")
    return [artist]


def _find_existing(draft, primary):
    if draft.submission_id:
        return Release.objects.filter(submission_id=draft.submission_id).order_by("pk").first()
    return Release.objects.filter(title=draft.title, artist=primary).order_by("pk").first()


def persist_row(row_draft, resolver, session=None, email_domain=None) -> PersistResult:
    """
    Write one mapped row. Callers wrap this in ``transaction.atomic()``.

    Releases are upserted by submission id, or by title and primary artist when the
    source has none. An update replaces tracks, platform requests and artist links.
    """
    draft = row_draft.release
    artists = _release_artists(draft, resolver)
    primary = artists[0]
    linked = unique_artists(artists)

    if draft.legal_name and not primary.legal_name:
        primary.legal_name = draft.legal_name
        primary.save(update_fields=["legal_name"])

    assigned_ar = find_or_create_employee(draft.assigned_ar, email_domain) if draft.assigned_ar else None

    release = _find_existing(draft, primary)
    created = release is None
    if created:
        release = Release(submission_id=draft.submission_id)
    else:
        release.tracks.all().delete()
        release.platform_requests.all().delete()
        release.release_artists.all().delete()

    release.title = draft.title
    release.type = draft.type
    release.artist = primary
    release.assigned_ar = assigned_ar
    release.copyright_status = draft.copyright_status
    release.video_type = draft.video_type
    release.payment_remarks = draft.payment_remarks
    release.notes = draft.notes
    release.raw_row = draft.raw_row
    release.needs_review = draft.needs_review
    if session is not None:
        release.import_session = session
    release.save()

    ReleaseArtist.objects.bulk_create(
        [
            ReleaseArtist(release=release, artist=artist, is_primary=index == 0)
            for index, artist in enumerate(linked)
        ]
    )

    track_by_number = {}
    for track_draft in row_draft.tracks:
        track = Track.objects.create(
            release=release,
            track_number=track_draft.track_number,
            name=track_draft.name,
            **{name: getattr(track_draft, name) for name in TRACK_FIELDS},
        )
        track_by_number[track.track_number] = track
        credited = resolver.resolve(track_draft.artist_names) if track_draft.artist_names else artists
        TrackArtist.objects.bulk_create(
            [
                TrackArtist(track=track, artist=artist, is_primary=index == 0)
                for index, artist in enumerate(unique_artists(credited))
            ]
        )

    now = timezone.now()
    PlatformRequest.objects.bulk_create(
        [
            PlatformRequest(
                release=release,
                platform=request.platform,
                channel_name=request.channel_name,
                requested=request.requested,
                status=request.status,
                uploaded_at=now if request.status == "UPLOADED" else None,
            )
            for request in row_draft.platform_requests
        ]
    )

    return PersistResult(release=release, created=created, tracks_created=len(track_by_number))
