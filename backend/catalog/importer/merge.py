import logging
import re
from dataclasses import asdict, dataclass

from django.db import transaction
from django.db.models import Count

from catalog.exceptions import ArtistNotFoundError, MergeConflictError
from catalog.models import Artist, Release, ReleaseArtist, Track, TrackArtist

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


@dataclass
class MergeResult:
    source_id: int
    target_id: int
    secondary_id: int = None
    releases_moved: int = 0
    track_links_moved: int = 0
    release_links_moved: int = 0
    track_links_created: int = 0
    secondary_links_created: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def _get_artist(artist_id, label):
    if isinstance(artist_id, Artist):
        return artist_id
    try:
        return Artist.objects.get(pk=artist_id)
    except (Artist.DoesNotExist, ValueError, TypeError):
        raise ArtistNotFoundError(f"{label} artist not found.") from None


def _overrides(items, key):
    """Accept either a ``{id: bool}`` dict or a list of ``{key: id, "is_primary": bool}`` dicts."""
    if not items:
        return {}
    try:
        if isinstance(items, dict):
            return {int(k): bool(v) for k, v in items.items()}
        return {int(item[key]): bool(item.get("is_primary", True)) for item in items}
    except (KeyError, TypeError, ValueError, AttributeError):
        raise ValueError(f"Invalid {key} overrides.") from None


def _move_link(model, owner_field, owner_id, source, target, override, result_attr, result):
    link_filter = {owner_field: owner_id}
    existing = model.objects.filter(artist=target, **link_filter).first()
    source_link = model.objects.filter(artist=source, **link_filter).first()
    is_primary = override if override is not None else (source_link.is_primary if source_link else True)
    if source_link is not None:
        source_link.delete()
    if existing is not None:
        # The target inherits a primary credit from the source unless overridden.
        inherited = source_link is not None and source_link.is_primary
        wanted = override if override is not None else existing.is_primary or inherited
        if existing.is_primary != wanted:
            existing.is_primary = wanted
            existing.save(update_fields=["is_primary"])
        return
    model.objects.create(artist=target, is_primary=is_primary, **link_filter)
    setattr(result, result_attr, getattr(result, result_attr) + 1)


def merge_artists(
    source_id,
    target_id,
    secondary_id=None,
    secondary_name=None,
    track_overrides=None,
    release_overrides=None,
) -> MergeResult:
    """
    Fold ``source`` into ``target`` and delete ``source``.

    Every release the source owned moves to the target, and each of its tracks gains a
    TrackArtist for the target. Join rows pointing at the source move to the target,
    keeping ``is_primary`` unless an override is supplied. An optional secondary artist
    is attached as non-primary, but only to affected tracks that already have a primary.
    Pre-conditions are checked before the transaction opens.
    """
    source = _get_artist(source_id, "Source")
    target = _get_artist(target_id, "Target")
    if source.pk == target.pk:
        raise MergeConflictError("Source and target artists must be different.")

    secondary = None
    if secondary_id:
        secondary = _get_artist(secondary_id, "Secondary")
        if secondary.pk == source.pk:
            raise MergeConflictError("Secondary artist cannot be the artist being merged away.")

    track_overrides = _overrides(track_overrides, "track_id")
    release_overrides = _overrides(release_overrides, "release_id")

    with transaction.atomic():
        if secondary is None and secondary_name and secondary_name.strip():
            secondary = Artist.objects.create(name=" ".join(secondary_name.split()))

        result = MergeResult(
            source_id=source.pk,
            target_id=target.pk,
            secondary_id=secondary.pk if secondary else None,
        )
        affected_tracks = set()

        owned_release_ids = list(Release.objects.filter(artist=source).values_list("pk", flat=True))
        result.releases_moved = Release.objects.filter(pk__in=owned_release_ids).update(artist=target)

        for release_id in owned_release_ids:
            _move_link(
                ReleaseArtist,
                "release_id",
                release_id,
                source,
                target,
                release_overrides.get(release_id),
                "release_links_moved",
                result,
            )
            for track_id in Track.objects.filter(release_id=release_id).values_list("pk", flat=True):
                affected_tracks.add(track_id)
                if TrackArtist.objects.filter(track_id=track_id, artist=target).exists():
                    continue
                if TrackArtist.objects.filter(track_id=track_id, artist=source).exists():
                    continue
                TrackArtist.objects.create(
                    track_id=track_id,
                    artist=target,
                    is_primary=track_overrides.get(track_id, True),
                )
                result.track_links_created += 1

        for track_id in list(TrackArtist.objects.filter(artist=source).values_list("track_id", flat=True)):
            affected_tracks.add(track_id)
            _move_link(
                TrackArtist,
                "track_id",
                track_id,
                source,
                target,
                track_overrides.get(track_id),
                "track_links_moved",
                result,
            )

        for release_id in list(ReleaseArtist.objects.filter(artist=source).values_list("release_id", flat=True)):
            affected_tracks.update(Track.objects.filter(release_id=release_id).values_list("pk", flat=True))
            _move_link(
                ReleaseArtist,
                "release_id",
                release_id,
                source,
                target,
                release_overrides.get(release_id),
                "release_links_moved",
                result,
            )

        if secondary is not None and secondary.pk != target.pk:
            with_primary = set(
                TrackArtist.objects.filter(track_id__in=affected_tracks, is_primary=True).values_list(
                    "track_id", flat=True
                )
            )
            already_linked = set(
                TrackArtist.objects.filter(track_id__in=with_primary, artist=secondary).values_list(
                    "track_id", flat=True
                )
            )
            TrackArtist.objects.bulk_create(
                [
                    TrackArtist(track_id=track_id, artist=secondary, is_primary=False)
                    for track_id in sorted(with_primary - already_linked)
                ]
            )
            result.secondary_links_created = len(with_primary - already_linked)

        source.delete()

    logger.info(
        "Merged artist %s into %s: %s releases, %s track links, %s secondary links",
        result.source_id,
        result.target_id,
        result.releases_moved,
        result.track_links_moved + result.track_links_created,
        result.secondary_links_created,
    )
    return result


def _link_role(links, artist_id) -> str:
    for link in links:
        if link.artist_id == artist_id:
            return "primary" if link.is_primary else "secondary"
    return "none"


def _link_artists(links) -> list:
    return [
        {"id": link.artist_id, "name": link.artist.name, "is_primary": link.is_primary}
        for link in sorted(links, key=lambda link: (not link.is_primary, link.artist.name))
    ]


def merge_preview(artist_id) -> dict:
    """
    Everything a merge of ``artist_id`` would touch, read-only.

    Releases are those the artist owns or is credited on. Tracks are every track of those
    releases plus any track the artist is credited on elsewhere. Each entry carries its
    current artists and the role the artist holds on it (``primary``, ``secondary`` or ``none``).
    """
    artist = _get_artist(artist_id, "Source")

    release_ids = set(Release.objects.filter(artist=artist).values_list("pk", flat=True))
    release_ids.update(ReleaseArtist.objects.filter(artist=artist).values_list("release_id", flat=True))
    releases = (
        Release.objects.filter(pk__in=release_ids)
        .select_related("artist")
        .prefetch_related("release_artists__artist")
        .order_by("title", "pk")
    )

    track_ids = set(Track.objects.filter(release_id__in=release_ids).values_list("pk", flat=True))
    track_ids.update(TrackArtist.objects.filter(artist=artist).values_list("track_id", flat=True))
    tracks = (
        Track.objects.filter(pk__in=track_ids)
        .select_related("release")
        .prefetch_related("track_artists__artist")
        .order_by("release__title", "release_id", "track_number")
    )

    release_rows = []
    for release in releases:
        links = list(release.release_artists.all())
        role = _link_role(links, artist.pk)
        if role == "none" and release.artist_id == artist.pk:
            role = "primary"
        release_rows.append(
            {
                "id": release.pk,
                "title": release.title,
                "type": release.type,
                "owner": {"id": release.artist_id, "name": release.artist.name},
                "artists": _link_artists(links),
                "source_artist_role": role,
            }
        )

    track_rows = []
    for track in tracks:
        links = list(track.track_artists.all())
        track_rows.append(
            {
                "id": track.pk,
                "name": track.name,
                "track_number": track.track_number,
                "release_id": track.release_id,
                "release_title": track.release.title,
                "artists": _link_artists(links),
                "source_artist_role": _link_role(links, artist.pk),
            }
        )

    return {
        "artist": {"id": artist.pk, "name": artist.name},
        "releases": release_rows,
        "tracks": track_rows,
    }


def normalize_artist_name(name) -> str:
    folded = _PUNCTUATION_RE.sub(" ", str(name or "").casefold())
    return " ".join(folded.split())


def find_duplicate_artists() -> list:
    """Group artists whose names only differ by case, spacing or punctuation."""
    groups = {}
    for artist in Artist.objects.annotate(release_count=Count("releases")).order_by("created_at", "pk"):
        key = normalize_artist_name(artist.name)
        if key:
            groups.setdefault(key, []).append(artist)
    return [members for _, members in sorted(groups.items()) if len(members) > 1]
