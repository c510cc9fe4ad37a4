"""
Turns one RawRow into draft objects for a Release, its Tracks and PlatformRequests.

No database access happens here. Anything that makes a row unusable raises
``RowError`` so the session can queue the row and keep going.
"""

import re
from dataclasses import dataclass, field

from catalog.exceptions import RowError
from catalog.importer.classifier import (
    DEFAULT_THRESHOLDS,
    is_usable_title,
    is_valid_employee_name,
    looks_like_notes,
    looks_like_wrong_column,
)
from catalog.importer.columns import PLATFORMS, TITLE_FALLBACK_COLUMNS, RawRow

TITLE_DEMOTED_LABEL = "[Moved from title column]"
AR_DEMOTED_LABEL = "[Moved from A&R column]"

FEATURING_RE = re.compile(
    r"\(\s*(?:featuring|feat|ft)\.?\s*[-:]?\s*([^)]*)\)",
    re.IGNORECASE,
)
NAME_SEPARATOR_RE = re.compile(
    r"\s*[,;|]\s*|\s+(?:ft|feat)\.?\s+|\s+featuring\s+|\s+&\s+|\s+/\s+",
    re.IGNORECASE,
)
AR_SEPARATOR_RE = re.compile(r"\s*[,;/]\s*|\s+&\s+")
BRACKETED_URL_RE = re.compile(r"\[https?://[^\]]+\]", re.IGNORECASE)
PARENTHETICAL_RE = re.compile(r"\([^)]*\)")

UPLOADED_WORDS = ("uploaded", "checked", "completed")
TRUTHY_VALUES = {"yes", "y", "1", "true"}
FALSY_VALUES = {"no", "n", "0", "false", "none", "-"}


@dataclass
class TrackDraft:
    track_number: int
    name: str
    artist_names: list = field(default_factory=list)
    performer: str = ""
    composer: str = ""
    band: str = ""
    producer: str = ""
    studio: str = ""
    record_label: str = ""
    genre: str = ""


@dataclass
class PlatformRequestDraft:
    platform: str
    channel_name: str = ""
    requested: bool = False
    status: str = "PENDING"


@dataclass
class ReleaseDraft:
    title: str
    type: str
    artist_names: list = field(default_factory=list)
    artist_id: str = ""
    submission_id: str = ""
    legal_name: str = ""
    assigned_ar: str = ""
    copyright_status: str = ""
    video_type: str = "NONE"
    payment_remarks: str = ""
    notes: str = ""
    needs_review: bool = False
    raw_row: dict = field(default_factory=dict)


@dataclass
class RowDraft:
    release: ReleaseDraft
    tracks: list = field(default_factory=list)
    platform_requests: list = field(default_factory=list)


def append_note(existing, label, value) -> str:
    """Append ``label: value`` as a new paragraph; prior notes are never overwritten."""
    value = (value or "").strip()
    if not value:
        return existing or ""
    entry = f"{label}: {value}"
    existing = (existing or "").strip()
    if entry in existing:
        return existing
    return f"{existing}\n\n{entry}" if existing else entry


def _split_names(value) -> list:
    names = []
    for part in NAME_SEPARATOR_RE.split(value or ""):
        part = part.strip().strip("\"'").strip()
        if part:
            names.append(part)
    return names


def parse_artist_names(value) -> list:
    """
    Split a credit cell into names. Featured artists in ``(Ft - ...)`` groups,
    wherever they appear, come after the main credits.

    >>> parse_artist_names("Main (Ft - Guest One, Guest Two)")
    ['Main', 'Guest One', 'Guest Two']
    """
    value = (value or "").strip()
    if not value:
        return []
    guests = []
    for group in FEATURING_RE.findall(value):
        guests.extend(_split_names(group))
    return _split_names(FEATURING_RE.sub(" ", value)) + guests


def parse_channels(value) -> list:
    channels = []
    for part in re.split(r"\s*[,;]\s*", (value or "").strip()):
        if part and part not in channels:
            channels.append(part)
    return channels


def map_platform_status(value) -> str:
    lowered = (value or "").strip().lower()
    if not lowered:
        return "PENDING"
    if lowered in TRUTHY_VALUES or any(word in lowered for word in UPLOADED_WORDS):
        return "UPLOADED"
    if "approved" in lowered:
        return "APPROVED"
    if "rejected" in lowered:
        return "REJECTED"
    return "PENDING"


def parse_release_type(value):
    lowered = (value or "").strip().lower()
    if not lowered:
        return None
    if "album" in lowered or lowered == "ep":
        return "ALBUM"
    if "single" in lowered:
        return "SINGLE"
    return None


def parse_copyright_status(value) -> str:
    lowered = (value or "").strip().lower()
    if "cover" in lowered:
        return "COVER"
    if "international" in lowered:
        return "INTERNATIONAL"
    if "original" in lowered:
        return "ORIGINAL"
    return ""


def parse_video_type(value) -> str:
    lowered = (value or "").strip().lower()
    if "lyric" in lowered:
        return "LYRICS_VIDEO"
    if "music video" in lowered or lowered in {"mv", "music_video"}:
        return "MUSIC_VIDEO"
    return "NONE"


def clean_ar_name(value) -> str:
    cleaned = BRACKETED_URL_RE.sub("", value or "")
    cleaned = PARENTHETICAL_RE.sub("", cleaned)
    return " ".join(cleaned.split())


def find_fallback_title(raw_row, exclude=(), thresholds=DEFAULT_THRESHOLDS) -> str:
    """First value among the known title columns that reads like a real title."""
    excluded = {value.strip() for value in exclude if value}
    for column in TITLE_FALLBACK_COLUMNS:
        value = raw_row.lookup(column)
        if value and value not in excluded and is_usable_title(value, thresholds):
            return value
    return ""


def _resolve_title(raw_row, config, thresholds):
    title = raw_row.lookup(*config.release_columns("release_title"))
    if not title:
        title = raw_row.lookup(*TITLE_FALLBACK_COLUMNS)
    if not title:
        raise RowError("Missing release title.")

    if not looks_like_wrong_column(title, thresholds):
        return title, "", False

    replacement = find_fallback_title(raw_row, exclude=[title], thresholds=thresholds)
    if replacement:
        return replacement, title, False
    return title, "", True


def _resolve_ar(value, thresholds):
    """Return ``(employee_name, rejected_text)`` for an A&R cell."""
    value = (value or "").strip()
    if not value:
        return "", ""
    if looks_like_notes(value, thresholds):
        return "", value
    chosen = ""
    rejected = []
    for part in filter(None, (p.strip() for p in AR_SEPARATOR_RE.split(value))):
        name = clean_ar_name(part)
        if not is_valid_employee_name(name, thresholds):
            rejected.append(part)
        elif not chosen:
            chosen = name
    if not chosen:
        return "", value
    return chosen, ", ".join(rejected)


def _map_tracks(raw_row, config):
    tracks = []
    for slots in config.track_columns().values():
        name = raw_row.lookup(*slots.get("name", []))
        if not name:
            continue
        tracks.append(
            TrackDraft(
                track_number=len(tracks) + 1,
                name=name,
                artist_names=parse_artist_names(raw_row.lookup(*slots.get("artist_name", []))),
                performer=raw_row.lookup(*slots.get("performer", [])),
                composer=raw_row.lookup(*slots.get("composer", [])),
                band=raw_row.lookup(*slots.get("band", [])),
                producer=raw_row.lookup(*slots.get("producer", [])),
                studio=raw_row.lookup(*slots.get("studio", [])),
                record_label=raw_row.lookup(*slots.get("record_label", [])),
                genre=raw_row.lookup(*slots.get("genre", [])),
            )
        )
    return tracks


def _map_platform_requests(raw_row, config):
    drafts = []
    for platform in PLATFORMS:
        request_value = raw_row.lookup(*config.release_columns(f"{platform}_request"))
        status_value = raw_row.lookup(*config.release_columns(f"{platform}_status"))
        if not request_value and not status_value:
            continue
        requested = bool(request_value) and request_value.lower() not in FALSY_VALUES
        status = map_platform_status(status_value)
        channels = parse_channels(raw_row.lookup(*config.release_columns(f"{platform}_channel")))
        for channel in channels or [""]:
            drafts.append(
                PlatformRequestDraft(
                    platform=platform,
                    channel_name=channel,
                    requested=requested,
                    status=status,
                )
            )
    return drafts


def map_row(raw_row, mapping_config, thresholds=DEFAULT_THRESHOLDS) -> RowDraft:
    if not isinstance(raw_row, RawRow):
        raw_row = RawRow(raw_row)
    config = mapping_config

    def release_value(target):
        return raw_row.lookup(*config.release_columns(target))

    title, demoted_title, needs_review = _resolve_title(raw_row, config, thresholds)
    notes = release_value("notes")
    notes = append_note(notes, TITLE_DEMOTED_LABEL, demoted_title)

    tracks = _map_tracks(raw_row, config)

    artist_names = []
    for column in config.release_columns("artist_name"):
        artist_names.extend(parse_artist_names(raw_row.lookup(column)))
    if not artist_names:
        for track in tracks:
            if track.artist_names:
                artist_names = list(track.artist_names)
                break
    artist_id = release_value("artist_id")
    if not artist_names and not artist_id:
        raise RowError("No artist name or artist ID could be resolved for this row.")

    explicit_type = parse_release_type(release_value("release_type"))
    if len(tracks) == 1:
        release_type = "SINGLE"
    elif explicit_type:
        release_type = explicit_type
    elif len(tracks) >= 2:
        release_type = "ALBUM"
    else:
        release_type = "SINGLE"

    assigned_ar, rejected_ar = _resolve_ar(release_value("assigned_ar"), thresholds)
    notes = append_note(notes, AR_DEMOTED_LABEL, rejected_ar)

    payment_remarks = release_value("payment_remarks")
    royalty_method = release_value("royalty_receive_method")
    if royalty_method:
        payment_remarks = append_note(payment_remarks, "Royalty receive method", royalty_method)

    release = ReleaseDraft(
        title=title,
        type=release_type,
        artist_names=artist_names,
        artist_id=artist_id,
        submission_id=release_value("submission_id"),
        legal_name=release_value("legal_name"),
        assigned_ar=assigned_ar,
        copyright_status=parse_copyright_status(release_value("copyright_status")),
        video_type=parse_video_type(release_value("video_type")),
        payment_remarks=payment_remarks,
        notes=notes,
        needs_review=needs_review,
        raw_row=raw_row.to_dict(),
    )
    return RowDraft(
        release=release,
        tracks=tracks,
        platform_requests=_map_platform_requests(raw_row, config),
    )
