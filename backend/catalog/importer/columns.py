import csv
import io
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

RELEASE = "release"
TRACK = "track"
FIELD_TYPES = {RELEASE, TRACK}

PLATFORMS = ("youtube", "facebook", "tiktok", "flow", "ringtunes", "international_streaming")

PLATFORM_ALIASES = {
    "youtube": "youtube",
    "facebook": "facebook",
    "fb": "facebook",
    "tiktok": "tiktok",
    "flow": "flow",
    "ringtunes": "ringtunes",
    "international_streaming": "international_streaming",
    "intl_streaming": "international_streaming",
}

RELEASE_FIELDS = {
    "submission_id",
    "artist_id",
    "artist_name",
    "legal_name",
    "royalty_receive_method",
    "release_title",
    "release_type",
    "assigned_ar",
    "copyright_status",
    "video_type",
    "payment_remarks",
    "notes",
} | {f"{platform}_{suffix}" for platform in PLATFORMS for suffix in ("request", "status", "channel")}

TRACK_FIELDS = {
    "name",
    "artist_name",
    "performer",
    "composer",
    "band",
    "producer",
    "studio",
    "record_label",
    "genre",
}

# Searched in order when the mapped title is missing or came from the wrong column.
TITLE_FALLBACK_COLUMNS = (
    "Album/Single Name",
    "Album or Single Name",
    "Release Title",
    "Release Name",
    "Album Name",
    "Single Name",
    "Album Title",
    "Single Title",
    "Title",
)

RELEASE_PATTERNS = (
    (re.compile(r"^submission_?id$"), "submission_id"),
    (re.compile(r"^artist_?id$"), "artist_id"),
    (re.compile(r"^(artist_?names?|artists?)$"), "artist_name"),
    (re.compile(r"^legal_?name$"), "legal_name"),
    (re.compile(r"^royalty_receive_method$"), "royalty_receive_method"),
    (re.compile(r"^(album|single)_?(name|title)$"), "release_title"),
    (re.compile(r"^(albumsingle|album_or_single)_name$"), "release_title"),
    (re.compile(r"^release_(title|name)$"), "release_title"),
    (re.compile(r"^(release_type|single|album)$"), "release_type"),
    (re.compile(r"^(assigned_)?a_?r(_(assigned|name|person|employee|staff|contact))?$"), "assigned_ar"),
    (re.compile(r"^payment_remarks?$"), "payment_remarks"),
    (re.compile(r"^notes?$"), "notes"),
    (re.compile(r"^copyright_?status$"), "copyright_status"),
    (re.compile(r"^video_?type$"), "video_type"),
)

PLATFORM_COLUMN_RE = re.compile(
    r"^(?P<platform>%s)(?:_(?P<kind>request_channel|channel|request|status))?$"
    % "|".join(sorted(PLATFORM_ALIASES, key=len, reverse=True))
)

NUMBERED_TRACK_RE = re.compile(r"^song_?(?P<index>\d+)_(?P<rest>.+)$")

TRACK_PATTERNS = (
    (re.compile(r"^(song|track)_(name|title)$"), "name"),
    (re.compile(r"^(song_)?(music_)?(band_)?produce(r)?(_name)?(_archived)?(_name)?$"), "producer"),
    (re.compile(r"^(song_)?(band_?)?music_producer$"), "producer"),
    (re.compile(r"^(song_)?composer(_name)?$"), "composer"),
    (re.compile(r"^(song_)?performer(_name)?$"), "performer"),
    (re.compile(r"^(song_)?band(_name)?$"), "band"),
    (re.compile(r"^song_artist(_name)?$"), "artist_name"),
    (re.compile(r"^(song_)?studio(_name)?$"), "studio"),
    (re.compile(r"^(song_)?(record_)?label(_name)?$"), "record_label"),
    (re.compile(r"^(song_)?genre$"), "genre"),
)

# Numbered columns already carry the "song N" prefix, so bare "name" or "artist" is a track field there.
NUMBERED_ONLY_PATTERNS = (
    (re.compile(r"^(name|title)$"), "name"),
    (re.compile(r"^artist(_name)?$"), "artist_name"),
)


def normalize_column_name(name) -> str:
    value = str(name or "").strip().lower()
    value = re.sub(r"[_\s-]+", "_", value)
    value = re.sub(r"[^a-z0-9_]", "", value)
    return value.strip("_")


class RawRow(Mapping):
    """
    Immutable header -> cell mapping for one source row.
    Lookups try each candidate key verbatim first, then by normalized column name.
    """

    def __init__(self, data=None):
        self._data = {}
        for key, value in dict(data or {}).items():
            if key is None:
                continue
            self._data[str(key)] = "" if value is None else str(value)
        self._normalized = {}
        for key in self._data:
            self._normalized.setdefault(normalize_column_name(key), key)

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return f"RawRow({self._data!r})"

    def lookup(self, *candidates) -> str:
        """Return the first non-empty trimmed value among ``candidates``, or ''."""
        for candidate in candidates:
            if candidate is None:
                continue
            value = self._data.get(candidate)
            if value is None:
                original = self._normalized.get(normalize_column_name(candidate))
                value = self._data.get(original) if original is not None else None
            if value is not None and value.strip():
                return value.strip()
        return ""

    def to_dict(self) -> dict:
        return dict(self._data)


@dataclass(frozen=True)
class ColumnMapping:
    csv_column: str
    target_field: str = None
    field_type: str = RELEASE
    track_index: int = None

    def to_dict(self) -> dict:
        return {
            "csv_column": self.csv_column,
            "target_field": self.target_field,
            "field_type": self.field_type,
            "track_index": self.track_index,
        }


@dataclass(frozen=True)
class MappingConfig:
    columns: tuple = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data):
        """Build a config from its JSON form. Raises ValueError on malformed payloads."""
        if not isinstance(data, Mapping):
            raise ValueError("Mapping config must be an object.")
        raw_columns = data.get("columns") or []
        if not isinstance(raw_columns, list):
            raise ValueError("Mapping config 'columns' must be a list.")

        columns = []
        for entry in raw_columns:
            if not isinstance(entry, Mapping) or not entry.get("csv_column"):
                raise ValueError("Each column mapping needs a csv_column.")
            field_type = entry.get("field_type") or RELEASE
            if field_type not in FIELD_TYPES:
                raise ValueError(f"Unknown field type '{field_type}'.")
            target = entry.get("target_field") or None
            allowed = TRACK_FIELDS if field_type == TRACK else RELEASE_FIELDS
            if target is not None and target not in allowed:
                raise ValueError(f"Unknown {field_type} field '{target}'.")
            track_index = entry.get("track_index")
            if track_index is not None:
                try:
                    track_index = int(track_index)
                except (TypeError, ValueError):
                    raise ValueError("track_index must be an integer.") from None
                if track_index < 1:
                    raise ValueError("track_index must be 1 or greater.")
            columns.append(
                ColumnMapping(
                    csv_column=str(entry["csv_column"]),
                    target_field=target,
                    field_type=field_type,
                    track_index=track_index,
                )
            )
        return cls(columns=tuple(columns))

    @classmethod
    def for_headers(cls, headers):
        return cls(columns=tuple(auto_detect_mapping(headers)))

    def to_dict(self) -> dict:
        return {"columns": [column.to_dict() for column in self.columns]}

    def release_columns(self, target_field) -> list:
        return [
            column.csv_column
            for column in self.columns
            if column.field_type == RELEASE and column.target_field == target_field
        ]

    def track_columns(self) -> dict:
        """``{track_index: {field: [csv_column, ...]}}`` ordered by track index."""
        grouped = {}
        for column in self.columns:
            if column.field_type != TRACK or not column.target_field:
                continue
            slot = grouped.setdefault(column.track_index or 1, {})
            slot.setdefault(column.target_field, []).append(column.csv_column)
        return dict(sorted(grouped.items()))

    @property
    def mapped_count(self) -> int:
        return sum(1 for column in self.columns if column.target_field)


def _detect(header):
    normalized = normalize_column_name(header)
    if not normalized:
        return ColumnMapping(csv_column=header)

    numbered = NUMBERED_TRACK_RE.match(normalized)
    if numbered:
        rest = numbered.group("rest")
        for pattern, target in TRACK_PATTERNS + NUMBERED_ONLY_PATTERNS:
            if pattern.match(rest):
                return ColumnMapping(header, target, TRACK, int(numbered.group("index")))
        return ColumnMapping(csv_column=header)

    for pattern, target in RELEASE_PATTERNS:
        if pattern.match(normalized):
            return ColumnMapping(header, target, RELEASE)

    platform = PLATFORM_COLUMN_RE.match(normalized)
    if platform:
        kind = platform.group("kind") or "status"
        if kind == "request_channel":
            kind = "channel"
        return ColumnMapping(header, f"{PLATFORM_ALIASES[platform.group('platform')]}_{kind}", RELEASE)

    for pattern, target in TRACK_PATTERNS:
        if pattern.match(normalized):
            return ColumnMapping(header, target, TRACK, 1)

    return ColumnMapping(csv_column=header)


def auto_detect_mapping(headers) -> list:
    """Guess a target field for each header. Unrecognised headers stay in the list unmapped."""
    return [_detect(header) for header in headers]


def clean_header(header) -> str:
    return str(header or "").strip().strip("\"'").strip()


def parse_csv(text):
    """Parse CSV text into ``(headers, rows)``. Rows with no non-empty cell are skipped."""
    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.reader(io.StringIO(text))
    try:
        raw_headers = next(reader)
    except StopIteration:
        return [], []

    headers = [clean_header(header) for header in raw_headers]
    rows = []
    for cells in reader:
        if not any((cell or "").strip() for cell in cells):
            continue
        data = {}
        for position, header in enumerate(headers):
            if not header or header in data:
                continue
            data[header] = cells[position] if position < len(cells) else ""
        rows.append(RawRow(data))
    return headers, rows
