"""
Heuristics that decide whether a cell value came from the column it claims to.

Legacy exports shift columns when a cell contains an unquoted comma, so notes,
platform statuses and payment remarks end up in title or A&R fields. Every
predicate here is pure and takes an optional ``Thresholds`` so the tuned
cutoffs can be overridden from ``settings.CATALOG_IMPORT["CLASSIFIER"]``.
"""

import re
from dataclasses import dataclass, fields, replace

from django.conf import settings


@dataclass(frozen=True)
class Thresholds:
    notes_length: int = 100
    sentence_parts: int = 2
    single_word_length: int = 50
    platform_ratio: float = 0.3
    platform_token_count: int = 2
    title_length: int = 150
    employee_name_length: int = 50
    candidate_title_length: int = 200
    comma_count: int = 2


DEFAULT_THRESHOLDS = Thresholds()


def configured_thresholds() -> Thresholds:
    overrides = getattr(settings, "CATALOG_IMPORT", {}).get("CLASSIFIER") or {}
    known = {f.name for f in fields(Thresholds)}
    return replace(DEFAULT_THRESHOLDS, **{k: v for k, v in overrides.items() if k in known})


PLATFORM_NAMES = (
    "youtube",
    "facebook",
    "tiktok",
    "flow",
    "ringtunes",
    "international streaming",
    "spotify",
    "vuclip",
)

STATUS_TOKENS = (
    "uploaded",
    "pending",
    "rejected",
    "approved",
    "monetization",
    "checked",
    "completed",
)

# Values that only count when they are the entire cell.
WHOLE_CELL_VALUES = (
    "yes",
    "no",
    "none",
    "done",
    "spo",
    "single",
    "album",
    "original",
    "cover",
    "international",
    "music video",
    "lyrics video",
)

PLATFORM_PHRASES = (
    "all music platforms",
    "music platforms",
    "except",
    "the licensee will be",
)

NOTE_FRAGMENTS = (
    "will whitelist",
    "p.s.",
    "cannot upload",
    "due to",
)

PAYMENT_TERMS = (
    "payment",
    "royalty",
    "royalties",
    "receive method",
    "bank",
    "account",
    "transfer",
)

MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

NOTE_PREFIX_RE = re.compile(r"^(please|note\b|note:|important|warning|reminder|will whitelist)", re.IGNORECASE)
URL_RE = re.compile(r"https?://|www\.", re.IGNORECASE)
TOKEN_RE = re.compile(r"[a-z0-9]+")
DATE_FRAGMENT_RES = (
    re.compile(r"\d{1,2}[-/]\d{1,2}[-/]\d{2,4}"),
    re.compile(r"\b\d{1,2}-[a-z]{3}-\d{2,4}\b", re.IGNORECASE),
)
TIMESTAMP_RES = (
    re.compile(r"\d{4}[\s.]?\d{1,2}:?\d{2}"),
    re.compile(r"\d{4}\.\d{4}"),
)
WHOLE_DATE_RES = (
    re.compile(r"^\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}$"),
    re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$"),
    re.compile(r"^\d{1,2}[-\s][a-z]{3,9}[-\s]\d{2,4}$", re.IGNORECASE),
    re.compile(r"^(%s)\s+\d{1,2}(,?\s+\d{2,4})?$" % "|".join(MONTHS), re.IGNORECASE),
)
CODE_RE = re.compile(r"^[a-z0-9]{4,10}$", re.IGNORECASE)
ID_TOKEN_RE = re.compile(r"(^|\s)id=", re.IGNORECASE)
ACCESS_TOKEN_RE = re.compile(r"access_?token", re.IGNORECASE)
PUNCTUATION_ONLY_RE = re.compile(r"^[\d\s\-_.,:;/]+$")
HAS_LETTER_RE = re.compile(r"[^\W\d_]")

_PLATFORM_TOKENS = frozenset(
    token for name in PLATFORM_NAMES for token in name.split() if token != "international"
) | frozenset(STATUS_TOKENS)
_WHOLE_CELL_MATCHES = frozenset(PLATFORM_NAMES) | frozenset(STATUS_TOKENS) | frozenset(WHOLE_CELL_VALUES)


def _clean(text) -> str:
    return (text or "").strip()


def _contains_term(lowered: str, term: str) -> bool:
    return re.search(r"\b%s\b" % re.escape(term), lowered) is not None


def has_letter(text) -> bool:
    return HAS_LETTER_RE.search(_clean(text)) is not None


def looks_like_notes(text, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    value = _clean(text)
    if not value:
        return False
    lowered = value.lower()
    if len(value) > thresholds.notes_length:
        return True
    if ". " in value and len(value.split(". ")) > thresholds.sentence_parts:
        return True
    if NOTE_PREFIX_RE.search(value):
        return True
    if "copyright" in lowered and "status" not in lowered:
        return True
    if URL_RE.search(value) or "@" in value:
        return True
    if len(value.split()) == 1 and len(value) > thresholds.single_word_length:
        return True
    return False


def looks_like_platform_or_status(text, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    value = _clean(text)
    if not value:
        return False
    lowered = " ".join(value.lower().split())

    if lowered in _WHOLE_CELL_MATCHES:
        return True
    if any(_contains_term(lowered, phrase) for phrase in PLATFORM_PHRASES):
        return True

    tokens = TOKEN_RE.findall(lowered)
    if not tokens:
        return False
    if tokens[0] in _PLATFORM_TOKENS and tokens[0] not in STATUS_TOKENS:
        return True

    matches = sum(1 for token in tokens if token in _PLATFORM_TOKENS)
    if not matches:
        return False
    if matches / len(tokens) > thresholds.platform_ratio:
        return True
    return matches >= thresholds.platform_token_count


def looks_like_csv_artifact(text, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    value = _clean(text)
    if not value:
        return False
    if value.count(",") >= thresholds.comma_count:
        return True
    if any(pattern.search(value) for pattern in DATE_FRAGMENT_RES):
        return True
    if any(pattern.search(value) for pattern in TIMESTAMP_RES):
        return True
    return ".." in value


def looks_like_date(text) -> bool:
    value = _clean(text)
    return bool(value) and any(pattern.match(value) for pattern in WHOLE_DATE_RES)


def looks_like_code(text) -> bool:
    """Short opaque identifiers such as ``a9x72k``; plain words are not codes."""
    value = _clean(text)
    if ID_TOKEN_RE.search(value) or ACCESS_TOKEN_RE.search(value):
        return True
    if not CODE_RE.match(value):
        return False
    return any(ch.isdigit() for ch in value) and any(ch.isalpha() for ch in value)


def looks_like_payment_remark(text) -> bool:
    lowered = _clean(text).lower()
    return any(_contains_term(lowered, term) for term in PAYMENT_TERMS)


def _wrong_column_reason(title, thresholds: Thresholds):
    value = _clean(title)
    if not value:
        return None
    lowered = value.lower()
    if looks_like_notes(value, thresholds):
        return "Contains notes-like content"
    if any(fragment in lowered for fragment in NOTE_FRAGMENTS):
        return "Contains notes-like content"
    if looks_like_platform_or_status(value, thresholds):
        return "Contains platform/status content"
    if looks_like_csv_artifact(value, thresholds):
        return "Contains CSV concatenation patterns"
    if len(value) > thresholds.title_length:
        return "Too long for a title"
    if looks_like_payment_remark(value):
        return "Contains payment remarks"
    if looks_like_date(value):
        return "Is a date"
    if looks_like_code(value):
        return "Looks like a code or identifier"
    if "#" in value:
        return "Contains special characters"
    if PUNCTUATION_ONLY_RE.match(value):
        return "Contains no words"
    return None


def looks_like_wrong_column(title, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    return _wrong_column_reason(title, thresholds) is not None


def describe_wrong_column(title, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> str:
    return _wrong_column_reason(title, thresholds) or ""


def is_valid_employee_name(text, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    value = _clean(text)
    if not value:
        return False
    if len(value) > thresholds.employee_name_length:
        return False
    if looks_like_notes(value, thresholds):
        return False
    if looks_like_csv_artifact(value, thresholds):
        return False
    if looks_like_platform_or_status(value, thresholds):
        return False
    if "@" in value or "#" in value or URL_RE.search(value):
        return False
    if not has_letter(value):
        return False
    return not PUNCTUATION_ONLY_RE.match(value)


def is_usable_title(text, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    """A fallback candidate must pass the wrong-column check and read like words."""
    value = _clean(text)
    if not value or len(value) > thresholds.candidate_title_length:
        return False
    return has_letter(value) and not looks_like_wrong_column(value, thresholds)
