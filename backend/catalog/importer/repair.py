"""
Out-of-band repair passes over persisted catalog data.

Both passes compute their decisions first and only then write, so a dry run
reports exactly what a real run would change.
"""

import logging
import re
from dataclasses import asdict, dataclass, field

from django.db import DatabaseError, transaction
from django.db.models import Count

from catalog.importer.classifier import (
    configured_thresholds,
    describe_wrong_column,
    has_letter,
    is_usable_title,
    is_valid_employee_name,
    looks_like_csv_artifact,
    looks_like_notes,
    looks_like_platform_or_status,
    looks_like_wrong_column,
)
from catalog.importer.columns import RawRow
from catalog.importer.mapper import append_note, find_fallback_title
from catalog.importer.persist import imported_email_domain
from catalog.models import Employee, Release

logger = logging.getLogger(__name__)

TITLE_FIXED_LABEL = "[Auto-fixed from incorrect title]"
TITLE_MOVED_LABEL = "[Auto-moved from incorrect title]"
AR_MOVED_LABEL = "[Auto-moved from A&R assignment]"

SUSPICIOUS_NAME_WORDS = {
    "uploaded",
    "pending",
    "rejected",
    "yes",
    "no",
    "music",
    "video",
    "lyrics",
    "flow",
    "youtube",
    "facebook",
    "tiktok",
    "am",
    "pm",
}
NOTE_LABEL_RE = re.compile(r"^\[[^\]]*\]:\s*")
YEAR_RE = re.compile(r"\d{4}")
LETTER_PAIR_RE = re.compile(r"[^\W\d_]{2,}")


@dataclass
class TitleFinding:
    release_id: int
    title: str
    reason: str
    suggested_title: str
    source: str


@dataclass
class TitleRepairReport:
    dry_run: bool
    scanned: int = 0
    flagged: int = 0
    fixed: int = 0
    placeholders: int = 0
    errors: int = 0
    findings: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class EmployeeFinding:
    employee_id: int
    name: str
    email: str
    reason: str
    release_count: int
    action: str


@dataclass
class AssignmentFinding:
    release_id: int
    title: str
    ar_name: str
    reason: str


@dataclass
class EmployeeRepairReport:
    dry_run: bool
    employees_flagged: int = 0
    employees_deleted: int = 0
    employees_for_review: int = 0
    releases_fixed: int = 0
    employees: list = field(default_factory=list)
    assignments: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _title_from_notes(notes, current, thresholds):
    for paragraph in re.split(r"\n+", notes or ""):
        candidate = NOTE_LABEL_RE.sub("", paragraph).strip()
        if candidate and candidate != current and is_usable_title(candidate, thresholds):
            return candidate
    return ""


def _placeholder_title(release, thresholds):
    first_track = release.tracks.order_by("track_number").first()
    if first_track and len(first_track.name) < 100 and is_usable_title(first_track.name, thresholds):
        return first_track.name
    return f"Untitled {release.get_type_display()}"


def suggest_title(release, thresholds=None):
    """Return ``(title, source)`` for a release whose title came from the wrong column."""
    thresholds = thresholds or configured_thresholds()
    if release.raw_row:
        candidate = find_fallback_title(RawRow(release.raw_row), exclude=[release.title], thresholds=thresholds)
        if candidate:
            return candidate, "raw_row"
    elif release.notes:
        candidate = _title_from_notes(release.notes, release.title, thresholds)
        if candidate:
            return candidate, "notes"
    return _placeholder_title(release, thresholds), "placeholder"


def find_title_problems(release_ids=None, thresholds=None) -> list:
    thresholds = thresholds or configured_thresholds()
    releases = Release.objects.all().order_by("pk")
    if release_ids is not None:
        releases = releases.filter(pk__in=release_ids)

    findings = []
    for release in releases.iterator():
        if not looks_like_wrong_column(release.title, thresholds):
            continue
        suggested, source = suggest_title(release, thresholds)
        findings.append(
            TitleFinding(
                release_id=release.pk,
                title=release.title,
                reason=describe_wrong_column(release.title, thresholds),
                suggested_title=suggested,
                source=source,
            )
        )
    return findings


def repair_release_titles(dry_run=False, release_ids=None) -> TitleRepairReport:
    thresholds = configured_thresholds()
    report = TitleRepairReport(dry_run=dry_run)
    queryset = Release.objects.all()
    if release_ids is not None:
        queryset = queryset.filter(pk__in=release_ids)
    report.scanned = queryset.count()

    findings = find_title_problems(release_ids, thresholds)
    report.flagged = len(findings)
    report.findings = [asdict(finding) for finding in findings]

    for finding in findings:
        placeholder = finding.source == "placeholder"
        if dry_run:
            report.fixed += 1
            report.placeholders += int(placeholder)
            continue
        try:
            with transaction.atomic():
                release = Release.objects.select_for_update().get(pk=finding.release_id)
                label = TITLE_MOVED_LABEL if placeholder else TITLE_FIXED_LABEL
                release.notes = append_note(release.notes, label, release.title)
                release.title = finding.suggested_title
                release.needs_review = placeholder
                release.save(update_fields=["title", "notes", "needs_review", "updated_at"])
        except (DatabaseError, Release.DoesNotExist):
            report.errors += 1
            logger.exception("Could not repair title of release %s", finding.release_id)
            continue
        report.fixed += 1
        report.placeholders += int(placeholder)
        logger.info(
            "Release %s title %r -> %r (%s)",
            finding.release_id,
            finding.title,
            finding.suggested_title,
            finding.source,
        )

    logger.info(
        "Title repair%s: %s scanned, %s flagged, %s fixed, %s errors",
        " (dry run)" if dry_run else "",
        report.scanned,
        report.flagged,
        report.fixed,
        report.errors,
    )
    return report


def _has_placeholder_email(employee, domain) -> bool:
    return employee.email.lower().endswith(f"@{domain}".lower())


def employee_suspicion(name, email_is_placeholder, thresholds=None) -> str:
    """Reason an employee record looks like it was created from a misaligned column, or ''."""
    thresholds = thresholds or configured_thresholds()
    name = (name or "").strip()
    if not is_valid_employee_name(name, thresholds):
        if looks_like_notes(name, thresholds):
            return "Contains notes-like content"
        if looks_like_csv_artifact(name, thresholds):
            return "Contains CSV concatenation patterns"
        if looks_like_platform_or_status(name, thresholds):
            return "Contains platform/status values"
        if email_is_placeholder:
            return "Placeholder e-mail and invalid name"
        return "Invalid name format"
    if not email_is_placeholder:
        return ""
    if "," in name or YEAR_RE.search(name) or len(name) > 30 or not LETTER_PAIR_RE.search(name):
        return "Placeholder e-mail and suspicious name"
    words = set(re.findall(r"[a-z]+", name.lower()))
    if words & SUSPICIOUS_NAME_WORDS and len(name) < 15:
        return "Placeholder e-mail and status-like words in name"
    return ""


def assignment_contamination(name, email_is_placeholder, thresholds=None) -> str:
    thresholds = thresholds or configured_thresholds()
    if email_is_placeholder and not is_valid_employee_name(name, thresholds):
        return "A&R has a placeholder e-mail and an invalid name"
    if looks_like_csv_artifact(name, thresholds):
        return "A&R name contains CSV concatenation patterns"
    if looks_like_notes(name, thresholds) or not has_letter(name):
        return "A&R assignment contains notes content"
    return ""


def repair_import_employees(dry_run=False) -> EmployeeRepairReport:
    """
    Remove A&R employees minted from misaligned columns.

    Suspects without releases are deleted with their login. Suspects that still have
    assignments are only flagged. Release counts are taken before any link is cleared.
    """
    thresholds = configured_thresholds()
    domain = imported_email_domain()
    report = EmployeeRepairReport(dry_run=dry_run)

    employees = Employee.objects.select_related("user").annotate(release_count=Count("assigned_releases"))
    suspects = []
    for employee in employees.order_by("pk"):
        reason = employee_suspicion(employee.name, _has_placeholder_email(employee, domain), thresholds)
        if not reason:
            continue
        action = "delete" if employee.release_count == 0 else "review"
        suspects.append(employee)
        report.employees.append(
            asdict(
                EmployeeFinding(
                    employee_id=employee.pk,
                    name=employee.name,
                    email=employee.email,
                    reason=reason,
                    release_count=employee.release_count,
                    action=action,
                )
            )
        )

    contaminated = []
    releases = Release.objects.filter(assigned_ar__isnull=False).select_related("assigned_ar__user")
    for release in releases.order_by("pk"):
        employee = release.assigned_ar
        reason = assignment_contamination(employee.name, _has_placeholder_email(employee, domain), thresholds)
        if reason:
            contaminated.append(release)
            report.assignments.append(
                asdict(
                    AssignmentFinding(
                        release_id=release.pk,
                        title=release.title,
                        ar_name=employee.name,
                        reason=reason,
                    )
                )
            )

    report.employees_flagged = len(suspects)
    report.employees_for_review = sum(1 for employee in suspects if employee.release_count)
    report.releases_fixed = len(contaminated)
    report.employees_deleted = report.employees_flagged - report.employees_for_review

    if dry_run:
        logger.info(
            "Employee repair (dry run): %s suspects, %s to delete, %s releases to clear",
            report.employees_flagged,
            report.employees_deleted,
            report.releases_fixed,
        )
        return report

    with transaction.atomic():
        for release in contaminated:
            release.notes = append_note(release.notes, AR_MOVED_LABEL, release.assigned_ar.name)
            release.assigned_ar = None
            release.save(update_fields=["notes", "assigned_ar", "updated_at"])

        for employee in suspects:
            if employee.release_count:
                logger.warning(
                    "Employee %s (%s) looks imported from the wrong column but has %s releases; left for review",
                    employee.pk,
                    employee.name,
                    employee.release_count,
                )
                continue
            if employee.user_id:
                employee.user.delete()
            else:
                employee.delete()
            logger.info("Deleted imported employee %s (%s)", employee.pk, employee.name)

    return report
