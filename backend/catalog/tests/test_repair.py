from django.contrib.auth import get_user_model
from django.test import TestCase

from catalog.importer.persist import find_or_create_employee
from catalog.importer.repair import (
    AR_MOVED_LABEL,
    TITLE_FIXED_LABEL,
    TITLE_MOVED_LABEL,
    employee_suspicion,
    find_title_problems,
    repair_import_employees,
    repair_release_titles,
)
from catalog.models import Artist, Employee, Release, Track


class ReleaseTitleRepairTests(TestCase):
    def setUp(self):
        self.artist = Artist.objects.create(name="Ama")
        self.broken = Release.objects.create(
            title="ringtunes, pending, yes",
            artist=self.artist,
            raw_row={"Album Name": "Starlight", "Album/Single Name": "ringtunes, pending, yes"},
        )
        self.healthy = Release.objects.create(title="Starlight", artist=self.artist)

    def test_identify(self):
        findings = find_title_problems()
        self.assertEqual([f.release_id for f in findings], [self.broken.pk])
        self.assertEqual(findings[0].suggested_title, "Starlight")
        self.assertEqual(findings[0].source, "raw_row")

    def test_dry_run_changes_nothing(self):
        report = repair_release_titles(dry_run=True)
        self.assertEqual((report.scanned, report.flagged, report.fixed), (2, 1, 1))
        self.broken.refresh_from_db()
        self.assertEqual(self.broken.title, "ringtunes, pending, yes")

    def test_fix_from_raw_row(self):
        report = repair_release_titles()
        self.assertEqual(report.fixed, 1)
        self.broken.refresh_from_db()
        self.assertEqual(self.broken.title, "Starlight")
        self.assertIn(f"{TITLE_FIXED_LABEL}: ringtunes, pending, yes", self.broken.notes)
        self.assertFalse(self.broken.needs_review)

    def test_fix_keeps_existing_notes(self):
        self.broken.notes = "Original note"
        self.broken.save(update_fields=["notes"])
        repair_release_titles(release_ids=[self.broken.pk])
        self.broken.refresh_from_db()
        self.assertEqual(self.broken.title, "Starlight")
        self.assertEqual(
            self.broken.notes,
            f"Original note\n\n{TITLE_FIXED_LABEL}: ringtunes, pending, yes",
        )

    def test_placeholder_from_first_track(self):
        release = Release.objects.create(title="YouTube", artist=self.artist, raw_row={})
        Track.objects.create(release=release, track_number=1, name="Morning Song")
        report = repair_release_titles(release_ids=[release.pk])
        self.assertEqual(report.placeholders, 1)
        release.refresh_from_db()
        self.assertEqual(release.title, "Morning Song")
        self.assertTrue(release.needs_review)
        self.assertIn(f"{TITLE_MOVED_LABEL}: YouTube", release.notes)

    def test_placeholder_without_tracks(self):
        release = Release.objects.create(title="Pending", artist=self.artist)
        repair_release_titles(release_ids=[release.pk])
        release.refresh_from_db()
        self.assertEqual(release.title, "Untitled Single")

    def test_title_recovered_from_notes(self):
        release = Release.objects.create(
            title="Uploaded",
            artist=self.artist,
            notes="Sunrise Road\n\nPlease upload by Friday",
        )
        findings = find_title_problems([release.pk])
        self.assertEqual((findings[0].suggested_title, findings[0].source), ("Sunrise Road", "notes"))


class EmployeeRepairTests(TestCase):
    def setUp(self):
        artist = Artist.objects.create(name="Ama")
        self.status_employee = find_or_create_employee("Uploaded")
        self.concatenated = find_or_create_employee("Pending, check later, 2024")
        self.placeholder_ok = find_or_create_employee("Jane Smith")
        real_user = get_user_model().objects.create_user(username="kwame", email="kwame@label.example")
        self.real = Employee.objects.create(name="Kwame Mensah", user=real_user)
        self.release = Release.objects.create(title="Dawn", artist=artist, assigned_ar=self.concatenated)

    def test_dry_run_reports_without_changes(self):
        report = repair_import_employees(dry_run=True)
        self.assertEqual(report.employees_flagged, 2)
        self.assertEqual(report.employees_deleted, 1)
        self.assertEqual(report.employees_for_review, 1)
        self.assertEqual(report.releases_fixed, 1)
        actions = {e["name"]: e["action"] for e in report.employees}
        self.assertEqual(actions, {"Uploaded": "delete", "Pending, check later, 2024": "review"})
        self.assertEqual(Employee.objects.count(), 4)
        self.release.refresh_from_db()
        self.assertEqual(self.release.assigned_ar, self.concatenated)

    def test_real_run_deletes_and_clears(self):
        user_id = self.status_employee.user_id
        repair_import_employees()

        self.assertFalse(Employee.objects.filter(pk=self.status_employee.pk).exists())
        self.assertFalse(get_user_model().objects.filter(pk=user_id).exists())
        self.assertTrue(Employee.objects.filter(pk=self.concatenated.pk).exists())
        self.assertTrue(Employee.objects.filter(pk=self.placeholder_ok.pk).exists())
        self.assertTrue(Employee.objects.filter(pk=self.real.pk).exists())
        self.release.refresh_from_db()
        self.assertIsNone(self.release.assigned_ar)
        self.assertIn(f"{AR_MOVED_LABEL}: Pending, check later, 2024", self.release.notes)

    def test_employee_suspicion(self):
        self.assertEqual(employee_suspicion("Jane Smith", email_is_placeholder=True), "")
        self.assertEqual(
            employee_suspicion("Yes Music", email_is_placeholder=True),
            "Placeholder e-mail and status-like words in name",
        )
        self.assertEqual(employee_suspicion("Yes Music", email_is_placeholder=False), "")
