import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from catalog.models import Artist, ImportSession, Release

CSV = (
    "Submission ID,Artist Name,Album/Single Name,Song 1 Name\n"
    "S1,Alpha,First,Track One\n"
    "S2,,Second,Track Two\n"
)


class CommandTests(TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "catalog.csv"
        self.path.write_text(CSV, encoding="utf-8")

    def call(self, *args):
        out = StringIO()
        call_command(*args, stdout=out)
        return out.getvalue()

    def test_import_and_reimport(self):
        output = self.call("import_catalog_csv", str(self.path))
        session = ImportSession.objects.get()
        self.assertIn(f"Session {session.pk} completed", output)
        self.assertIn("Row 2:", output)
        self.assertIn(f"reprocess_failed_rows {session.pk}", output)

        again = self.call("import_catalog_csv", str(self.path))
        self.assertIn("already imported", again)
        self.assertEqual(ImportSession.objects.count(), 1)

    def test_import_missing_file(self):
        with self.assertRaises(CommandError):
            self.call("import_catalog_csv", str(Path(self.tmp.name) / "missing.csv"))

    def test_reprocess(self):
        self.call("import_catalog_csv", str(self.path))
        session = ImportSession.objects.get()
        output = self.call("reprocess_failed_rows", str(session.pk))
        self.assertIn("Reprocessed 1 rows: 0 fixed, 1 still failing.", output)
        with self.assertRaises(CommandError):
            self.call("reprocess_failed_rows", "999999")

    def test_repair_release_titles_dry_run(self):
        artist = Artist.objects.create(name="Ama")
        release = Release.objects.create(title="YouTube", artist=artist, raw_row={"Album Name": "Starlight"})
        output = self.call("repair_release_titles", "--dry-run")
        self.assertIn("'YouTube' -> 'Starlight'", output)
        self.assertIn("Would fix 1", output)
        release.refresh_from_db()
        self.assertEqual(release.title, "YouTube")

    def test_repair_import_employees(self):
        output = self.call("repair_import_employees", "--dry-run")
        self.assertIn("0 suspicious employees", output)

    def test_cancel_imports(self):
        running = ImportSession.objects.create(file_name="a.csv", file_hash="a")
        output = self.call("cancel_imports", str(running.pk))
        self.assertIn(f"Cancelled import session {running.pk}.", output)
        output = self.call("cancel_imports", str(running.pk))
        self.assertIn("already cancelled", output)
        ImportSession.objects.create(file_name="b.csv", file_hash="b")
        self.assertIn("Cancelled 1 import session(s).", self.call("cancel_imports"))
