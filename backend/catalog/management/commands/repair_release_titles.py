from django.core.management.base import BaseCommand

from catalog.importer.repair import repair_release_titles


class Command(BaseCommand):
    help = "Fix release titles that were filled from the wrong CSV column."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
        parser.add_argument("--release", type=int, action="append", dest="release_ids", help="Limit to a release ID")

    def handle(self, *args, **options):
        report = repair_release_titles(dry_run=options["dry_run"], release_ids=options["release_ids"])

        for finding in report.findings:
            self.stdout.write(
                f"#{finding['release_id']} {finding['title']!r} -> {finding['suggested_title']!r} "
                f"[{finding['source']}] ({finding['reason']})"
            )

        prefix = "Would fix" if report.dry_run else "Fixed"
        self.stdout.write(
            f"Scanned {report.scanned} releases, {report.flagged} flagged. "
            f"{prefix} {report.fixed} ({report.placeholders} with placeholder titles)."
        )
        if report.errors:
            self.stdout.write(self.style.ERROR(f"{report.errors} releases could not be updated."))
