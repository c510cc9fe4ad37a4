from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import OrchestrationError
from catalog.importer.progress import format_time_remaining
from catalog.importer.session import POLICY_ANY, POLICY_COMPLETED, import_csv_file


class Command(BaseCommand):
    help = "Import releases, tracks and platform requests from a catalog CSV file."

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV file to import")
        parser.add_argument(
            "--duplicate-policy",
            choices=[POLICY_COMPLETED, POLICY_ANY],
            help="Which earlier sessions with the same file hash block a re-import",
        )
        parser.add_argument("--progress", action="store_true", help="Print progress while importing")

    def handle(self, *args, **options):
        path = Path(options["path"])
        if not path.is_file():
            raise CommandError(f"{path} does not exist.")

        on_progress = None
        if options["progress"]:
            def on_progress(progress):
                if progress.rows_processed % 100 == 0 or progress.rows_processed == progress.total_rows:
                    self.stdout.write(
                        f"{progress.rows_processed}/{progress.total_rows} rows "
                        f"({progress.percentage}%), {format_time_remaining(progress.estimated_time_remaining)} remaining"
                    )

        try:
            result = import_csv_file(
                path.name,
                path.read_bytes(),
                on_progress=on_progress,
                policy=options["duplicate_policy"],
            )
        except OrchestrationError as exc:
            raise CommandError(str(exc)) from exc

        session = result.session
        if result.duplicate:
            self.stdout.write(
                self.style.WARNING(f"{path.name} was already imported by session {session.pk} ({session.status}).")
            )
            return

        self.stdout.write(
            f"Session {session.pk} {session.status}: {session.success_count} rows imported, "
            f"{session.error_count} failed, {session.releases_created} releases created, "
            f"{session.releases_updated} updated, {session.tracks_created} tracks."
        )
        for error in result.errors:
            self.stdout.write(self.style.ERROR(f"  Row {error['row']}: {error['message']}"))
        if session.error_count:
            self.stdout.write(f"Run `manage.py reprocess_failed_rows {session.pk}` after fixing the data.")
        else:
            self.stdout.write(self.style.SUCCESS("Import finished without errors."))
