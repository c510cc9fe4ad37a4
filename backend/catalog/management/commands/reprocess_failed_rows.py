from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import OrchestrationError
from catalog.importer.session import reprocess_failed_rows


class Command(BaseCommand):
    help = "Retry the queued failed rows of an import session."

    def add_arguments(self, parser):
        parser.add_argument("session_id", type=int)

    def handle(self, *args, **options):
        try:
            result = reprocess_failed_rows(options["session_id"])
        except OrchestrationError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(
            f"Reprocessed {result['reprocessed']} rows: {result['success_count']} fixed, "
            f"{result['error_count']} still failing."
        )
        for error in result["errors"]:
            self.stdout.write(self.style.ERROR(f"  Row {error['row']}: {error['message']}"))
