from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import OrchestrationError, SessionStateError
from catalog.importer.session import cancel_all_sessions, cancel_session


class Command(BaseCommand):
    help = "Cancel in-progress import sessions."

    def add_arguments(self, parser):
        parser.add_argument("session_ids", nargs="*", type=int, help="Sessions to cancel (default: all in progress)")
        parser.add_argument("--reason", default="Cancelled by administrator")

    def handle(self, *args, **options):
        if not options["session_ids"]:
            count = cancel_all_sessions(options["reason"])
            self.stdout.write(f"Cancelled {count} import session(s).")
            return

        for session_id in options["session_ids"]:
            try:
                session = cancel_session(session_id, options["reason"])
            except SessionStateError as exc:
                self.stdout.write(self.style.WARNING(str(exc)))
                continue
            except OrchestrationError as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(f"Cancelled import session {session.pk}.")
