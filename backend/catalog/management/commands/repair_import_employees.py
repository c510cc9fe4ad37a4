from django.core.management.base import BaseCommand

from catalog.importer.repair import repair_import_employees


class Command(BaseCommand):
    help = "Remove A&R employees that were created from misaligned CSV columns."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")

    def handle(self, *args, **options):
        report = repair_import_employees(dry_run=options["dry_run"])

        for employee in report.employees:
            self.stdout.write(
                f"[{employee['action']}] #{employee['employee_id']} {employee['name']!r} "
                f"<{employee['email']}>: {employee['reason']} ({employee['release_count']} releases)"
            )
        for assignment in report.assignments:
            self.stdout.write(
                f"[clear] release #{assignment['release_id']} {assignment['title']!r}: {assignment['reason']}"
            )

        verb = "would be" if report.dry_run else "were"
        self.stdout.write(
            f"{report.employees_flagged} suspicious employees: {report.employees_deleted} {verb} deleted, "
            f"{report.employees_for_review} need review. {report.releases_fixed} assignments {verb} cleared."
        )
