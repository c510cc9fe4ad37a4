from django.conf import settings
from django.db import models


class ImportSession(models.Model):
    """
    One execution of the CSV import pipeline against one source file.
    Status moves in_progress -> completed | failed | cancelled and never leaves a terminal state.
    """

    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"

    TERMINAL_STATUSES = {Status.COMPLETED, Status.FAILED, Status.CANCELLED}

    file_name = models.CharField(max_length=255)
    file_hash = models.CharField(max_length=64, db_index=True)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.IN_PROGRESS)
    mapping_config = models.JSONField(default=dict, blank=True)
    total_rows = models.PositiveIntegerField(default=0)
    rows_processed = models.PositiveIntegerField(default=0)
    success_count = models.PositiveIntegerField(default=0)
    error_count = models.PositiveIntegerField(default=0)
    releases_created = models.PositiveIntegerField(default=0)
    releases_updated = models.PositiveIntegerField(default=0)
    tracks_created = models.PositiveIntegerField(default=0)
    error_message = models.TextField(blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="import_sessions",
    )
    started_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-started_at", "-id"]
        permissions = [
            ("run_catalog_import", "Can run catalog CSV imports"),
            ("repair_catalog_data", "Can run catalog repair tools"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def __str__(self):
        return f"{self.file_name} ({self.status})"
