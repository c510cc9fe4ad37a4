from django.db import models

from .import_session import ImportSession


class FailedImportRow(models.Model):
    """Retry queue entry: a source row that could not be mapped or persisted."""

    session = models.ForeignKey(ImportSession, on_delete=models.CASCADE, related_name="failed_rows")
    row_number = models.PositiveIntegerField()
    data = models.JSONField(default=dict)
    message = models.TextField()
    attempts = models.PositiveSmallIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["session", "row_number"]
        constraints = [
            models.UniqueConstraint(fields=["session", "row_number"], name="unique_failed_row_per_session"),
        ]

    def __str__(self):
        return f"Row {self.row_number} in session {self.session_id}"
