from django.db import models

from .artist import Artist
from .employee import Employee
from .import_session import ImportSession


class Release(models.Model):
    """
    One unit of musical work. `raw_row` keeps the verbatim import data for repair passes;
    `notes` doubles as the overflow bucket for values demoted out of a misassigned column.
    """

    class Type(models.TextChoices):
        SINGLE = "SINGLE", "Single"
        ALBUM = "ALBUM", "Album"

    COPYRIGHT_CHOICES = [
        ("ORIGINAL", "Original"),
        ("COVER", "Cover"),
        ("INTERNATIONAL", "International"),
    ]

    VIDEO_TYPE_CHOICES = [
        ("NONE", "None"),
        ("MUSIC_VIDEO", "Music video"),
        ("LYRICS_VIDEO", "Lyrics video"),
    ]

    title = models.CharField(max_length=500)
    type = models.CharField(max_length=6, choices=Type.choices, default=Type.SINGLE)
    artist = models.ForeignKey(Artist, on_delete=models.PROTECT, related_name="releases")
    submission_id = models.CharField(max_length=100, blank=True, db_index=True)
    assigned_ar = models.ForeignKey(
        Employee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_releases",
    )
    copyright_status = models.CharField(max_length=13, choices=COPYRIGHT_CHOICES, blank=True)
    video_type = models.CharField(max_length=12, choices=VIDEO_TYPE_CHOICES, default="NONE")
    payment_remarks = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    raw_row = models.JSONField(null=True, blank=True)
    needs_review = models.BooleanField(
        default=False,
        help_text="Set when the importer kept a title it could not verify.",
    )
    import_session = models.ForeignKey(
        ImportSession,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="releases",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.title} ({self.type})"


class ReleaseArtist(models.Model):
    release = models.ForeignKey(Release, on_delete=models.CASCADE, related_name="release_artists")
    artist = models.ForeignKey(Artist, on_delete=models.CASCADE, related_name="release_artists")
    is_primary = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["release", "artist"], name="unique_release_artist"),
        ]

    def __str__(self):
        role = "primary" if self.is_primary else "secondary"
        return f"{self.artist} on {self.release} ({role})"
