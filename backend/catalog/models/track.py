from django.db import models

from .artist import Artist
from .release import Release


class Track(models.Model):
    release = models.ForeignKey(Release, on_delete=models.CASCADE, related_name="tracks")
    track_number = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=500)
    performer = models.CharField(max_length=255, blank=True)
    composer = models.CharField(max_length=255, blank=True)
    band = models.CharField(max_length=255, blank=True)
    producer = models.CharField(max_length=255, blank=True)
    studio = models.CharField(max_length=255, blank=True)
    record_label = models.CharField(max_length=255, blank=True)
    genre = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["release", "track_number"]
        constraints = [
            models.UniqueConstraint(fields=["release", "track_number"], name="unique_track_number_per_release"),
        ]

    def __str__(self):
        return f"{self.track_number}. {self.name}"


class TrackArtist(models.Model):
    track = models.ForeignKey(Track, on_delete=models.CASCADE, related_name="track_artists")
    artist = models.ForeignKey(Artist, on_delete=models.CASCADE, related_name="track_artists")
    is_primary = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["track", "artist"], name="unique_track_artist"),
        ]

    def __str__(self):
        role = "primary" if self.is_primary else "secondary"
        return f"{self.artist} on {self.track} ({role})"
