from django.db import models

from .release import Release
from .track import Track


class PlatformRequest(models.Model):
    PLATFORM_CHOICES = [
        ("youtube", "YouTube"),
        ("facebook", "Facebook"),
        ("tiktok", "TikTok"),
        ("flow", "Flow"),
        ("ringtunes", "Ringtunes"),
        ("international_streaming", "International streaming"),
    ]

    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("APPROVED", "Approved"),
        ("REJECTED", "Rejected"),
        ("UPLOADED", "Uploaded"),
    ]

    release = models.ForeignKey(Release, on_delete=models.CASCADE, related_name="platform_requests")
    track = models.ForeignKey(
        Track,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="platform_requests",
    )
    platform = models.CharField(max_length=24, choices=PLATFORM_CHOICES)
    channel_name = models.CharField(max_length=255, blank=True)
    requested = models.BooleanField(default=False)
    status = models.CharField(max_length=8, choices=STATUS_CHOICES, default="PENDING")
    uploaded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["release", "platform", "channel_name"]

    def __str__(self):
        channel = f" / {self.channel_name}" if self.channel_name else ""
        return f"{self.platform}{channel}: {self.status}"
