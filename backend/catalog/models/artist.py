from django.db import models


class Artist(models.Model):
    """
    Canonical performer identity.
    Names are not unique-indexed. Case-insensitive uniqueness is enforced
    by the import resolver at create time, and racing duplicates are reconciled by merge.
    """

    name = models.CharField(max_length=255, db_index=True)
    legal_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    internal_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name", "id"]
        permissions = [
            ("merge_artists", "Can merge duplicate artists"),
        ]

    def __str__(self):
        return self.name
