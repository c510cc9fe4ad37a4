import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Artist",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("legal_name", models.CharField(blank=True, max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("internal_notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name", "id"],
                "permissions": [("merge_artists", "Can merge duplicate artists")],
            },
        ),
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("employee_code", models.CharField(blank=True, max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="employee",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name", "id"],
            },
        ),
        migrations.CreateModel(
            name="ImportSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file_name", models.CharField(max_length=255)),
                ("file_hash", models.CharField(db_index=True, max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in_progress", "In progress"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="in_progress",
                        max_length=12,
                    ),
                ),
                ("mapping_config", models.JSONField(blank=True, default=dict)),
                ("total_rows", models.PositiveIntegerField(default=0)),
                ("rows_processed", models.PositiveIntegerField(default=0)),
                ("success_count", models.PositiveIntegerField(default=0)),
                ("error_count", models.PositiveIntegerField(default=0)),
                ("releases_created", models.PositiveIntegerField(default=0)),
                ("releases_updated", models.PositiveIntegerField(default=0)),
                ("tracks_created", models.PositiveIntegerField(default=0)),
                ("error_message", models.TextField(blank=True)),
                ("cancel_reason", models.CharField(blank=True, max_length=255)),
                ("started_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="import_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-started_at", "-id"],
                "permissions": [
                    ("run_catalog_import", "Can run catalog CSV imports"),
                    ("repair_catalog_data", "Can run catalog repair tools"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FailedImportRow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("row_number", models.PositiveIntegerField()),
                ("data", models.JSONField(default=dict)),
                ("message", models.TextField()),
                ("attempts", models.PositiveSmallIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="failed_rows",
                        to="catalog.importsession",
                    ),
                ),
            ],
            options={
                "ordering": ["session", "row_number"],
            },
        ),
        migrations.AddConstraint(
            model_name="failedimportrow",
            constraint=models.UniqueConstraint(fields=("session", "row_number"), name="unique_failed_row_per_session"),
        ),
        migrations.CreateModel(
            name="Release",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=500)),
                (
                    "type",
                    models.CharField(
                        choices=[("SINGLE", "Single"), ("ALBUM", "Album")],
                        default="SINGLE",
                        max_length=6,
                    ),
                ),
                ("submission_id", models.CharField(blank=True, db_index=True, max_length=100)),
                (
                    "copyright_status",
                    models.CharField(
                        blank=True,
                        choices=[("ORIGINAL", "Original"), ("COVER", "Cover"), ("INTERNATIONAL", "International")],
                        max_length=13,
                    ),
                ),
                (
                    "video_type",
                    models.CharField(
                        choices=[("NONE", "None"), ("MUSIC_VIDEO", "Music video"), ("LYRICS_VIDEO", "Lyrics video")],
                        default="NONE",
                        max_length=12,
                    ),
                ),
                ("payment_remarks", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("raw_row", models.JSONField(blank=True, null=True)),
                (
                    "needs_review",
                    models.BooleanField(default=False, help_text="Set when the importer kept a title it could not verify."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "artist",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="releases",
                        to="catalog.artist",
                    ),
                ),
                (
                    "assigned_ar",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_releases",
                        to="catalog.employee",
                    ),
                ),
                (
                    "import_session",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="releases",
                        to="catalog.importsession",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="ReleaseArtist",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_primary", models.BooleanField(default=False)),
                (
                    "artist",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="release_artists",
                        to="catalog.artist",
                    ),
                ),
                (
                    "release",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="release_artists",
                        to="catalog.release",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="releaseartist",
            constraint=models.UniqueConstraint(fields=("release", "artist"), name="unique_release_artist"),
        ),
        migrations.CreateModel(
            name="Track",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("track_number", models.PositiveSmallIntegerField()),
                ("name", models.CharField(max_length=500)),
                ("performer", models.CharField(blank=True, max_length=255)),
                ("composer", models.CharField(blank=True, max_length=255)),
                ("band", models.CharField(blank=True, max_length=255)),
                ("producer", models.CharField(blank=True, max_length=255)),
                ("studio", models.CharField(blank=True, max_length=255)),
                ("record_label", models.CharField(blank=True, max_length=255)),
                ("genre", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "release",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tracks",
                        to="catalog.release",
                    ),
                ),
            ],
            options={
                "ordering": ["release", "track_number"],
            },
        ),
        migrations.AddConstraint(
            model_name="track",
            constraint=models.UniqueConstraint(fields=("release", "track_number"), name="unique_track_number_per_release"),
        ),
        migrations.CreateModel(
            name="TrackArtist",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_primary", models.BooleanField(default=False)),
                (
                    "artist",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="track_artists",
                        to="catalog.artist",
                    ),
                ),
                (
                    "track",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="track_artists",
                        to="catalog.track",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="trackartist",
            constraint=models.UniqueConstraint(fields=("track", "artist"), name="unique_track_artist"),
        ),
        migrations.CreateModel(
            name="PlatformRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "platform",
                    models.CharField(
                        choices=[
                            ("youtube", "YouTube"),
                            ("facebook", "Facebook"),
                            ("tiktok", "TikTok"),
                            ("flow", "Flow"),
                            ("ringtunes", "Ringtunes"),
                            ("international_streaming", "International streaming"),
                        ],
                        max_length=24,
                    ),
                ),
                ("channel_name", models.CharField(blank=True, max_length=255)),
                ("requested", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("UPLOADED", "Uploaded"),
                        ],
                        default="PENDING",
                        max_length=8,
                    ),
                ),
                ("uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "release",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="platform_requests",
                        to="catalog.release",
                    ),
                ),
                (
                    "track",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="platform_requests",
                        to="catalog.track",
                    ),
                ),
            ],
            options={
                "ordering": ["release", "platform", "channel_name"],
            },
        ),
    ]
