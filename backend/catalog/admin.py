from django.contrib import admin, messages

from .exceptions import SessionStateError
from .importer.session import cancel_session
from .models import (
    Artist,
    Employee,
    FailedImportRow,
    ImportSession,
    PlatformRequest,
    Release,
    ReleaseArtist,
    Track,
    TrackArtist,
)


@admin.register(Artist)
class ArtistAdmin(admin.ModelAdmin):
    list_display = ("name", "legal_name", "email", "created_at")
    search_fields = ("name", "legal_name", "email")


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("name", "employee_code", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "user__email")


class FailedImportRowInline(admin.TabularInline):
    model = FailedImportRow
    extra = 0
    fields = ("row_number", "message", "attempts", "updated_at")
    readonly_fields = fields
    can_delete = False


@admin.register(ImportSession)
class ImportSessionAdmin(admin.ModelAdmin):
    list_display = (
        "file_name",
        "status",
        "rows_processed",
        "total_rows",
        "success_count",
        "error_count",
        "started_at",
    )
    list_filter = ("status",)
    search_fields = ("file_name", "file_hash")
    readonly_fields = ("file_hash", "started_at", "completed_at")
    inlines = [FailedImportRowInline]
    actions = ["cancel_selected"]

    @admin.action(description="Cancel selected imports")
    def cancel_selected(self, request, queryset):
        cancelled = 0
        for session in queryset.filter(status=ImportSession.Status.IN_PROGRESS):
            try:
                cancel_session(session, f"Cancelled by {request.user} from admin")
            except SessionStateError:
                continue
            cancelled += 1
        self.message_user(request, f"Cancelled {cancelled} import(s).", messages.SUCCESS)


@admin.register(FailedImportRow)
class FailedImportRowAdmin(admin.ModelAdmin):
    list_display = ("session", "row_number", "attempts", "updated_at")
    list_filter = ("session",)
    search_fields = ("message", "session__file_name")


class ReleaseArtistInline(admin.TabularInline):
    model = ReleaseArtist
    extra = 0
    autocomplete_fields = ("artist",)


class TrackInline(admin.TabularInline):
    model = Track
    extra = 0
    fields = ("track_number", "name", "performer", "genre")


@admin.register(Release)
class ReleaseAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "artist", "assigned_ar", "needs_review", "created_at")
    list_filter = ("type", "needs_review", "copyright_status")
    search_fields = ("title", "submission_id", "artist__name")
    autocomplete_fields = ("artist", "assigned_ar")
    inlines = [ReleaseArtistInline, TrackInline]


@admin.register(Track)
class TrackAdmin(admin.ModelAdmin):
    list_display = ("name", "release", "track_number", "genre")
    search_fields = ("name", "release__title")


@admin.register(TrackArtist)
class TrackArtistAdmin(admin.ModelAdmin):
    list_display = ("track", "artist", "is_primary")
    list_filter = ("is_primary",)
    autocomplete_fields = ("track", "artist")


@admin.register(PlatformRequest)
class PlatformRequestAdmin(admin.ModelAdmin):
    list_display = ("release", "platform", "channel_name", "requested", "status", "uploaded_at")
    list_filter = ("platform", "status", "requested")
    search_fields = ("release__title", "channel_name")
