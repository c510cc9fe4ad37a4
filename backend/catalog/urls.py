from django.urls import path

from .views.artist_views import artist_duplicates, artist_merge, artist_merge_preview
from .views.import_views import (
    import_cancel,
    import_cancel_all,
    import_failed_rows,
    import_preview,
    import_progress,
    import_reprocess,
    import_start,
)
from .views.repair_views import repair_employees, repair_releases

app_name = "catalog"

urlpatterns = [
    path("imports/preview/", import_preview, name="import_preview"),
    path("imports/start/", import_start, name="import_start"),
    path("imports/cancel-all/", import_cancel_all, name="import_cancel_all"),
    path("imports/<int:session_id>/progress/", import_progress, name="import_progress"),
    path("imports/<int:session_id>/cancel/", import_cancel, name="import_cancel"),
    path("imports/<int:session_id>/failed-rows/", import_failed_rows, name="import_failed_rows"),
    path("imports/<int:session_id>/reprocess/", import_reprocess, name="import_reprocess"),
    path("repair/releases/", repair_releases, name="repair_releases"),
    path("repair/employees/", repair_employees, name="repair_employees"),
    path("artists/merge/", artist_merge, name="artist_merge"),
    path("artists/duplicates/", artist_duplicates, name="artist_duplicates"),
    path("artists/<int:artist_id>/merge-preview/", artist_merge_preview, name="artist_merge_preview"),
]
