from .artist import Artist
from .employee import Employee
from .import_session import ImportSession
from .failed_import_row import FailedImportRow
from .release import Release, ReleaseArtist
from .track import Track, TrackArtist
from .platform_request import PlatformRequest

__all__ = [
    "Artist",
    "Employee",
    "ImportSession",
    "FailedImportRow",
    "Release",
    "ReleaseArtist",
    "Track",
    "TrackArtist",
    "PlatformRequest",
]
