import logging

from catalog.exceptions import ArtistNameError
from catalog.models import Artist

logger = logging.getLogger(__name__)


def artist_key(name) -> str:
    return " ".join(str(name or "").split()).casefold()


class ArtistResolver:
    """
    Maps artist names to Artist rows, creating the ones that do not exist yet.

    Matching is trimmed and case-insensitive. The cache lives as long as the resolver,
    so an import session shares one instance across rows; entries created while a row
    is in flight are held as pending until ``commit()`` or dropped by ``rollback()``.
    """

    def __init__(self):
        self._cache = {}
        self._pending = {}
        self.created_count = 0

    def resolve(self, names) -> list:
        """Return one Artist per input name, in input order. The first entry is the primary."""
        return [self.resolve_one(name) for name in names]

    def resolve_one(self, name) -> Artist:
        cleaned = " ".join(str(name or "").split())
        if not cleaned:
            raise ArtistNameError("Artist name cannot be empty.")
        key = artist_key(cleaned)

        artist = self._pending.get(key) or self._cache.get(key)
        if artist is not None:
            return artist

        artist = Artist.objects.filter(name__iexact=cleaned).order_by("created_at", "pk").first()
        if artist is not None:
            self._cache[key] = artist
            return artist

        artist = Artist.objects.create(name=cleaned)
        self._pending[key] = artist
        self.created_count += 1
        logger.debug("Created artist %s (%s)", artist.pk, cleaned)
        return artist

    def commit(self) -> None:
        self._cache.update(self._pending)
        self._pending.clear()

    def rollback(self) -> None:
        self.created_count -= len(self._pending)
        self._pending.clear()

    def forget(self, artist) -> None:
        for store in (self._cache, self._pending):
            for key in [key for key, cached in store.items() if cached.pk == artist.pk]:
                del store[key]


def unique_artists(artists) -> list:
    seen = set()
    ordered = []
    for artist in artists:
        if artist.pk in seen:
            continue
        seen.add(artist.pk)
        ordered.append(artist)
    return ordered


def find_or_create_artists(names) -> list:
    resolver = ArtistResolver()
    artists = resolver.resolve(names)
    resolver.commit()
    return artists
