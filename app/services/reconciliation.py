import asyncio
import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, settings as default_settings
from app.core.errors import (
    ConfigurationError, MediaNotFound, NoCatalogMatch,
)
from app.core.media_helpers import round_rating
from app.models.episode import Episode
from app.models.genre import Genre
from app.models.media import Media, MediaFile
from app.schemas.catalog import CatalogCandidate, CatalogEpisode, MovieDetails, TvDetails
from app.services.catalog import CatalogClient, backdrop_url, poster_url

DEFAULT_EPISODE_DURATION = "45m"


def media_fields_from_details(details: MovieDetails | TvDetails) -> dict:
    """Map catalog details onto Media columns"""
    fields = {
        "title": details.title,
        "type": details.type,
        "year": details.year,
        "rating": round_rating(details.vote_average),
        "description": details.overview,
        "thumbnail": poster_url(details.poster_path),
        "backdrop": backdrop_url(details.backdrop_path),
    }

    if isinstance(details, TvDetails):
        fields["duration"] = f"{details.number_of_seasons} Seasons"
        fields["total_episodes"] = details.number_of_episodes
    else:
        fields["duration"] = f"{details.runtime}m" if details.runtime else None
        fields["total_episodes"] = None

    return fields


class ReconciliationService:
    """
    Write path between the catalog and the library database:
    importing catalog entries, guessing matches for scanned folders and
    filling in the episode list of a tv series.
    """

    def __init__(self, db: Session, catalog: CatalogClient, settings: Settings = None):
        self.db = db
        self.catalog = catalog
        self.settings = settings or default_settings
        self.logger = logging.getLogger(__name__)

    # --- Add ---

    def _find_genre(self, name: str) -> Optional[Genre]:
        return self.db.query(Genre).filter(Genre.name == name).first()

    def _get_or_create_genre(self, name: str) -> Genre:
        """
        Exact, case-sensitive lookup; inserted when absent.
        A concurrent insert of the same name loses to the unique index inside
        a savepoint and the existing row is used instead.
        """
        genre = self._find_genre(name)
        if genre is not None:
            return genre

        try:
            with self.db.begin_nested():
                genre = Genre(name=name)
                self.db.add(genre)
        except IntegrityError:
            self.logger.info(f"Genre '{name}' was created concurrently, reusing it")
            genre = self._find_genre(name)
        return genre

    async def add_from_catalog(self, catalog_id: int, media_type: str, folder_path: Optional[str] = None) -> Media:
        """
        Import one catalog entry as a new media row with its genres.

        The media row, every genre link and the optional file link commit
        together. If any of them fails nothing is kept.
        Adding the same catalog id twice creates two rows.
        """
        details = await self.catalog.get_details(catalog_id, media_type)

        try:
            media = Media(**media_fields_from_details(details))
            self.db.add(media)
            self.db.flush()  # media.id is needed before linking

            # dict.fromkeys keeps payload order while dropping repeats
            for name in dict.fromkeys(details.genres):
                media.genres.append(self._get_or_create_genre(name))

            if folder_path:
                self.db.add(MediaFile(media_id=media.id, file_path=folder_path))

            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self.logger.error(f"Failed to add catalog {media_type} {catalog_id}", exc_info=True)
            raise

        self.db.refresh(media)
        self.logger.info(f"Added {media.type} '{media.title}' ({media.year}) as media {media.id}")
        return media

    # --- Folder matching ---

    async def match_folder(self, title: str, year: Optional[int], media_type: str) -> Optional[CatalogCandidate]:
        """First catalog hit for a scanned folder's guessed title/year, or None"""
        candidates = await self.catalog.search(title, media_type, year)
        if not candidates:
            self.logger.info(f"No catalog match for folder '{title}' ({year})")
            return None
        return candidates[0]

    # --- Episodes ---

    async def _fetch_seasons(self, show_id: int, season_numbers: list[int]) -> list[tuple[int, Optional[list[CatalogEpisode]]]]:
        """
        Fetch every season's episode list with bounded concurrency.
        A season that fails comes back as None so the rest still load.
        """
        semaphore = asyncio.Semaphore(max(1, self.settings.catalog_max_concurrency))

        async def fetch(season_number: int):
            async with semaphore:
                try:
                    return season_number, await self.catalog.get_season_episodes(show_id, season_number)
                except Exception as e:
                    self.logger.warning(f"Skipping season {season_number} of catalog show {show_id}: {e}")
                    return season_number, None

        # gather keeps input order, so inserts still run season by season
        return await asyncio.gather(*(fetch(n) for n in season_numbers))

    def _store_season(self, media_id: int, season_number: int, episodes: list[CatalogEpisode], known: set) -> int:
        """Insert one season's new episodes in its own transaction. Returns rows added."""
        today = date.today()
        season_keys = set()

        for ep in episodes:
            key = (ep.season_number, ep.episode_number)
            if ep.season_number == 0 or key in known or key in season_keys:
                continue

            self.db.add(Episode(
                media_id=media_id,
                title=ep.name,
                episode_number=ep.episode_number,
                season_number=ep.season_number,
                description=ep.overview,
                duration=f"{ep.runtime}m" if ep.runtime else DEFAULT_EPISODE_DURATION,
                air_date=ep.air_date or today,
                watch_status="unwatched",
            ))
            season_keys.add(key)

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.warning(f"Failed to store season {season_number} for media {media_id}: {e}")
            return 0

        known.update(season_keys)
        return len(season_keys)

    async def populate_episodes(self, media_id: int) -> dict:
        """
        Fill the episode table of a tv series from the catalog.

        The show is located by searching the catalog for the media's title
        and first-air year; the first hit is taken as-is. Specials (season 0)
        are skipped. A season that cannot be fetched or stored is logged and
        skipped, and the counts reflect only what was stored.
        """
        media = self.db.get(Media, media_id)
        if media is None or media.type != "tv":
            raise MediaNotFound("TV show not found")

        if not self.catalog.is_configured:
            raise ConfigurationError("TMDB API key not configured")

        title, year = media.title, media.year

        results = await self.catalog.search(title, "tv", year)
        if not results:
            raise NoCatalogMatch(f"No TMDB match found for '{title}'")

        show_id = results[0].id
        details = await self.catalog.get_details(show_id, "tv")

        season_numbers = [s.season_number for s in details.seasons if s.season_number != 0]
        fetched = await self._fetch_seasons(show_id, season_numbers)

        known = {
            (row.season_number, row.episode_number)
            for row in self.db.query(Episode.season_number, Episode.episode_number)
            .filter(Episode.media_id == media_id)
            .all()
        }

        added = 0
        for season_number, episodes in fetched:
            if episodes is None:
                continue
            added += self._store_season(media_id, season_number, episodes, known)

        # Stored count, which can differ from the catalog's advertised count
        media = self.db.get(Media, media_id)
        media.total_episodes = len(known)
        self.db.commit()

        self.logger.info(
            f"Populated {added} episode(s) for '{title}' from {len(details.seasons)} catalog season(s)"
        )
        return {"episodes_added": added, "seasons": len(details.seasons)}
