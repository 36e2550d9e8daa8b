import logging
import math
import os
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.errors import EpisodeNotFound, MediaNotFound
from app.core.media_helpers import serialize_media
from app.models.episode import Episode
from app.models.genre import Genre
from app.models.media import Media, utcnow
from app.schemas.media import WatchStatusUpdate
from app.services.scanner import LibraryScanner


class LibraryService:
    """Read and update operations on the library tables"""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(__name__)

    def list_media(
            self,
            page: int = 1,
            limit: int = 20,
            media_type: Optional[str] = None,
            genre: Optional[str] = None,
            search: Optional[str] = None,
    ) -> dict:
        """Filtered page of media, newest first"""
        query = self.db.query(Media)

        if media_type:
            query = query.filter(Media.type == media_type)
        if search:
            query = query.filter(Media.title.ilike(f"%{search}%"))
        if genre:
            # any() keeps one row per media no matter how many genres match
            query = query.filter(Media.genres.any(Genre.name == genre))

        total = query.count()

        items = (
            query.options(selectinload(Media.genres))
            .order_by(Media.date_added.desc(), Media.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "data": [serialize_media(m) for m in items],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
        }

    def get_media(self, media_id: int) -> Media:
        media = (
            self.db.query(Media)
            .options(selectinload(Media.genres))
            .filter(Media.id == media_id)
            .first()
        )
        if media is None:
            raise MediaNotFound("Media not found")
        return media

    def get_media_detail(self, media_id: int) -> dict:
        """Media payload; tv items carry their episodes ordered by season and number"""
        media = self.get_media(media_id)

        episodes = None
        if media.type == "tv":
            episodes = (
                self.db.query(Episode)
                .filter(Episode.media_id == media_id)
                .order_by(Episode.season_number, Episode.episode_number)
                .all()
            )

        return serialize_media(media, episodes)

    def update_watch_status(self, media_id: int, update: WatchStatusUpdate) -> Media:
        media = self.db.get(Media, media_id)
        if media is None:
            raise MediaNotFound("Media not found")

        media.watch_status = update.watch_status
        media.current_episode = update.current_episode
        media.progress_percent = update.progress_percent
        media.last_watched = utcnow()

        self.db.commit()
        return media

    def update_episode_watch_status(self, episode_id: int, watch_status: str) -> Episode:
        episode = self.db.get(Episode, episode_id)
        if episode is None:
            raise EpisodeNotFound("Episode not found")

        episode.watch_status = watch_status
        self.db.commit()
        return episode

    def delete_media(self, media_id: int) -> None:
        """Delete a media row. Its episodes and file links go with it."""
        media = self.db.get(Media, media_id)
        if media is None:
            raise MediaNotFound("Media not found")

        self.logger.info(f"Deleting media {media_id} '{media.title}'")
        self.db.delete(media)
        self.db.commit()

    def list_genres(self) -> list[Genre]:
        return self.db.query(Genre).order_by(Genre.name).all()

    def random_movies(self, genre: str, limit: int = 3) -> list[dict]:
        """Random pick of movies tagged with a genre"""
        dialect = self.db.get_bind().dialect.name
        shuffle = func.rand() if dialect == "mysql" else func.random()

        movies = (
            self.db.query(Media)
            .options(selectinload(Media.genres))
            .filter(Media.type == "movie", Media.genres.any(Genre.name == genre))
            .order_by(shuffle)
            .limit(limit)
            .all()
        )
        return [serialize_media(m) for m in movies]

    def library_stats(self, scanner: LibraryScanner) -> dict:
        """Database row count against the folders present on disk"""
        db_count = self.db.query(Media).count()
        movie_folders = scanner.count_folders("movie")
        tv_folders = scanner.count_folders("tv")

        movie_root = scanner.settings.library_root("movie")
        tv_root = scanner.settings.library_root("tv")
        shared_root = (
            movie_root is not None and tv_root is not None
            and os.path.abspath(movie_root) == os.path.abspath(tv_root)
        )

        return {
            "success": True,
            "dbFileCount": db_count,
            "movieFolderCount": movie_folders,
            "tvFolderCount": tv_folders,
            # one shared root holds each folder once
            "totalFolders": movie_folders if shared_root else movie_folders + tv_folders,
        }
