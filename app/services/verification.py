import logging
import os
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from app.config import Settings, settings as default_settings
from app.core.media_helpers import serialize_media
from app.models.media import Media, utcnow

logger = logging.getLogger(__name__)

VERIFIED = "verified"
FILE_MISSING = "file-missing"
MISSING = "missing"


def path_exists(path: Optional[str]) -> bool:
    """Existence check where any OS error means 'not there'"""
    if not path:
        return False
    try:
        return os.path.exists(path)
    except (OSError, ValueError) as e:
        logger.info(f"File system check error for {path}: {e}")
        return False


class VerificationService:
    """Checks that media rows still have their folder on disk"""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or default_settings

    def expected_path(self, media: Media) -> Optional[str]:
        """
        '{library_root}/{title} ({year})' for the media's type.
        None when no library root is configured for that type.
        """
        root = self.settings.library_root(media.type)
        if root is None:
            return None
        return os.path.join(str(root), f"{media.title} ({media.year})")

    def resolve_path(self, media: Media) -> Optional[str]:
        """Recorded file path if there is one, otherwise the expected path"""
        return media.file_path or self.expected_path(media)

    def check(self, media: Media) -> dict:
        """Existence check for one media row that is known to exist"""
        file_path = self.resolve_path(media)
        exists = path_exists(file_path)

        return {
            "databaseExists": True,
            "fileSystemExists": exists,
            "status": VERIFIED if exists else FILE_MISSING,
            "filePath": file_path,
        }

    def verify(self, media_id: int) -> dict:
        """
        Verify a single media id. Always answers with a definite status:
        'missing' (no row), 'file-missing' or 'verified'.
        """
        media = (
            self.db.query(Media)
            .options(selectinload(Media.genres), selectinload(Media.files))
            .filter(Media.id == media_id)
            .first()
        )

        if media is None:
            return {
                "databaseExists": False,
                "fileSystemExists": False,
                "status": MISSING,
            }

        result = self.check(media)
        result["media"] = serialize_media(media)
        return result

    def verify_recent(self, hours: int = 24) -> list[dict]:
        """
        Check every media row added in the trailing window, newest first.
        Every row is checked; one missing folder never stops the run.
        """
        cutoff = utcnow() - timedelta(hours=hours)

        recent = (
            self.db.query(Media)
            .options(selectinload(Media.genres), selectinload(Media.files))
            .filter(Media.date_added >= cutoff)
            .order_by(Media.date_added.desc(), Media.id.desc())
            .all()
        )

        results = []
        for media in recent:
            item = {
                "id": media.id,
                "title": media.title,
                "type": media.type,
                "year": media.year,
                "dateAdded": media.date_added,
            }
            item.update(self.check(media))
            item["genre"] = media.genre_names
            results.append(item)

        return results
