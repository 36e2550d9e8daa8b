import hashlib
import logging
import os
import re
from datetime import date
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from app.config import Settings, settings as default_settings
from app.models.media import Media
from app.schemas.scan import ScannedFolder

# "Inception (2010)" -> ("Inception", 2010)
FOLDER_PATTERN = re.compile(r"^(?P<title>.+?)\s*\((?P<year>\d{4})\)$")


def parse_folder_name(name: str, today: Optional[date] = None) -> tuple[str, int]:
    """
    Best guess title/year for a library folder.
    Names without a trailing "(YYYY)" keep the raw name and get the current year
    as a placeholder.
    """
    match = FOLDER_PATTERN.match(name.strip())
    if match:
        return match.group("title").strip(), int(match.group("year"))
    return name, (today or date.today()).year


def folder_id(media_type: str, path: str) -> str:
    return hashlib.sha1(f"{media_type}:{os.path.abspath(path)}".encode("utf-8")).hexdigest()[:16]


class LibraryScanner:
    """Lists the top-level folders of the movie and tv library roots"""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or default_settings
        self.logger = logging.getLogger(__name__)

    def roots(self) -> list[tuple[str, Optional[Path]]]:
        """(media type, root) pairs, movies first. Roots may coincide."""
        return [
            ("movie", self.settings.library_root("movie")),
            ("tv", self.settings.library_root("tv")),
        ]

    def _iter_folders(self, root: Optional[Path]) -> Iterator[os.DirEntry]:
        """
        Direct child directories of a root, in enumeration order.
        A missing or unreadable root yields nothing.
        """
        if root is None:
            return

        try:
            with os.scandir(root) as entries:
                # Materialize inside the try so a read error mid-listing is caught too
                folders = []
                for entry in entries:
                    if entry.name.startswith("."):
                        continue
                    try:
                        if entry.is_dir():
                            folders.append(entry)
                    except OSError:
                        continue
        except OSError as e:
            self.logger.warning(f"Skipping library root {root}: {e}")
            return

        yield from folders

    def scan(self, unmatched_only: bool = False) -> list[ScannedFolder]:
        """
        One scan pass over every configured root.

        - **unmatched_only**: drop folders that already have a media row
          with the same type, title and year.
        """
        known = {
            (m.type, m.title, m.year)
            for m in self.db.query(Media.type, Media.title, Media.year).all()
        }
        today = date.today()

        folders = []
        for media_type, root in self.roots():
            if root is None:
                self.logger.debug(f"No library root configured for {media_type}, skipping")
                continue

            for entry in self._iter_folders(root):
                title, year = parse_folder_name(entry.name, today)
                in_library = (media_type, title, year) in known

                if unmatched_only and in_library:
                    continue

                folders.append(ScannedFolder(
                    id=folder_id(media_type, entry.path),
                    path=entry.path,
                    name=entry.name,
                    type=media_type,
                    title=title,
                    year=year,
                    in_library=in_library,
                ))

        self.logger.info(f"Scan found {len(folders)} folder(s)")
        return folders

    def count_folders(self, media_type: str) -> int:
        """Number of top-level folders under the root for a media type"""
        return sum(1 for _ in self._iter_folders(self.settings.library_root(media_type)))
