from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.database import Base

from app.models.genre import media_genres


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Media(Base):
    """One library item, either a movie or a tv series"""
    __tablename__ = "media"

    __table_args__ = (
        CheckConstraint("type IN ('movie', 'tv')", name="ck_media_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    type = Column(String(10), nullable=False, index=True)
    year = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)  # 0-10, one decimal
    duration = Column(String(50), nullable=True)  # "2h 16m", "136m", "4 Seasons"
    description = Column(Text)
    thumbnail = Column(String(500), nullable=True)
    backdrop = Column(String(500), nullable=True)

    # Only meaningful for tv
    total_episodes = Column(Integer, nullable=True)

    # Watch progress
    watch_status = Column(String(20), nullable=False, default="unwatched")
    current_episode = Column(Integer, nullable=True)
    progress_percent = Column(Integer, nullable=True)
    last_watched = Column(DateTime, nullable=True)

    date_added = Column(DateTime, default=utcnow, nullable=False, index=True)

    genres = relationship("Genre", secondary=media_genres, back_populates="media")
    episodes = relationship("Episode", back_populates="media", cascade="all, delete-orphan")
    files = relationship("MediaFile", back_populates="media", cascade="all, delete-orphan")

    @property
    def genre_names(self) -> list:
        return [g.name for g in self.genres]

    @property
    def file_path(self):
        """First recorded file path, or None when the item was never linked to disk"""
        return self.files[0].file_path if self.files else None


class MediaFile(Base):
    """Optional link between a media row and a concrete path on disk"""
    __tablename__ = "media_files"

    id = Column(Integer, primary_key=True, index=True)
    media_id = Column(Integer, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True)
    file_path = Column(String(1024), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    media = relationship("Media", back_populates="files")
