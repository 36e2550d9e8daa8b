from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship
from app.database import Base

# Junction table. No ordering guarantee on the genres of a media item.
media_genres = Table(
    "media_genres",
    Base.metadata,
    Column("media_id", Integer, ForeignKey("media.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
)


class Genre(Base):
    """
    Shared genre tag. Names match exactly (case-sensitive), so "Sci-Fi" and
    "sci-Fi" are two genres. Genres outlive the media that reference them.
    """
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    media = relationship("Media", secondary=media_genres, back_populates="genres")
