from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.media import utcnow


class Episode(Base):
    __tablename__ = "episodes"

    id = Column(Integer, primary_key=True, index=True)
    media_id = Column(Integer, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255))
    episode_number = Column(Integer, nullable=False)
    season_number = Column(Integer, nullable=False)
    description = Column(Text)
    duration = Column(String(50))
    air_date = Column(Date, nullable=True)
    date_added = Column(DateTime, default=utcnow)
    watch_status = Column(String(20), nullable=False, default="unwatched")

    # One row per (show, season, episode)
    __table_args__ = (
        UniqueConstraint('media_id', 'season_number', 'episode_number', name='unique_media_episode'),
    )

    media = relationship("Media", back_populates="episodes")
