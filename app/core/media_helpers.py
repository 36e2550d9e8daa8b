from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from app.models.media import Media
from app.models.episode import Episode


def round_rating(value: Optional[float]) -> Optional[float]:
    """Round half-up to one decimal: 8.73 -> 8.7, 8.75 -> 8.8"""
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def serialize_episode(episode: Episode) -> dict:
    return {
        "id": episode.id,
        "media_id": episode.media_id,
        "title": episode.title,
        "episode_number": episode.episode_number,
        "season_number": episode.season_number,
        "description": episode.description,
        "duration": episode.duration,
        "air_date": episode.air_date,
        "date_added": episode.date_added,
        "watch_status": episode.watch_status,
    }


def serialize_media(media: Media, episodes: Optional[list] = None) -> dict:
    """
    Flat dict for one media row plus its genre names.
    Episodes are only attached when passed in, and only for tv.
    """
    data = {
        "id": media.id,
        "title": media.title,
        "type": media.type,
        "year": media.year,
        "rating": media.rating,
        "duration": media.duration,
        "description": media.description,
        "thumbnail": media.thumbnail,
        "backdrop": media.backdrop,
        "total_episodes": media.total_episodes,
        "watch_status": media.watch_status,
        "current_episode": media.current_episode,
        "progress_percent": media.progress_percent,
        "last_watched": media.last_watched,
        "date_added": media.date_added,
        "genre": media.genre_names,
    }

    if media.type == "tv" and episodes is not None:
        data["episodes"] = [serialize_episode(e) for e in episodes]

    return data
