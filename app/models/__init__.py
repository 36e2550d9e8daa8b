# Import all models here so SQLAlchemy can set up relationships
from app.models.genre import Genre, media_genres
from app.models.media import Media, MediaFile
from app.models.episode import Episode

__all__ = [
    'Genre', 'media_genres',
    'Media', 'MediaFile',
    'Episode',
]
