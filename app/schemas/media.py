from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal, Union, Annotated
from datetime import date, datetime

MediaType = Literal['movie', 'tv']
WatchStatus = Literal['unwatched', 'in-progress', 'watched']
EpisodeWatchStatus = Literal['unwatched', 'watched']


# --- Requests ---
class AddFromCatalogRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tmdb_id: int = Field(alias='tmdbId')
    media_type: MediaType = Field(alias='type')
    folder_path: Optional[str] = Field(default=None, alias='folderPath')


class WatchStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    watch_status: WatchStatus = Field(alias='watchStatus')
    current_episode: Optional[int] = Field(default=None, alias='currentEpisode', ge=0)
    progress_percent: Optional[int] = Field(default=None, alias='progressPercent', ge=0, le=100)


class EpisodeWatchStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    watch_status: EpisodeWatchStatus = Field(alias='watchStatus')


# --- Responses ---
class EpisodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    media_id: int
    title: Optional[str] = None
    episode_number: int
    season_number: int
    description: Optional[str] = None
    duration: Optional[str] = None
    air_date: Optional[date] = None
    date_added: Optional[datetime] = None
    watch_status: EpisodeWatchStatus


class _MediaBase(BaseModel):
    id: int
    title: str
    year: Optional[int] = None
    rating: Optional[float] = None
    duration: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    backdrop: Optional[str] = None
    watch_status: WatchStatus = 'unwatched'
    progress_percent: Optional[int] = None
    last_watched: Optional[datetime] = None
    date_added: Optional[datetime] = None
    genre: List[str] = Field(default_factory=list)


class MovieOut(_MediaBase):
    type: Literal['movie']


class TvOut(_MediaBase):
    type: Literal['tv']
    total_episodes: Optional[int] = None
    current_episode: Optional[int] = None
    # Only filled on the detail endpoint
    episodes: Optional[List[EpisodeOut]] = None


MediaOut = Annotated[Union[MovieOut, TvOut], Field(discriminator='type')]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class MediaPage(BaseModel):
    data: List[MediaOut]
    pagination: Pagination


class GenreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
