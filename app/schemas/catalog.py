from pydantic import BaseModel, Field
from typing import List, Optional, Literal, Union, Annotated
from datetime import date


class CatalogCandidate(BaseModel):
    """One normalized search hit"""
    id: int
    type: Literal['movie', 'tv']
    title: str
    year: Optional[int] = None
    overview: str = ""
    poster_path: Optional[str] = None
    vote_average: float = 0.0


class SeasonSummary(BaseModel):
    season_number: int
    episode_count: int = 0
    name: Optional[str] = None
    air_date: Optional[date] = None


class _DetailsBase(BaseModel):
    id: int
    title: str
    year: Optional[int] = None
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = 0.0
    genres: List[str] = Field(default_factory=list)


class MovieDetails(_DetailsBase):
    type: Literal['movie'] = 'movie'
    runtime: Optional[int] = None


class TvDetails(_DetailsBase):
    type: Literal['tv'] = 'tv'
    number_of_seasons: int = 0
    number_of_episodes: Optional[int] = None
    seasons: List[SeasonSummary] = Field(default_factory=list)


# Tagged on 'type' so movie and tv payloads never share nullable fields
CatalogDetails = Annotated[Union[MovieDetails, TvDetails], Field(discriminator='type')]


class CatalogEpisode(BaseModel):
    episode_number: int
    season_number: int
    name: Optional[str] = None
    overview: Optional[str] = None
    air_date: Optional[date] = None
    runtime: Optional[int] = None
