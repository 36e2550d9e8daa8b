import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

from app.api.deps import get_db, get_catalog_client
from app.config import settings
from app.core.errors import CatalogUnavailable
from app.database import Base
from app.main import app
from app.models import Media, Episode
from app.schemas.catalog import (
    CatalogCandidate, CatalogEpisode, MovieDetails, SeasonSummary, TvDetails,
)


# --- FIXTURE START ---
@pytest.fixture(scope="session", autouse=True)
def mock_background_services():
    """
    Global patch to prevent the scheduler thread from starting during tests.
    """
    from app.services.scheduler import scheduler_service

    scheduler_service.start = MagicMock()
    scheduler_service.stop = MagicMock()


# --- FIXTURE END ---

# 1. SETUP TEST DATABASE
# SQLite in-memory with StaticPool so the data persists
# for the duration of a single test function but isolates threads.
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# 2. DB SESSION FIXTURE
@pytest.fixture(scope="function")
def db():
    """
    Creates a fresh database for every single test case.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


# 3. FAKE CATALOG
class FakeCatalog:
    """
    Stands in for CatalogClient. Register payloads on the instance;
    anything unregistered behaves like a TMDB 404.
    """

    def __init__(self, api_key: str = "test-key"):
        self.api_key = api_key
        self.movies: dict[int, MovieDetails] = {}
        self.shows: dict[int, TvDetails] = {}
        self.seasons: dict[tuple[int, int], list] = {}
        self.failing_seasons: set[tuple[int, int]] = set()
        self.search_results: list[CatalogCandidate] = []
        self.search_calls: list[tuple] = []
        self.season_calls: list[tuple[int, int]] = []

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query, media_type=None, year=None):
        self.search_calls.append((query, media_type, year))
        return list(self.search_results)

    async def search_raw(self, query, media_type=None, year=None):
        return {"page": 1, "results": [c.model_dump() for c in self.search_results]}

    async def get_details(self, catalog_id, media_type):
        registry = self.movies if media_type == "movie" else self.shows
        if catalog_id not in registry:
            raise CatalogUnavailable("The resource you requested could not be found.", status_code=404)
        return registry[catalog_id]

    async def get_season_episodes(self, catalog_id, season_number):
        self.season_calls.append((catalog_id, season_number))
        if (catalog_id, season_number) in self.failing_seasons:
            raise CatalogUnavailable("Internal error", status_code=500)
        return self.seasons.get((catalog_id, season_number), [])

    async def get_configuration(self):
        return {"images": {"secure_base_url": "https://image.tmdb.org/t/p/", "poster_sizes": ["w500"]}}

    async def close(self):
        pass

    # --- builders ---
    def add_show(self, show_id: int, title: str, year: int, episodes_per_season: dict[int, int]) -> TvDetails:
        """Registers a show and its seasons. Season 0 is allowed (specials)."""
        show = TvDetails(
            id=show_id,
            title=title,
            year=year,
            vote_average=8.0,
            genres=["Drama"],
            number_of_seasons=len([n for n in episodes_per_season if n != 0]),
            number_of_episodes=sum(c for n, c in episodes_per_season.items() if n != 0),
            seasons=[SeasonSummary(season_number=n, episode_count=c) for n, c in episodes_per_season.items()],
        )
        self.shows[show_id] = show
        for season_number, count in episodes_per_season.items():
            self.seasons[(show_id, season_number)] = [
                CatalogEpisode(
                    episode_number=i,
                    season_number=season_number,
                    name=f"S{season_number}E{i}",
                    overview="",
                    air_date=date(year, 1, i),
                    runtime=50,
                )
                for i in range(1, count + 1)
            ]
        self.search_results = [CatalogCandidate(id=show_id, type="tv", title=title, year=year)]
        return show


@pytest.fixture(scope="function")
def catalog():
    return FakeCatalog()


# 4. CLIENT FIXTURE
@pytest.fixture(scope="function")
def client(db, catalog) -> Generator:
    """
    Returns a TestClient with the database and catalog dependencies overridden.
    """

    def override_get_db():
        try:
            yield db
        finally:
            # The 'db' fixture handles the teardown at the end of the test function.
            pass

    async def override_get_catalog_client():
        yield catalog

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_client] = override_get_catalog_client

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# 5. LIBRARY ROOT FIXTURES
@pytest.fixture(scope="function")
def library_roots(tmp_path, monkeypatch):
    """Separate movie and tv roots under tmp_path"""
    movies = tmp_path / "movies"
    tv = tmp_path / "tv"
    movies.mkdir()
    tv.mkdir()

    monkeypatch.setattr(settings, "media_library_path", None)
    monkeypatch.setattr(settings, "movies_library_path", movies)
    monkeypatch.setattr(settings, "tv_library_path", tv)
    return {"movie": movies, "tv": tv}


@pytest.fixture(scope="function")
def no_library_roots(monkeypatch):
    monkeypatch.setattr(settings, "media_library_path", None)
    monkeypatch.setattr(settings, "movies_library_path", None)
    monkeypatch.setattr(settings, "tv_library_path", None)


# 6. DATA HELPERS
@pytest.fixture(scope="function")
def make_media(db):
    def _make(title="Inception", media_type="movie", year=2010, **kwargs):
        media = Media(title=title, type=media_type, year=year, **kwargs)
        db.add(media)
        db.commit()
        db.refresh(media)
        return media
    return _make


@pytest.fixture(scope="function")
def make_episode(db):
    def _make(media, season_number=1, episode_number=1, **kwargs):
        episode = Episode(
            media_id=media.id,
            season_number=season_number,
            episode_number=episode_number,
            title=f"S{season_number}E{episode_number}",
            **kwargs
        )
        db.add(episode)
        db.commit()
        db.refresh(episode)
        return episode
    return _make
