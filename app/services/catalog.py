import logging
from datetime import date
from typing import Any, Optional

import httpx

from app.config import settings
from app.core.errors import CatalogUnavailable, ConfigurationError
from app.schemas.catalog import (
    CatalogCandidate, CatalogDetails, CatalogEpisode, MovieDetails, SeasonSummary, TvDetails,
)

logger = logging.getLogger(__name__)

POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"


def parse_date(value: Optional[str]) -> Optional[date]:
    """TMDB sends dates as 'YYYY-MM-DD', but also '' or null for unknown"""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def year_from(value: Optional[str]) -> Optional[int]:
    parsed = parse_date(value)
    return parsed.year if parsed else None


def image_url(path: Optional[str], size: str) -> Optional[str]:
    if not path:
        return None
    return f"{settings.tmdb_image_base_url}/{size}{path}"


def poster_url(path: Optional[str]) -> Optional[str]:
    return image_url(path, POSTER_SIZE)


def backdrop_url(path: Optional[str]) -> Optional[str]:
    return image_url(path, BACKDROP_SIZE)


class CatalogClient:
    """
    Thin async client for the TMDB v3 API.

    Every call goes straight to the upstream API; there is no cache and no
    retry. Transport failures and non-2xx answers raise CatalogUnavailable
    with the upstream's own status message when it sends one.
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            base_url: str = None,
            timeout: float = None,
            transport: httpx.AsyncBaseTransport = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.tmdb_api_key
        self.base_url = base_url or settings.tmdb_base_url
        self.timeout = timeout or settings.catalog_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self.is_configured:
            raise ConfigurationError("TMDB API key is not configured")

        query = {"api_key": self.api_key}
        if params:
            query.update({k: v for k, v in params.items() if v is not None})

        try:
            response = await self._get_client().get(path, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _upstream_message(e.response)
            logger.warning(f"Catalog request {path} failed: {e.response.status_code} {message}")
            raise CatalogUnavailable(message, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning(f"Catalog request {path} failed: {e}")
            raise CatalogUnavailable(f"Catalog request failed: {e}") from e

        return response.json()

    # --- Search ---

    async def search_raw(self, query: str, media_type: Optional[str] = None, year: Optional[int] = None) -> dict[str, Any]:
        """Upstream search payload, untouched"""
        endpoint = "/search/multi"
        params: dict[str, Any] = {"query": query}

        if media_type == "movie":
            endpoint = "/search/movie"
            params["year"] = year
        elif media_type == "tv":
            endpoint = "/search/tv"
            params["first_air_date_year"] = year

        return await self._get(endpoint, params)

    async def search(self, query: str, media_type: Optional[str] = None, year: Optional[int] = None) -> list[CatalogCandidate]:
        """
        Search by free text, optionally scoped to one media type and year.
        An empty result set is a normal answer, not an error.
        """
        data = await self.search_raw(query, media_type, year)

        candidates = []
        for item in data.get("results") or []:
            item_type = media_type or item.get("media_type")
            if item_type not in ("movie", "tv"):
                # multi search also returns people
                continue
            candidates.append(_to_candidate(item, item_type))

        return candidates

    # --- Details ---

    async def get_details(self, catalog_id: int, media_type: str) -> CatalogDetails:
        if media_type == "movie":
            data = await self._get(f"/movie/{catalog_id}")
            return MovieDetails(
                id=data["id"],
                title=data.get("title") or "",
                year=year_from(data.get("release_date")),
                overview=data.get("overview") or "",
                poster_path=data.get("poster_path"),
                backdrop_path=data.get("backdrop_path"),
                vote_average=data.get("vote_average") or 0.0,
                genres=[g["name"] for g in data.get("genres") or []],
                runtime=data.get("runtime"),
            )

        if media_type == "tv":
            data = await self._get(f"/tv/{catalog_id}")
            return TvDetails(
                id=data["id"],
                title=data.get("name") or "",
                year=year_from(data.get("first_air_date")),
                overview=data.get("overview") or "",
                poster_path=data.get("poster_path"),
                backdrop_path=data.get("backdrop_path"),
                vote_average=data.get("vote_average") or 0.0,
                genres=[g["name"] for g in data.get("genres") or []],
                number_of_seasons=data.get("number_of_seasons") or 0,
                number_of_episodes=data.get("number_of_episodes"),
                seasons=[
                    SeasonSummary(
                        season_number=s["season_number"],
                        episode_count=s.get("episode_count") or 0,
                        name=s.get("name"),
                        air_date=parse_date(s.get("air_date")),
                    )
                    for s in data.get("seasons") or []
                ],
            )

        raise ValueError(f"Unknown media type: {media_type}")

    async def get_season_episodes(self, catalog_id: int, season_number: int) -> list[CatalogEpisode]:
        data = await self._get(f"/tv/{catalog_id}/season/{season_number}")

        return [
            CatalogEpisode(
                episode_number=ep["episode_number"],
                season_number=ep.get("season_number", season_number),
                name=ep.get("name"),
                overview=ep.get("overview"),
                air_date=parse_date(ep.get("air_date")),
                runtime=ep.get("runtime"),
            )
            for ep in data.get("episodes") or []
        ]

    async def get_configuration(self) -> dict[str, Any]:
        """Image configuration; doubles as a connectivity check"""
        return await self._get("/configuration")


def _to_candidate(item: dict[str, Any], media_type: str) -> CatalogCandidate:
    if media_type == "tv":
        title, released = item.get("name"), item.get("first_air_date")
    else:
        title, released = item.get("title"), item.get("release_date")

    return CatalogCandidate(
        id=item["id"],
        type=media_type,
        title=title or "Unknown Title",
        year=year_from(released),
        overview=item.get("overview") or "",
        poster_path=item.get("poster_path"),
        vote_average=item.get("vote_average") or 0.0,
    )


def _upstream_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("status_message"):
        return body["status_message"]
    return f"Catalog responded with HTTP {response.status_code}"
