"""Typed access to The Movie Database (TMDB) endpoints."""

from __future__ import annotations

import logging
from typing import Any

from ..config import Settings
from ..models import MediaKind, TimeWindow, TrendingMediaType
from ..schemas import (
    CollectionDetailsResponse,
    CollectionSearchResponse,
    GenreListResponse,
    MovieDetails,
    MovieSearchResponse,
    PersonSearchResponse,
    TrendingResponse,
    TvDetails,
    TvSearchResponse,
    WatchProvidersResponse,
)
from .http import JsonFetcher

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"


class TMDBClient:
    """Client issuing validated requests against the TMDB v3 API.

    The wrapped :class:`JsonFetcher` must use an ``httpx.AsyncClient`` whose
    ``base_url`` points at the TMDB API root.
    """

    def __init__(self, settings: Settings, fetcher: JsonFetcher):
        self._settings = settings
        self._fetcher = fetcher

    def _params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {"api_key": self._settings.require_tmdb_key()}
        params.update({key: value for key, value in extra.items() if value is not None})
        return params

    @staticmethod
    def _year_param(media_kind: MediaKind, year: int | None, *, discover: bool) -> dict[str, Any]:
        if not year:
            return {}
        if media_kind == "movie":
            return {"primary_release_year" if discover else "year": year}
        return {"first_air_date_year": year}

    async def search_movie(self, query: str, *, year: int | None = None) -> MovieSearchResponse:
        params = self._params(
            query=query,
            language=DEFAULT_LANGUAGE,
            **self._year_param("movie", year, discover=False),
        )
        return await self._fetcher.get_json("/search/movie", MovieSearchResponse, params=params)

    async def search_tv(self, query: str, *, year: int | None = None) -> TvSearchResponse:
        params = self._params(
            query=query,
            language=DEFAULT_LANGUAGE,
            **self._year_param("tv", year, discover=False),
        )
        return await self._fetcher.get_json("/search/tv", TvSearchResponse, params=params)

    async def movie_details(self, movie_id: int) -> MovieDetails:
        return await self._fetcher.get_json(
            f"/movie/{movie_id}", MovieDetails, params=self._params()
        )

    async def tv_details(self, tv_id: int) -> TvDetails:
        params = self._params(append_to_response="external_ids")
        return await self._fetcher.get_json(f"/tv/{tv_id}", TvDetails, params=params)

    async def external_id(self, media_kind: MediaKind, tmdb_id: int) -> str | None:
        """Return the IMDb identifier for a movie or TV show."""

        if media_kind == "movie":
            details = await self.movie_details(tmdb_id)
            return details.imdb_id or None
        tv_details = await self.tv_details(tmdb_id)
        if tv_details.external_ids is None:
            logger.debug("TMDB returned no external ids for tv %s", tmdb_id)
            return None
        return tv_details.external_ids.imdb_id or None

    async def watch_providers(self, media_kind: MediaKind, tmdb_id: int) -> WatchProvidersResponse:
        return await self._fetcher.get_json(
            f"/{media_kind}/{tmdb_id}/watch/providers",
            WatchProvidersResponse,
            params=self._params(),
        )

    async def trending(
        self, media_type: TrendingMediaType, time_window: TimeWindow
    ) -> TrendingResponse:
        return await self._fetcher.get_json(
            f"/trending/{media_type}/{time_window}",
            TrendingResponse,
            params=self._params(),
        )

    async def popular(self, media_kind: MediaKind) -> MovieSearchResponse | TvSearchResponse:
        schema = MovieSearchResponse if media_kind == "movie" else TvSearchResponse
        return await self._fetcher.get_json(
            f"/{media_kind}/popular", schema, params=self._params()
        )

    async def genres(self, media_kind: MediaKind) -> GenreListResponse:
        return await self._fetcher.get_json(
            f"/genre/{media_kind}/list", GenreListResponse, params=self._params()
        )

    async def discover(
        self,
        media_kind: MediaKind,
        *,
        with_genres: int | None = None,
        with_cast: int | None = None,
        release_year: int | None = None,
    ) -> MovieSearchResponse | TvSearchResponse:
        schema = MovieSearchResponse if media_kind == "movie" else TvSearchResponse
        params = self._params(
            language=DEFAULT_LANGUAGE,
            with_genres=with_genres,
            with_cast=with_cast,
            **self._year_param(media_kind, release_year, discover=True),
        )
        return await self._fetcher.get_json(f"/discover/{media_kind}", schema, params=params)

    async def search_person(self, query: str) -> PersonSearchResponse:
        params = self._params(query=query, language=DEFAULT_LANGUAGE)
        return await self._fetcher.get_json("/search/person", PersonSearchResponse, params=params)

    async def search_collection(self, query: str) -> CollectionSearchResponse:
        params = self._params(query=query, language=DEFAULT_LANGUAGE)
        return await self._fetcher.get_json(
            "/search/collection", CollectionSearchResponse, params=params
        )

    async def collection(self, collection_id: int) -> CollectionDetailsResponse:
        return await self._fetcher.get_json(
            f"/collection/{collection_id}",
            CollectionDetailsResponse,
            params=self._params(language=DEFAULT_LANGUAGE),
        )
