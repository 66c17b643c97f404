"""Query operations combining TMDB metadata with OMDb ratings."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import httpx

from ..config import Settings
from ..errors import ReelScopeError
from ..models import (
    CanonicalItem,
    CollectionRecord,
    GenreRecord,
    MediaKind,
    PersonRecord,
    RatingRecord,
    RatingSummary,
    TimeWindow,
    TrendingMediaType,
)
from ..normalizer import (
    DefaultPolicy,
    normalize,
    normalize_collection,
    normalize_genre,
    normalize_person,
    normalize_trending,
)
from .enrichment import EnrichmentOrchestrator
from .http import JsonFetcher
from .omdb import OMDbClient
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


class MediaQueryService:
    """Entry point for every lookup exposed through the tool layer.

    Item-producing operations follow the same pipeline: check the TMDB key,
    fetch and validate the primary payload, normalize it, then enrich each
    item with its IMDb id and watch providers.
    """

    def __init__(
        self,
        settings: Settings,
        tmdb: TMDBClient,
        omdb: OMDbClient,
        *,
        enrichment: EnrichmentOrchestrator | None = None,
        policy: DefaultPolicy | None = None,
    ):
        self._settings = settings
        self._tmdb = tmdb
        self._omdb = omdb
        self._enrichment = enrichment or EnrichmentOrchestrator(
            tmdb, concurrency=settings.enrichment_concurrency
        )
        self._policy = policy or DefaultPolicy(image_base_url=settings.tmdb_image_base_url)

    @classmethod
    def from_http_clients(
        cls,
        settings: Settings,
        tmdb_http: httpx.AsyncClient,
        omdb_http: httpx.AsyncClient,
    ) -> "MediaQueryService":
        """Wire the service on top of provider-specific HTTP clients."""

        tmdb = TMDBClient(settings, JsonFetcher.from_settings(settings, tmdb_http))
        policy = DefaultPolicy(image_base_url=settings.tmdb_image_base_url)
        omdb = OMDbClient(
            settings, JsonFetcher.from_settings(settings, omdb_http), policy=policy
        )
        return cls(settings, tmdb, omdb, policy=policy)

    @property
    def settings(self) -> Settings:
        return self._settings

    # -- title searches ---------------------------------------------------------

    async def search_movie(self, title: str, *, year: int | None = None) -> list[CanonicalItem]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.search_movie(title, year=year)
        items = [normalize(result, "movie", self._policy) for result in payload.results]
        return await self._enrichment.enrich(items)

    async def search_tv(self, title: str, *, year: int | None = None) -> list[CanonicalItem]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.search_tv(title, year=year)
        items = [normalize(result, "tv", self._policy) for result in payload.results]
        return await self._enrichment.enrich(items)

    async def search(
        self, title: str, media_kind: MediaKind, *, year: int | None = None
    ) -> list[CanonicalItem]:
        if media_kind == "movie":
            return await self.search_movie(title, year=year)
        return await self.search_tv(title, year=year)

    # -- listings ---------------------------------------------------------------

    async def trending(
        self, media_type: TrendingMediaType, time_window: TimeWindow
    ) -> list[CanonicalItem]:
        """Return trending movies and shows; people are not media items."""

        self._settings.require_tmdb_key()
        payload = await self._tmdb.trending(media_type, time_window)
        items = [
            item
            for item in (normalize_trending(result, self._policy) for result in payload.results)
            if item is not None
        ]
        return await self._enrichment.enrich(items)

    async def popular(self, media_kind: MediaKind) -> list[CanonicalItem]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.popular(media_kind)
        items = [normalize(result, media_kind, self._policy) for result in payload.results]
        return await self._enrichment.enrich(items)

    # -- genres -----------------------------------------------------------------

    async def get_genres(self, media_kind: MediaKind) -> list[GenreRecord]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.genres(media_kind)
        return [normalize_genre(genre) for genre in payload.genres]

    async def resolve_genre(self, media_kind: MediaKind, name: str) -> GenreRecord | None:
        """Return the genre whose name matches ``name`` ignoring case."""

        for genre in await self.get_genres(media_kind):
            if genre.matches(name):
                return genre
        return None

    async def discover_by_genre(
        self,
        media_kind: MediaKind,
        genre: str,
        *,
        release_year: int | None = None,
        include_availability: bool = True,
    ) -> list[CanonicalItem] | None:
        """Discover titles in a genre; ``None`` means the genre is unknown."""

        resolved = await self.resolve_genre(media_kind, genre)
        if resolved is None:
            logger.info("No %s genre named %r", media_kind, genre)
            return None
        payload = await self._tmdb.discover(
            media_kind, with_genres=resolved.id, release_year=release_year
        )
        items = [normalize(result, media_kind, self._policy) for result in payload.results]
        return await self._enrichment.enrich(items, include_availability=include_availability)

    async def discover_by_actor(
        self,
        actor_id: int,
        media_kind: MediaKind,
        *,
        release_year: int | None = None,
    ) -> list[CanonicalItem]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.discover(
            media_kind, with_cast=actor_id, release_year=release_year
        )
        items = [normalize(result, media_kind, self._policy) for result in payload.results]
        return await self._enrichment.enrich(items)

    # -- people and collections ---------------------------------------------------

    async def search_person(self, query: str) -> list[PersonRecord]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.search_person(query)
        return [normalize_person(person, self._policy) for person in payload.results]

    async def search_collection(self, query: str) -> list[CollectionRecord]:
        self._settings.require_tmdb_key()
        payload = await self._tmdb.search_collection(query)
        return [normalize_collection(result, self._policy) for result in payload.results]

    async def get_collection_details(self, collection_id: int) -> CollectionRecord | None:
        """Return the collection with its parts, or ``None`` if it cannot be fetched."""

        self._settings.require_tmdb_key()
        try:
            payload = await self._tmdb.collection(collection_id)
        except ReelScopeError as exc:
            logger.warning(
                "Error fetching collection details for ID %s: %s", collection_id, exc
            )
            return None
        return normalize_collection(payload, self._policy)

    # -- ratings ------------------------------------------------------------------

    async def lookup_rating(
        self, title: str, kind_hint: str | None = None
    ) -> RatingRecord | None:
        return await self._omdb.lookup_by_title(title, kind_hint)

    async def lookup_rating_by_id(self, imdb_id: str) -> RatingRecord | None:
        return await self._omdb.lookup_by_id(imdb_id)

    async def rating_summary(self, title: str) -> RatingSummary:
        return await self._omdb.get_rating_summary(title)

    async def attach_ratings(self, items: Sequence[CanonicalItem]) -> list[CanonicalItem]:
        """Attach OMDb records to items that carry an IMDb id."""

        self._settings.require_omdb_key()

        async def _with_rating(item: CanonicalItem) -> CanonicalItem:
            if not item.external_id:
                return item
            record = await self._omdb.lookup_by_id(item.external_id)
            if record is None:
                return item
            return item.model_copy(update={"ratings": record})

        return list(await asyncio.gather(*(_with_rating(item) for item in items)))

    async def suggest_movies(
        self,
        genre: str,
        *,
        release_year: int | None = None,
        min_imdb_rating: float | None = None,
        limit: int = 5,
    ) -> list[CanonicalItem] | None:
        """Suggest movies in a genre whose IMDb rating meets a threshold.

        Returns ``None`` when the genre does not exist. Movies without an IMDb
        id or a numeric IMDb rating are skipped.
        """

        self._settings.require_omdb_key()
        discovered = await self.discover_by_genre(
            "movie", genre, release_year=release_year, include_availability=False
        )
        if discovered is None:
            return None

        threshold = min_imdb_rating if min_imdb_rating is not None else 0.0
        rated = await self.attach_ratings(discovered)
        suggestions: list[CanonicalItem] = []
        for item in rated:
            if item.ratings is None:
                continue
            score = item.ratings.numeric_rating()
            if score is None or score < threshold:
                continue
            suggestions.append(item)
        return suggestions[: max(limit, 0)]
