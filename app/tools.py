"""Tool handlers exposed over MCP.

Every handler returns text. Missing credentials, empty results and upstream
failures are all reported as descriptive strings instead of exceptions.
"""

# No `from __future__ import annotations`: FastMCP inspects raw parameter
# annotations with issubclass(), which fails on strings.
import logging
from typing import Annotated, Awaitable, Callable, Literal

from pydantic import Field

from .errors import ConfigurationError
from .formatting import (
    format_collection_details,
    format_collections,
    format_genres,
    format_items,
    format_people,
    format_rating_record,
    format_rating_summary,
)
from .models import MediaKind, TimeWindow
from .services.media import MediaQueryService

logger = logging.getLogger(__name__)

ServiceProvider = Callable[[], MediaQueryService]

MediaKindParam = Annotated[
    MediaKind, Field(description="Whether to search movies ('movie') or TV shows ('tv')")
]
ReleaseYearParam = Annotated[
    int | None,
    Field(description="Optional release year filter (e.g. 2023)", ge=1870, le=2100),
]


_KIND_LABELS = {"movie": ("movies", "Movies"), "tv": ("TV shows", "TV Shows")}


def _kind_label(media_kind: str, *, title_case: bool = False) -> str:
    lower, title = _KIND_LABELS[media_kind]
    return title if title_case else lower


def configuration_message(exc: ConfigurationError) -> str:
    return (
        f"Error: {exc.service} API key is not configured. "
        f"Please set the {exc.env_var} environment variable."
    )


class ToolHandlers:
    """Async handlers backing each registered tool."""

    def __init__(self, service_provider: ServiceProvider):
        self._service_provider = service_provider

    async def _guard(
        self,
        action: str,
        operation: Callable[[MediaQueryService], Awaitable[str]],
    ) -> str:
        try:
            return await operation(self._service_provider())
        except ConfigurationError as exc:
            return configuration_message(exc)
        except Exception as exc:
            logger.exception("Tool call failed while %s", action)
            return f"Error {action}: {exc}"

    async def search_movie_by_title(
        self,
        title: Annotated[str, Field(min_length=1, description="The title of the movie to search for")],
        year: ReleaseYearParam = None,
    ) -> str:
        """Search for movies by title using TMDB, including IMDb ids and streaming providers."""

        async def run(service: MediaQueryService) -> str:
            results = await service.search_movie(title, year=year)
            if not results:
                return f'No movies found matching "{title}".'
            return format_items(
                f'Here are some movies found matching "{title}":',
                results,
                limit=5,
                region=service.settings.watch_region,
            )

        return await self._guard("searching for movies by title", run)

    async def search_tv_by_title(
        self,
        title: Annotated[str, Field(min_length=1, description="The title of the TV show to search for")],
        year: ReleaseYearParam = None,
    ) -> str:
        """Search for TV shows by title using TMDB, including IMDb ids and streaming providers."""

        async def run(service: MediaQueryService) -> str:
            results = await service.search_tv(title, year=year)
            if not results:
                return f'No TV shows found matching "{title}".'
            return format_items(
                f'Here are some TV shows found matching "{title}":',
                results,
                limit=5,
                region=service.settings.watch_region,
            )

        return await self._guard("searching for TV shows by title", run)

    async def get_media_info(
        self,
        query: Annotated[str, Field(min_length=1, description="The title of the movie or TV show")],
        media_kind: MediaKindParam,
    ) -> str:
        """Get detailed information about a movie or TV show from TMDB, with where to stream it."""

        async def run(service: MediaQueryService) -> str:
            results = await service.search(query, media_kind)
            if not results:
                return f'No {_kind_label(media_kind)} found for "{query}".'
            return format_items(
                f'Top {_kind_label(media_kind, title_case=True)} for "{query}":',
                results,
                limit=3,
                region=service.settings.watch_region,
            )

        return await self._guard("fetching TMDB data", run)

    async def get_trending(
        self,
        media_type: Annotated[
            Literal["all", "movie", "tv"],
            Field(description="The type of media to list (all, movie, or tv)"),
        ] = "all",
        time_window: Annotated[
            TimeWindow, Field(description="Trending window: 'day' or 'week'")
        ] = "week",
    ) -> str:
        """Get a list of trending movies or TV shows from TMDB."""

        async def run(service: MediaQueryService) -> str:
            results = await service.trending(media_type, time_window)
            if not results:
                return f"No trending {media_type} found for the {time_window}."
            label = "Content" if media_type == "all" else _kind_label(media_type, title_case=True)
            return format_items(f"Top Trending {label} for the {time_window}:", results)

        return await self._guard("fetching trending TMDB data", run)

    async def get_popular(self, media_kind: MediaKindParam) -> str:
        """Get a list of popular movies or TV shows from TMDB."""

        async def run(service: MediaQueryService) -> str:
            results = await service.popular(media_kind)
            if not results:
                return f"No popular {_kind_label(media_kind)} found."
            return format_items(
                f"Top Popular {_kind_label(media_kind, title_case=True)}:", results
            )

        return await self._guard("fetching popular TMDB data", run)

    async def get_genres(self, media_kind: MediaKindParam) -> str:
        """List the genres TMDB knows for movies or TV shows."""

        async def run(service: MediaQueryService) -> str:
            genres = await service.get_genres(media_kind)
            if not genres:
                return f"No genres found for {_kind_label(media_kind)}."
            return format_genres(f"Genres for {_kind_label(media_kind)}:", genres)

        return await self._guard("fetching TMDB genres", run)

    async def discover_by_genre(
        self,
        media_kind: MediaKindParam,
        genre: Annotated[
            str, Field(min_length=1, description="Genre name, e.g. 'Action' or 'Comedy'")
        ],
        release_year: ReleaseYearParam = None,
    ) -> str:
        """Get a list of movies or TV shows in a genre from TMDB."""

        async def run(service: MediaQueryService) -> str:
            results = await service.discover_by_genre(
                media_kind, genre, release_year=release_year
            )
            if results is None:
                return f'Genre "{genre}" not found for {_kind_label(media_kind)}.'
            if not results:
                return f'No {_kind_label(media_kind)} found for genre "{genre}".'
            return format_items(
                f'Top {_kind_label(media_kind, title_case=True)} in genre "{genre}":', results
            )

        return await self._guard("fetching TMDB data by genre", run)

    async def discover_by_actor(
        self,
        actor_id: Annotated[
            int,
            Field(description="TMDB person ID of the actor. Use search_person to find it."),
        ],
        media_kind: MediaKindParam,
        release_year: ReleaseYearParam = None,
    ) -> str:
        """Discover movies or TV shows featuring an actor."""

        async def run(service: MediaQueryService) -> str:
            results = await service.discover_by_actor(
                actor_id, media_kind, release_year=release_year
            )
            suffix = f" in {release_year}" if release_year else ""
            if not results:
                return f"No {_kind_label(media_kind)} found for actor ID {actor_id}{suffix}."
            return format_items(
                f"Here are some {_kind_label(media_kind)} starring the actor (ID: {actor_id}){suffix}:",
                results,
                limit=5,
            )

        return await self._guard("discovering entertainment by actor", run)

    async def search_person(
        self,
        query: Annotated[str, Field(min_length=1, description="Name of the person to search for")],
    ) -> str:
        """Search for people (actors, directors) by name using TMDB."""

        async def run(service: MediaQueryService) -> str:
            people = await service.search_person(query)
            if not people:
                return f'No people found matching "{query}".'
            return format_people(f'Here are some people found matching "{query}":', people)

        return await self._guard("searching for people", run)

    async def search_collections(
        self,
        query: Annotated[str, Field(min_length=1, description="Name of the collection to search for")],
    ) -> str:
        """Search for movie collections (franchises) by name using TMDB."""

        async def run(service: MediaQueryService) -> str:
            collections = await service.search_collection(query)
            if not collections:
                return f'No collections found matching "{query}".'
            return format_collections(
                f'Here are some collections found matching "{query}":', collections
            )

        return await self._guard("searching for collections", run)

    async def get_collection_details(
        self,
        collection_id: Annotated[
            int, Field(description="TMDB collection ID. Use search_collections to find it.")
        ],
    ) -> str:
        """Get the movies that make up a TMDB collection."""

        async def run(service: MediaQueryService) -> str:
            collection = await service.get_collection_details(collection_id)
            if collection is None:
                return f"No collection found for ID {collection_id}."
            return format_collection_details(collection)

        return await self._guard("fetching collection details", run)

    async def get_omdb_info(
        self,
        query: Annotated[
            str, Field(min_length=1, description="Title of the movie, series or episode")
        ],
        media_type: Annotated[
            Literal["movie", "series", "episode"] | None,
            Field(description="Optional OMDb type; omit to let the lookup guess"),
        ] = None,
    ) -> str:
        """Get IMDb ratings and detailed information about a title from OMDb."""

        async def run(service: MediaQueryService) -> str:
            record = await service.lookup_rating(query, media_type)
            if record is None:
                return f'No {media_type or "content"} found for "{query}".'
            return format_rating_record(record)

        return await self._guard("fetching OMDB data", run)

    async def get_imdb_summary(
        self,
        title: Annotated[str, Field(min_length=1, description="Title to look up on IMDb")],
    ) -> str:
        """Get just the IMDb rating and vote count for a title (fast, uncached)."""

        async def run(service: MediaQueryService) -> str:
            summary = await service.rating_summary(title)
            return format_rating_summary(title, summary)

        return await self._guard("fetching IMDb summary", run)

    async def get_movie_suggestions(
        self,
        genre: Annotated[str, Field(min_length=1, description="Genre of movies to suggest, e.g. 'Horror'")],
        release_year: ReleaseYearParam = None,
        min_imdb_rating: Annotated[
            float | None, Field(description="Minimum IMDb rating (1-10)", ge=1, le=10)
        ] = None,
    ) -> str:
        """Suggest movies by genre, release year and minimum IMDb rating."""

        async def run(service: MediaQueryService) -> str:
            suggestions = await service.suggest_movies(
                genre, release_year=release_year, min_imdb_rating=min_imdb_rating
            )
            if suggestions is None:
                return f'Genre "{genre}" not found for movies.'
            if not suggestions:
                criteria = [f'genre: "{genre}"']
                if release_year:
                    criteria.append(f"year: {release_year}")
                if min_imdb_rating:
                    criteria.append(f"min IMDb rating: {min_imdb_rating}")
                return f"No movies found matching the criteria ({', '.join(criteria)})."
            return format_items(f'Here are some suggested "{genre}" movies:', suggestions)

        return await self._guard("fetching movie suggestions", run)

    def registry(self) -> list[Callable[..., Awaitable[str]]]:
        """Return the handlers in registration order."""

        return [
            self.search_movie_by_title,
            self.search_tv_by_title,
            self.get_media_info,
            self.get_trending,
            self.get_popular,
            self.get_genres,
            self.discover_by_genre,
            self.discover_by_actor,
            self.search_person,
            self.search_collections,
            self.get_collection_details,
            self.get_omdb_info,
            self.get_imdb_summary,
            self.get_movie_suggestions,
        ]
