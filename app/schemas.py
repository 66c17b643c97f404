"""Pydantic models declaring the payloads returned by TMDB and OMDb.

Every model ignores fields it does not declare so upstream additions never
break parsing. Nullability is spelled out per field: ``X | None`` with no
default means the key must be present but may be ``null``; a default of
``None`` means the key may be missing entirely.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SchemaViolation


class UpstreamModel(BaseModel):
    """Base class for upstream payload shapes."""

    model_config = ConfigDict(extra="ignore", frozen=True)


SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payload(schema: type[SchemaT], payload: Any) -> SchemaT:
    """Narrow ``payload`` to ``schema`` or raise :class:`SchemaViolation`.

    The violation carries the dotted path and the expected type of the first
    mismatch reported by pydantic.
    """

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        path = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise SchemaViolation(
            path, _describe_expected(first), first.get("msg")
        ) from exc


def _describe_expected(error: dict[str, Any]) -> str:
    kind = str(error.get("type") or "value")
    if kind == "missing":
        return "a required field"
    if kind.endswith("_type") or kind.endswith("_parsing"):
        return kind.split("_", 1)[0]
    if kind == "literal_error":
        expected = (error.get("ctx") or {}).get("expected")
        return f"one of {expected}" if expected else "a literal value"
    if kind == "union_tag_invalid":
        expected = (error.get("ctx") or {}).get("expected_tags")
        return f"a media_type of {expected}" if expected else "a known media_type"
    return kind


# -- TMDB search / list results ------------------------------------------------


class PagedResponse(UpstreamModel):
    page: int
    total_results: int
    total_pages: int


class MovieResult(UpstreamModel):
    id: int
    title: str
    overview: str | None
    release_date: str | None
    vote_average: float | None
    poster_path: str | None
    original_language: str | None
    imdb_id: str | None = None


class TvResult(UpstreamModel):
    id: int
    name: str
    overview: str | None
    first_air_date: str | None
    vote_average: float | None
    poster_path: str | None
    original_language: str | None
    imdb_id: str | None = None


class MovieSearchResponse(PagedResponse):
    results: list[MovieResult]


class TvSearchResponse(PagedResponse):
    results: list[TvResult]


# Popular and discover endpoints share the search shapes.
PopularMovieResponse = MovieSearchResponse
PopularTvResponse = TvSearchResponse
DiscoverMovieResponse = MovieSearchResponse
DiscoverTvResponse = TvSearchResponse


# -- Details (external identifiers) -------------------------------------------


class MovieDetails(UpstreamModel):
    imdb_id: str | None = None


class ExternalIds(UpstreamModel):
    imdb_id: str | None = None


class TvDetails(UpstreamModel):
    external_ids: ExternalIds | None = None


# -- Trending ------------------------------------------------------------------


class TrendingMovie(UpstreamModel):
    media_type: Literal["movie"]
    id: int
    title: str | None = None
    name: str | None = None
    overview: str | None
    release_date: str | None = None
    first_air_date: str | None = None
    vote_average: float | None
    poster_path: str | None
    original_language: str | None


class TrendingTv(UpstreamModel):
    media_type: Literal["tv"]
    id: int
    title: str | None = None
    name: str | None = None
    overview: str | None
    release_date: str | None = None
    first_air_date: str | None = None
    vote_average: float | None
    poster_path: str | None
    original_language: str | None


class TrendingPerson(UpstreamModel):
    media_type: Literal["person"]
    id: int
    name: str | None = None


TrendingResult = Annotated[
    Union[TrendingMovie, TrendingTv, TrendingPerson],
    Field(discriminator="media_type"),
]


class TrendingResponse(PagedResponse):
    results: list[TrendingResult]


# -- Genres --------------------------------------------------------------------


class Genre(UpstreamModel):
    id: int
    name: str


class GenreListResponse(UpstreamModel):
    genres: list[Genre]


# -- People ----------------------------------------------------------------------


class KnownForEntry(UpstreamModel):
    id: int
    media_type: str
    title: str | None = None
    name: str | None = None


class PersonResult(UpstreamModel):
    id: int
    name: str
    popularity: float
    profile_path: str | None
    known_for_department: str | None = None
    known_for: list[KnownForEntry] | None = None


class PersonSearchResponse(PagedResponse):
    results: list[PersonResult]


# -- Collections -----------------------------------------------------------------


class CollectionResult(UpstreamModel):
    id: int
    name: str
    overview: str | None
    poster_path: str | None
    backdrop_path: str | None


class CollectionSearchResponse(PagedResponse):
    results: list[CollectionResult]


class CollectionPartResult(UpstreamModel):
    id: int
    title: str
    release_date: str | None
    poster_path: str | None
    backdrop_path: str | None
    overview: str | None
    vote_average: float | None


class CollectionDetailsResponse(CollectionResult):
    parts: list[CollectionPartResult]


# -- Watch providers -------------------------------------------------------------


class WatchProviderEntry(UpstreamModel):
    provider_id: int
    provider_name: str
    logo_path: str
    display_priority: int


class RegionOffers(UpstreamModel):
    link: str
    flatrate: list[WatchProviderEntry] | None = None
    rent: list[WatchProviderEntry] | None = None
    buy: list[WatchProviderEntry] | None = None
    ads: list[WatchProviderEntry] | None = None
    free: list[WatchProviderEntry] | None = None


class WatchProvidersResponse(UpstreamModel):
    id: int
    results: dict[str, RegionOffers] | None = None


# -- OMDb -------------------------------------------------------------------------


class OmdbSourceRating(UpstreamModel):
    Source: str
    Value: str


class OmdbTitleResponse(UpstreamModel):
    """OMDb answers HTTP 200 even for misses; ``Response`` carries the outcome."""

    Response: Literal["True", "False"]
    Error: str | None = None
    Title: str | None = None
    Year: str | None = None
    Rated: str | None = None
    Released: str | None = None
    Runtime: str | None = None
    Genre: str | None = None
    Director: str | None = None
    Writer: str | None = None
    Actors: str | None = None
    Plot: str | None = None
    Language: str | None = None
    Country: str | None = None
    Awards: str | None = None
    Poster: str | None = None
    Ratings: list[OmdbSourceRating] | None = None
    Metascore: str | None = None
    imdbRating: str | None = None
    imdbVotes: str | None = None
    imdbID: str | None = None
    Type: str | None = None
    BoxOffice: str | None = None

    @property
    def found(self) -> bool:
        return self.Response == "True"
