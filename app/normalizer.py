"""Map validated upstream payloads to canonical records.

Normalization is pure and never raises: any missing or null field is replaced
by the value recorded in a :class:`DefaultPolicy`. Callers are expected to
have validated the payload with :mod:`app.schemas` beforehand.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import (
    OFFER_TYPES,
    CanonicalItem,
    CollectionPart,
    CollectionRecord,
    GenreRecord,
    MediaKind,
    PersonRecord,
    RatingRecord,
    RatingSource,
    RatingSummary,
    RegionAvailability,
    WatchProvider,
)
from .schemas import (
    CollectionDetailsResponse,
    CollectionPartResult,
    CollectionResult,
    Genre,
    MovieResult,
    OmdbTitleResponse,
    PersonResult,
    TrendingMovie,
    TrendingResult,
    TrendingTv,
    TvResult,
    WatchProvidersResponse,
)

IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


@dataclass(frozen=True, slots=True)
class DefaultPolicy:
    """Default value substituted for each absent field."""

    title: str = "Unknown"
    description: str = "No description available."
    release_date: str | None = None
    rating: float = 0.0
    language: str = "Unknown"
    collection_overview: str = "No overview available."
    department: str = "Unknown"
    known_for: str = "N/A"
    unknown_text: str = "Unknown"
    missing_value: str = "N/A"
    plot: str = "No plot available."
    rating_media_kind: str = "movie"
    image_base_url: str = IMAGE_BASE_URL


DEFAULT_POLICY = DefaultPolicy()


def build_image_url(path: str | None, base_url: str = IMAGE_BASE_URL) -> str:
    """Return the absolute image URL for a TMDB relative path, or ``""``."""

    if not path:
        return ""
    return f"{base_url}{path}"


def _text(value: str | None, default: str) -> str:
    if value is None or not value.strip():
        return default
    return value


def _optional_text(value: str | None, default: str | None) -> str | None:
    if value is None or not value.strip():
        return default
    return value


def _first_text(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def _rating(value: float | None, default: float) -> float:
    if value is None:
        return default
    number = float(value)
    if not math.isfinite(number):
        return default
    return number


def normalize_movie(
    record: MovieResult, policy: DefaultPolicy = DEFAULT_POLICY
) -> CanonicalItem:
    return CanonicalItem(
        id=record.id,
        media_kind="movie",
        external_id=record.imdb_id or None,
        title=_text(record.title, policy.title),
        description=_text(record.overview, policy.description),
        release_date=_optional_text(record.release_date, policy.release_date),
        rating=_rating(record.vote_average, policy.rating),
        poster_url=build_image_url(record.poster_path, policy.image_base_url),
        language=_text(record.original_language, policy.language),
    )


def normalize_tv(
    record: TvResult, policy: DefaultPolicy = DEFAULT_POLICY
) -> CanonicalItem:
    return CanonicalItem(
        id=record.id,
        media_kind="tv",
        external_id=record.imdb_id or None,
        title=_text(record.name, policy.title),
        description=_text(record.overview, policy.description),
        release_date=_optional_text(record.first_air_date, policy.release_date),
        rating=_rating(record.vote_average, policy.rating),
        poster_url=build_image_url(record.poster_path, policy.image_base_url),
        language=_text(record.original_language, policy.language),
    )


def normalize_trending(
    record: TrendingResult, policy: DefaultPolicy = DEFAULT_POLICY
) -> CanonicalItem | None:
    """Normalize a trending entry, returning ``None`` for people."""

    if isinstance(record, TrendingMovie):
        media_kind: MediaKind = "movie"
    elif isinstance(record, TrendingTv):
        media_kind = "tv"
    else:
        return None

    # Trending mixes both kinds, so the movie field is tried before the tv one.
    title = _first_text(record.title, record.name)
    release_date = _first_text(record.release_date, record.first_air_date)
    return CanonicalItem(
        id=record.id,
        media_kind=media_kind,
        title=title if title is not None else policy.title,
        description=_text(record.overview, policy.description),
        release_date=release_date if release_date is not None else policy.release_date,
        rating=_rating(record.vote_average, policy.rating),
        poster_url=build_image_url(record.poster_path, policy.image_base_url),
        language=_text(record.original_language, policy.language),
    )


def normalize(
    record: MovieResult | TvResult,
    media_kind: MediaKind,
    policy: DefaultPolicy = DEFAULT_POLICY,
) -> CanonicalItem:
    """Normalize a search, popular or discover result of a known kind."""

    if media_kind == "movie":
        return normalize_movie(record, policy)  # type: ignore[arg-type]
    return normalize_tv(record, policy)  # type: ignore[arg-type]


def normalize_availability(
    payload: WatchProvidersResponse,
) -> dict[str, RegionAvailability] | None:
    """Return offers keyed by region code, or ``None`` when there are none."""

    if not payload.results:
        return None
    regions: dict[str, RegionAvailability] = {}
    for region, offers in payload.results.items():
        grouped: dict[str, list[WatchProvider]] = {}
        for offer_type in OFFER_TYPES:
            entries = getattr(offers, offer_type) or []
            grouped[offer_type] = [
                WatchProvider(
                    provider_id=entry.provider_id,
                    provider_name=entry.provider_name,
                    logo_path=entry.logo_path,
                    display_priority=entry.display_priority,
                )
                for entry in entries
            ]
        regions[region.upper()] = RegionAvailability(link=offers.link, **grouped)
    return regions


def normalize_genre(record: Genre) -> GenreRecord:
    return GenreRecord(id=record.id, name=record.name)


def normalize_person(
    record: PersonResult, policy: DefaultPolicy = DEFAULT_POLICY
) -> PersonRecord:
    if record.known_for is None:
        known_for = policy.known_for
    else:
        titles = [
            title
            for title in (_first_text(entry.title, entry.name) for entry in record.known_for)
            if title
        ]
        known_for = ", ".join(titles) or policy.known_for
    return PersonRecord(
        id=record.id,
        name=record.name,
        popularity=_rating(record.popularity, 0.0),
        department=_text(record.known_for_department, policy.department),
        profile_url=build_image_url(record.profile_path, policy.image_base_url),
        known_for=known_for,
    )


def normalize_collection_part(
    record: CollectionPartResult, policy: DefaultPolicy = DEFAULT_POLICY
) -> CollectionPart:
    return CollectionPart(
        id=record.id,
        title=_text(record.title, policy.title),
        release_date=_optional_text(record.release_date, policy.release_date),
        poster_url=build_image_url(record.poster_path, policy.image_base_url),
        description=_text(record.overview, policy.description),
        rating=_rating(record.vote_average, policy.rating),
    )


def normalize_collection(
    record: CollectionResult, policy: DefaultPolicy = DEFAULT_POLICY
) -> CollectionRecord:
    """Normalize a collection; parts are only present on detail payloads."""

    parts: list[CollectionPart] = []
    if isinstance(record, CollectionDetailsResponse):
        parts = [normalize_collection_part(part, policy) for part in record.parts]
    return CollectionRecord(
        id=record.id,
        name=record.name,
        overview=_text(record.overview, policy.collection_overview),
        poster_url=build_image_url(record.poster_path, policy.image_base_url),
        backdrop_url=build_image_url(record.backdrop_path, policy.image_base_url),
        parts=parts,
    )


def normalize_rating(
    payload: OmdbTitleResponse, policy: DefaultPolicy = DEFAULT_POLICY
) -> RatingRecord:
    unknown = policy.unknown_text
    missing = policy.missing_value
    poster = payload.Poster
    return RatingRecord(
        title=_text(payload.Title, unknown),
        year=_text(payload.Year, unknown),
        rating=_text(payload.imdbRating, missing),
        votes=_text(payload.imdbVotes, missing),
        metascore=_text(payload.Metascore, missing),
        released=_text(payload.Released, unknown),
        genre=_text(payload.Genre, unknown),
        director=_text(payload.Director, unknown),
        writer=_text(payload.Writer, unknown),
        actors=_text(payload.Actors, unknown),
        plot=_text(payload.Plot, policy.plot),
        poster_url=poster if poster and poster != "N/A" else "",
        country=_text(payload.Country, unknown),
        language=_text(payload.Language, unknown),
        media_kind=_text(payload.Type, policy.rating_media_kind),
        imdb_id=_text(payload.imdbID, missing),
        rated=_text(payload.Rated, missing),
        runtime=_text(payload.Runtime, missing),
        awards=_text(payload.Awards, missing),
        box_office=_text(payload.BoxOffice, missing),
        sources=tuple(
            RatingSource(source=entry.Source, value=entry.Value)
            for entry in payload.Ratings or []
        ),
    )


def normalize_rating_summary(
    payload: OmdbTitleResponse, policy: DefaultPolicy = DEFAULT_POLICY
) -> RatingSummary:
    if not payload.found:
        return RatingSummary(rating=policy.missing_value, votes=policy.missing_value)
    return RatingSummary(
        rating=_text(payload.imdbRating, policy.missing_value),
        votes=_text(payload.imdbVotes, policy.missing_value),
    )
