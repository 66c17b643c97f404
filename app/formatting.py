"""Plain-text rendering of canonical records for tool responses."""

from __future__ import annotations

from typing import Sequence

from .models import (
    CanonicalItem,
    CollectionRecord,
    GenreRecord,
    PersonRecord,
    RatingRecord,
    RatingSummary,
)

UNKNOWN_DATE = "Unknown"


def _or_na(value: str | None) -> str:
    return value or "N/A"


def streaming_line(item: CanonicalItem, region: str) -> str:
    """Return the subscription providers for ``region`` or a status note."""

    if item.availability_status == "degraded":
        return "unavailable (lookup failed)"
    offers = item.region_availability(region)
    if offers is None:
        return "N/A"
    names = offers.provider_names("flatrate")
    return ", ".join(names) if names else "N/A"


def format_item(
    index: int,
    item: CanonicalItem,
    *,
    region: str | None = None,
) -> str:
    lines = [
        f"{index}. {item.title} ({item.release_date or UNKNOWN_DATE})",
        f"   TMDB ID: {item.id}",
        f"   IMDB ID: {_or_na(item.external_id)}",
        f"   Rating: {item.rating}",
        f"   Language: {item.language.upper()}",
        f"   Overview: {item.description}",
        f"   Poster: {_or_na(item.poster_url)}",
    ]
    if item.ratings is not None:
        lines.append(f"   IMDb Rating: {item.ratings.rating} ({item.ratings.votes} votes)")
    if region:
        lines.append(f"   Stream on ({region}): {streaming_line(item, region)}")
    return "\n".join(lines)


def format_items(
    heading: str,
    items: Sequence[CanonicalItem],
    *,
    limit: int | None = None,
    region: str | None = None,
) -> str:
    selected = list(items if limit is None else items[:limit])
    body = "\n\n".join(
        format_item(index, item, region=region)
        for index, item in enumerate(selected, 1)
    )
    return f"{heading}\n\n{body}"


def format_people(heading: str, people: Sequence[PersonRecord], *, limit: int = 5) -> str:
    blocks = []
    for index, person in enumerate(people[:limit], 1):
        blocks.append(
            "\n".join(
                [
                    f"{index}. Name: {person.name}",
                    f"   ID: {person.id}",
                    f"   Department: {person.department}",
                    f"   Popularity: {person.popularity}",
                    f"   Known For: {person.known_for}",
                    f"   Profile: {_or_na(person.profile_url)}",
                ]
            )
        )
    return f"{heading}\n\n" + "\n\n".join(blocks)


def format_collections(
    heading: str, collections: Sequence[CollectionRecord], *, limit: int = 5
) -> str:
    blocks = []
    for index, collection in enumerate(collections[:limit], 1):
        blocks.append(
            "\n".join(
                [
                    f"{index}. Name: {collection.name}",
                    f"   ID: {collection.id}",
                    f"   Overview: {collection.overview}",
                    f"   Poster: {_or_na(collection.poster_url)}",
                ]
            )
        )
    return f"{heading}\n\n" + "\n\n".join(blocks)


def format_collection_details(collection: CollectionRecord) -> str:
    parts = "\n".join(
        "\n".join(
            [
                f"{index}. Title: {part.title} ({part.release_date or UNKNOWN_DATE})",
                f"   Rating: {part.rating}",
                f"   Overview: {part.description}",
                f"   Poster: {_or_na(part.poster_url)}",
            ]
        )
        for index, part in enumerate(collection.parts, 1)
    )
    return "\n".join(
        [
            f'Here are the details for the collection "{collection.name}" (ID: {collection.id}):',
            "",
            f"Overview: {collection.overview}",
            f"Poster: {_or_na(collection.poster_url)}",
            f"Backdrop: {_or_na(collection.backdrop_url)}",
            "",
            "Movies in this collection:",
            parts or "No movies found in this collection.",
        ]
    )


def format_rating_record(record: RatingRecord) -> str:
    lines = [
        f"Title: {record.title} ({record.year})",
        f"IMDb ID: {record.imdb_id}",
        f"IMDb Rating: {record.rating} ({record.votes} votes)",
        f"Metascore: {record.metascore}",
    ]
    rotten = record.source_value("Rotten Tomatoes")
    if rotten:
        lines.append(f"Rotten Tomatoes: {rotten}")
    lines.extend(
        [
            f"Rated: {record.rated}",
            f"Runtime: {record.runtime}",
            f"Released: {record.released}",
            f"Genre: {record.genre}",
            f"Director: {record.director}",
            f"Writer: {record.writer}",
            f"Actors: {record.actors}",
            f"Country: {record.country}",
            f"Language: {record.language}",
            f"Awards: {record.awards}",
            f"Plot: {record.plot}",
            f"Poster: {_or_na(record.poster_url)}",
        ]
    )
    return "\n".join(lines)


def format_rating_summary(title: str, summary: RatingSummary) -> str:
    return f'IMDb summary for "{title}": {summary.rating}/10 ({summary.votes} votes)'


def format_genres(heading: str, genres: Sequence[GenreRecord]) -> str:
    return f"{heading}\n\n" + "\n".join(f"- {genre.name} (ID: {genre.id})" for genre in genres)
