"""Pydantic models describing the canonical records handed to the tool layer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MediaKind = Literal["movie", "tv"]
TrendingMediaType = Literal["all", "movie", "tv", "person"]
TimeWindow = Literal["day", "week"]
AvailabilityStatus = Literal["available", "empty", "degraded", "not_requested"]
OfferType = Literal["flatrate", "rent", "buy", "ads", "free"]

OFFER_TYPES: tuple[OfferType, ...] = ("flatrate", "rent", "buy", "ads", "free")


class WatchProvider(BaseModel):
    """A single streaming, rental or purchase provider."""

    provider_id: int
    provider_name: str
    logo_path: str = ""
    display_priority: int = 0


class RegionAvailability(BaseModel):
    """Offers for one region, grouped by offer type."""

    link: str = ""
    flatrate: list[WatchProvider] = Field(default_factory=list)
    rent: list[WatchProvider] = Field(default_factory=list)
    buy: list[WatchProvider] = Field(default_factory=list)
    ads: list[WatchProvider] = Field(default_factory=list)
    free: list[WatchProvider] = Field(default_factory=list)

    def provider_names(self, offer_type: OfferType = "flatrate") -> list[str]:
        providers = getattr(self, offer_type)
        return [provider.provider_name for provider in providers]


class RatingSource(BaseModel):
    source: str
    value: str


class RatingRecord(BaseModel):
    """Normalized OMDb record; every field carries a sentinel instead of None."""

    model_config = ConfigDict(frozen=True)

    title: str = "Unknown"
    year: str = "Unknown"
    rating: str = "N/A"
    votes: str = "N/A"
    metascore: str = "N/A"
    released: str = "Unknown"
    genre: str = "Unknown"
    director: str = "Unknown"
    writer: str = "Unknown"
    actors: str = "Unknown"
    plot: str = "No plot available."
    poster_url: str = ""
    country: str = "Unknown"
    language: str = "Unknown"
    media_kind: str = "movie"
    imdb_id: str = "N/A"
    rated: str = "N/A"
    runtime: str = "N/A"
    awards: str = "N/A"
    box_office: str = "N/A"
    sources: tuple[RatingSource, ...] = ()

    def numeric_rating(self) -> float | None:
        """Return the IMDb rating as a float, or ``None`` when OMDb has none."""

        try:
            return float(self.rating)
        except (TypeError, ValueError):
            return None

    def source_value(self, name: str) -> str | None:
        lowered = name.lower()
        for entry in self.sources:
            if lowered in entry.source.lower():
                return entry.value
        return None


class RatingSummary(BaseModel):
    """Lightweight IMDb rating and vote count."""

    rating: str = "N/A"
    votes: str = "N/A"


class CanonicalItem(BaseModel):
    """Unified representation of a movie or TV show."""

    model_config = ConfigDict(frozen=True)

    id: int
    media_kind: MediaKind
    title: str
    description: str
    release_date: str | None = None
    rating: float = 0.0
    poster_url: str = ""
    language: str = "Unknown"
    external_id: str | None = None
    availability: dict[str, RegionAvailability] | None = None
    availability_status: AvailabilityStatus = "not_requested"
    ratings: RatingRecord | None = None

    def region_availability(self, region: str) -> RegionAvailability | None:
        if not self.availability:
            return None
        return self.availability.get(region.upper())

    def release_year(self) -> str | None:
        if self.release_date and len(self.release_date) >= 4:
            return self.release_date[:4]
        return None


class PersonRecord(BaseModel):
    """Normalized TMDB person search result."""

    id: int
    name: str
    popularity: float = 0.0
    department: str = "Unknown"
    profile_url: str = ""
    known_for: str = "N/A"


class CollectionPart(BaseModel):
    id: int
    title: str
    release_date: str | None = None
    poster_url: str = ""
    description: str = "No description available."
    rating: float = 0.0


class CollectionRecord(BaseModel):
    """A TMDB collection with its ordered constituent movies."""

    id: int
    name: str
    overview: str = "No overview available."
    poster_url: str = ""
    backdrop_url: str = ""
    parts: list[CollectionPart] = Field(default_factory=list)


class GenreRecord(BaseModel):
    id: int
    name: str

    def matches(self, name: str) -> bool:
        """Case-insensitive exact comparison against a human genre name."""

        return self.name.lower() == name.lower()
