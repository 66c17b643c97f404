"""Cross-reference titles with IMDb ratings through the OMDb API."""

from __future__ import annotations

import logging
from typing import Any, Literal

from ..config import Settings
from ..errors import SchemaViolation, TransportError
from ..models import RatingRecord, RatingSummary
from ..normalizer import DEFAULT_POLICY, DefaultPolicy, normalize_rating, normalize_rating_summary
from ..schemas import OmdbTitleResponse
from .http import JsonFetcher

logger = logging.getLogger(__name__)

OmdbKind = Literal["movie", "series", "episode"]

_KIND_ALIASES: dict[str, OmdbKind] = {
    "movie": "movie",
    "series": "series",
    "tv": "series",
    "episode": "episode",
}


def resolve_kind(hint: str | None) -> OmdbKind | None:
    """Map a media kind hint (TMDB or OMDb spelling) to an OMDb ``type``."""

    if not hint:
        return None
    try:
        return _KIND_ALIASES[hint.strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported media kind for OMDb lookups: {hint}") from None


def guess_retry_kind(error_message: str | None) -> OmdbKind:
    """Pick the kind to retry with after an untyped lookup missed."""

    if error_message and "series" in error_message.lower():
        return "movie"
    return "series"


class OMDbClient:
    """Look up rating records by title or IMDb id.

    Successful lookups are memoised for the lifetime of the client. The memo
    is an unbounded dict shared by all callers; concurrent first lookups of
    the same key may both reach the network. Transport failures and malformed
    payloads are logged and reported as "not found".
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: JsonFetcher,
        *,
        policy: DefaultPolicy = DEFAULT_POLICY,
    ):
        self._settings = settings
        self._fetcher = fetcher
        self._policy = policy
        self._memo: dict[str, RatingRecord] = {}

    @staticmethod
    def title_key(title: str, kind: str | None) -> str:
        return f"title:{kind or 'auto'}:{title.lower()}"

    @staticmethod
    def id_key(imdb_id: str) -> str:
        return f"id:{imdb_id}"

    async def _fetch(self, **params: Any) -> OmdbTitleResponse:
        query = {"apikey": self._settings.require_omdb_key()}
        query.update({key: value for key, value in params.items() if value is not None})
        return await self._fetcher.get_json("/", OmdbTitleResponse, params=query)

    async def lookup_by_title(
        self, title: str, kind_hint: str | None = None
    ) -> RatingRecord | None:
        """Return the OMDb record for ``title``.

        Without a hint a miss is retried exactly once with the kind suggested
        by the error message.
        """

        self._settings.require_omdb_key()
        kind = resolve_kind(kind_hint)
        key = self.title_key(title, kind)
        cached = self._memo.get(key)
        if cached is not None:
            logger.debug("OMDb memo hit for %s", key)
            return cached

        retry_kind: OmdbKind | None = None
        try:
            payload = await self._fetch(t=title, plot="full", type=kind)
            if not payload.found and kind is None:
                retry_kind = guess_retry_kind(payload.Error)
                logger.info(
                    "OMDb found no match for %r (%s); retrying as %s",
                    title,
                    payload.Error,
                    retry_kind,
                )
                payload = await self._fetch(t=title, plot="full", type=retry_kind)
        except (TransportError, SchemaViolation) as exc:
            logger.warning("OMDb lookup failed for %r: %s", title, exc)
            return None

        if not payload.found:
            return None

        record = normalize_rating(payload, self._policy)
        self._memo[key] = record
        if retry_kind is not None:
            self._memo[self.title_key(title, retry_kind)] = record
        return record

    async def lookup_by_id(self, imdb_id: str) -> RatingRecord | None:
        """Return the OMDb record for an IMDb identifier such as ``tt0111161``."""

        self._settings.require_omdb_key()
        key = self.id_key(imdb_id)
        cached = self._memo.get(key)
        if cached is not None:
            logger.debug("OMDb memo hit for %s", key)
            return cached

        try:
            payload = await self._fetch(i=imdb_id, plot="full")
        except (TransportError, SchemaViolation) as exc:
            logger.warning("OMDb lookup failed for IMDb id %s: %s", imdb_id, exc)
            return None

        if not payload.found:
            return None

        record = normalize_rating(payload, self._policy)
        self._memo[key] = record
        return record

    async def get_rating_summary(self, title: str) -> RatingSummary:
        """Return only the IMDb rating and vote count, always from the network."""

        self._settings.require_omdb_key()
        try:
            payload = await self._fetch(t=title)
        except (TransportError, SchemaViolation) as exc:
            logger.warning("OMDb summary lookup failed for %r: %s", title, exc)
            missing = self._policy.missing_value
            return RatingSummary(rating=missing, votes=missing)
        return normalize_rating_summary(payload, self._policy)
