"""Fan-out enrichment of canonical items with TMDB side lookups."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Sequence

from ..errors import ReelScopeError
from ..models import AvailabilityStatus, CanonicalItem, RegionAvailability
from ..normalizer import normalize_availability
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AvailabilityLookup:
    """Outcome of a watch-provider lookup."""

    status: AvailabilityStatus
    regions: dict[str, RegionAvailability] | None = None


NOT_REQUESTED = AvailabilityLookup(status="not_requested")


async def _gather_or_cancel(*awaitables: Awaitable[Any]) -> list[Any]:
    """Like ``asyncio.gather`` but cancels the remaining tasks on the first failure."""

    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class EnrichmentOrchestrator:
    """Attach IMDb identifiers and watch providers to normalized items.

    For every item the external id and the availability are fetched
    concurrently. Availability is best effort: a failure is logged and the
    item is returned with ``availability_status="degraded"``. A failing
    external-id lookup fails the whole batch, cancelling the lookups still in
    flight, because rating enrichment depends on it.
    """

    def __init__(self, tmdb: TMDBClient, *, concurrency: int = 8):
        self._tmdb = tmdb
        self._semaphore = asyncio.Semaphore(concurrency)

    async def enrich(
        self,
        items: Sequence[CanonicalItem],
        *,
        include_availability: bool = True,
    ) -> list[CanonicalItem]:
        """Return enriched copies of ``items`` in their original order."""

        if not items:
            return []
        return await _gather_or_cancel(
            *(self._enrich_item(item, include_availability) for item in items)
        )

    async def _enrich_item(
        self, item: CanonicalItem, include_availability: bool
    ) -> CanonicalItem:
        if include_availability:
            external_id, availability = await _gather_or_cancel(
                self._external_id(item), self._availability(item)
            )
        else:
            external_id = await self._external_id(item)
            availability = NOT_REQUESTED

        return item.model_copy(
            update={
                "external_id": external_id,
                "availability": availability.regions,
                "availability_status": availability.status,
            }
        )

    async def _external_id(self, item: CanonicalItem) -> str | None:
        if item.external_id:
            return item.external_id
        async with self._semaphore:
            return await self._tmdb.external_id(item.media_kind, item.id)

    async def _availability(self, item: CanonicalItem) -> AvailabilityLookup:
        try:
            async with self._semaphore:
                payload = await self._tmdb.watch_providers(item.media_kind, item.id)
        except ReelScopeError as exc:
            logger.warning(
                "Watch provider lookup failed for %s %s: %s",
                item.media_kind,
                item.id,
                exc,
            )
            return AvailabilityLookup(status="degraded")

        regions = normalize_availability(payload)
        if regions is None:
            return AvailabilityLookup(status="empty")
        return AvailabilityLookup(status="available", regions=regions)
