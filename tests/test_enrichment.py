"""Tests for attaching IMDb ids and watch providers to items."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from app.errors import UpstreamHTTPError
from app.models import CanonicalItem
from app.services.enrichment import EnrichmentOrchestrator
from app.services.http import JsonFetcher
from app.services.tmdb import TMDBClient
from conftest import StubUpstream, build_settings, providers


def _item(tmdb_id: int, media_kind: str = "movie", **overrides) -> CanonicalItem:
    return CanonicalItem(
        id=tmdb_id,
        media_kind=media_kind,
        title=f"Title {tmdb_id}",
        description="desc",
        **overrides,
    )


def _orchestrator(stub: StubUpstream) -> tuple[EnrichmentOrchestrator, httpx.AsyncClient]:
    settings = build_settings(HTTP_RETRY_ATTEMPTS=1)
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(stub), base_url=str(settings.tmdb_api_url)
    )
    tmdb = TMDBClient(settings, JsonFetcher.from_settings(settings, http_client))
    return EnrichmentOrchestrator(tmdb, concurrency=2), http_client


@pytest.mark.anyio("asyncio")
async def test_enrich_preserves_order_and_attaches_data() -> None:
    stub = StubUpstream(
        {
            "/3/movie/1": {"imdb_id": "tt0000001"},
            "/3/movie/2": {"imdb_id": "tt0000002"},
            "/3/tv/3": {"external_ids": {"imdb_id": "tt0000003"}},
            "/3/movie/1/watch/providers": providers(1, "IN", "Netflix"),
            "/3/movie/2/watch/providers": {"id": 2, "results": {}},
            "/3/tv/3/watch/providers": providers(3, "US", "Hulu"),
        }
    )
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        enriched = await orchestrator.enrich([_item(1), _item(2), _item(3, "tv")])

    assert [item.id for item in enriched] == [1, 2, 3]
    assert [item.external_id for item in enriched] == ["tt0000001", "tt0000002", "tt0000003"]
    assert [item.availability_status for item in enriched] == ["available", "empty", "available"]
    assert enriched[0].region_availability("in").provider_names() == ["Netflix"]
    assert enriched[1].availability is None
    assert enriched[2].region_availability("IN") is None


@pytest.mark.anyio("asyncio")
async def test_tv_details_request_external_ids() -> None:
    stub = StubUpstream({"/3/tv/3": {"external_ids": {"imdb_id": None}}})
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        [item] = await orchestrator.enrich([_item(3, "tv")], include_availability=False)

    assert item.external_id is None
    assert stub.requests[0].url.params["append_to_response"] == "external_ids"


@pytest.mark.anyio("asyncio")
async def test_known_external_id_skips_details_request() -> None:
    stub = StubUpstream({"/3/movie/1/watch/providers": providers(1, "IN", "Netflix")})
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        [item] = await orchestrator.enrich([_item(1, external_id="tt0000001")])

    assert item.external_id == "tt0000001"
    assert stub.paths() == ["/3/movie/1/watch/providers"]


@pytest.mark.anyio("asyncio")
async def test_availability_failure_degrades_item() -> None:
    """A failing provider lookup should not fail the item."""

    stub = StubUpstream(
        {
            "/3/movie/1": {"imdb_id": "tt0000001"},
            "/3/movie/1/watch/providers": httpx.Response(500, text="boom"),
        }
    )
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        [item] = await orchestrator.enrich([_item(1)])

    assert item.external_id == "tt0000001"
    assert item.availability is None
    assert item.availability_status == "degraded"


@pytest.mark.anyio("asyncio")
async def test_availability_can_be_skipped() -> None:
    stub = StubUpstream({"/3/movie/1": {"imdb_id": "tt0000001"}})
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        [item] = await orchestrator.enrich([_item(1)], include_availability=False)

    assert item.availability_status == "not_requested"
    assert stub.paths() == ["/3/movie/1"]


@pytest.mark.anyio("asyncio")
async def test_external_id_failure_propagates() -> None:
    stub = StubUpstream({"/3/movie/1/watch/providers": providers(1, "IN")})
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        with pytest.raises(UpstreamHTTPError):
            await orchestrator.enrich([_item(1)])


@pytest.mark.anyio("asyncio")
async def test_empty_batch_makes_no_requests() -> None:
    stub = StubUpstream()
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        assert await orchestrator.enrich([]) == []

    assert stub.requests == []


@pytest.mark.anyio("asyncio")
async def test_availability_failure_leaves_other_items_untouched() -> None:
    stub = StubUpstream(
        {
            "/3/movie/1": {"imdb_id": "tt0000001"},
            "/3/movie/2": {"imdb_id": "tt0000002"},
            "/3/movie/1/watch/providers": httpx.Response(500, text="boom"),
            "/3/movie/2/watch/providers": providers(2, "IN", "Netflix", "Prime Video"),
        }
    )
    orchestrator, http_client = _orchestrator(stub)

    async with http_client:
        enriched = await orchestrator.enrich([_item(1), _item(2)])

    assert [item.id for item in enriched] == [1, 2]
    assert enriched[0].availability_status == "degraded"
    assert enriched[0].availability is None
    assert enriched[1].availability_status == "available"
    assert enriched[1].region_availability("IN").provider_names() == ["Netflix", "Prime Video"]
    assert [item.external_id for item in enriched] == ["tt0000001", "tt0000002"]


@pytest.mark.anyio("asyncio")
async def test_external_id_failure_cancels_pending_lookups() -> None:
    """Lookups still in flight when the batch fails should never complete."""

    completed: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/3/movie/1":
            return httpx.Response(404, json={"status_message": "Not found"})
        await asyncio.sleep(0.05)
        completed.append(request.url.path)
        return httpx.Response(200, json={"id": 2, "imdb_id": "tt0000002"})

    orchestrator, http_client = _orchestrator(handler)

    async with http_client:
        with pytest.raises(UpstreamHTTPError):
            await orchestrator.enrich([_item(1), _item(2)])
        await asyncio.sleep(0.2)

    assert completed == []
