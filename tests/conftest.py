"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable

import httpx
import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import Settings  # noqa: E402
from app.services.media import MediaQueryService  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_settings(**overrides: Any) -> Settings:
    """Return settings with both keys configured and no retry delay."""

    base: dict[str, Any] = {
        "TMDB_API_KEY": "tmdb-key",
        "OMDB_API_KEY": "omdb-key",
        "RETRY_BACKOFF_SECONDS": 0,
        "WATCH_REGION": "IN",
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


Route = Any


class StubUpstream:
    """Route ``httpx.MockTransport`` requests by path and record them.

    A route value is either a JSON payload, an ``httpx.Response`` or a
    callable receiving the request. Unknown paths answer 404.
    """

    def __init__(self, routes: dict[str, Route] | None = None):
        self.routes: dict[str, Route] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(
                404, json={"status_code": 34, "status_message": "Not found"}
            )
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)


class OmdbStub:
    """Answer OMDb queries from a callable receiving the query parameters."""

    def __init__(self, answer: Callable[[dict[str, str]], dict[str, Any]]):
        self._answer = answer
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json=self._answer(dict(request.url.params)))

    @property
    def queries(self) -> list[dict[str, str]]:
        return [dict(request.url.params) for request in self.requests]


def _no_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected request to {request.url}")


@asynccontextmanager
async def open_service(
    settings: Settings,
    tmdb: Callable[[httpx.Request], httpx.Response] | None = None,
    omdb: Callable[[httpx.Request], httpx.Response] | None = None,
) -> AsyncIterator[MediaQueryService]:
    """Yield a query service whose HTTP clients use mock transports."""

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(tmdb or _no_network),
        base_url=str(settings.tmdb_api_url),
    ) as tmdb_http, httpx.AsyncClient(
        transport=httpx.MockTransport(omdb or _no_network),
        base_url=str(settings.omdb_api_url),
    ) as omdb_http:
        yield MediaQueryService.from_http_clients(settings, tmdb_http, omdb_http)


def movie_result(movie_id: int, title: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": movie_id,
        "title": title,
        "overview": f"{title} overview",
        "release_date": "2010-07-15",
        "vote_average": 8.4,
        "poster_path": f"/{movie_id}.jpg",
        "original_language": "en",
    }
    payload.update(overrides)
    return payload


def tv_result(tv_id: int, name: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": tv_id,
        "name": name,
        "overview": f"{name} overview",
        "first_air_date": "2008-01-20",
        "vote_average": 8.9,
        "poster_path": f"/{tv_id}.jpg",
        "original_language": "en",
    }
    payload.update(overrides)
    return payload


def paged(results: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "page": 1,
        "results": results,
        "total_results": len(results),
        "total_pages": 1,
    }


def providers(tmdb_id: int, region: str = "IN", *names: str) -> dict[str, Any]:
    return {
        "id": tmdb_id,
        "results": {
            region: {
                "link": f"https://www.themoviedb.org/movie/{tmdb_id}/watch",
                "flatrate": [
                    {
                        "provider_id": index,
                        "provider_name": name,
                        "logo_path": f"/logo{index}.png",
                        "display_priority": index,
                    }
                    for index, name in enumerate(names, 1)
                ],
            }
        },
    }


def omdb_found(title: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "Response": "True",
        "Title": title,
        "Year": "2010",
        "Rated": "PG-13",
        "Released": "16 Jul 2010",
        "Runtime": "148 min",
        "Genre": "Action, Sci-Fi",
        "Director": "Christopher Nolan",
        "Writer": "Christopher Nolan",
        "Actors": "Leonardo DiCaprio",
        "Plot": "A thief who steals corporate secrets.",
        "Language": "English",
        "Country": "United States",
        "Awards": "Won 4 Oscars",
        "Poster": "https://m.media-amazon.com/poster.jpg",
        "Ratings": [
            {"Source": "Internet Movie Database", "Value": "8.8/10"},
            {"Source": "Rotten Tomatoes", "Value": "87%"},
        ],
        "Metascore": "74",
        "imdbRating": "8.8",
        "imdbVotes": "2,500,000",
        "imdbID": "tt1375666",
        "Type": "movie",
        "BoxOffice": "$292,587,330",
    }
    payload.update(overrides)
    return payload


def omdb_missing(error: str) -> dict[str, Any]:
    return {"Response": "False", "Error": error}


@pytest.fixture
def settings() -> Settings:
    return build_settings()
