"""Shared JSON transport with retry/backoff and schema validation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, TypeVar

import httpx
from pydantic import BaseModel

from ..config import Settings
from ..errors import SchemaViolation, TransportError, UpstreamHTTPError
from ..schemas import validate_payload

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

MAX_BACKOFF_SECONDS = 8.0
RETRYABLE_STATUS = {429}


class JsonFetcher:
    """Perform GET requests and return validated payloads.

    Connection errors, HTTP 429 and 5xx answers are retried with exponential
    backoff up to ``attempts`` times. Other 4xx answers fail immediately.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        attempts: int = 4,
        backoff_seconds: float = 1.0,
    ):
        self._client = http_client
        self._attempts = max(1, attempts)
        self._backoff = max(0.0, backoff_seconds)

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "JsonFetcher":
        return cls(
            http_client,
            attempts=settings.http_retry_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )

    def _delay(self, attempt: int) -> float:
        return min(self._backoff * 2 ** (attempt - 1), MAX_BACKOFF_SECONDS)

    async def get_json(
        self,
        url: str,
        schema: type[SchemaT],
        *,
        params: Mapping[str, Any] | None = None,
    ) -> SchemaT:
        """Fetch ``url`` and validate the decoded body against ``schema``."""

        response = await self._get_with_retries(url, params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise SchemaViolation("<root>", "a JSON document", str(exc)) from exc
        return validate_payload(schema, payload)

    async def _get_with_retries(
        self, url: str, params: Mapping[str, Any] | None
    ) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._client.get(url, params=params)
            except httpx.TransportError as exc:
                if attempt < self._attempts:
                    delay = self._delay(attempt)
                    logger.info(
                        "Transient error requesting %s (%s). Retrying in %.1fs",
                        _redact(url),
                        exc.__class__.__name__,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.warning(
                    "Giving up on %s after %s attempts: %s", _redact(url), attempt, exc
                )
                raise TransportError(
                    f"Request to {_redact(url)} failed after {attempt} attempts: {exc}"
                ) from exc

            status = response.status_code
            if status in RETRYABLE_STATUS or 500 <= status < 600:
                if attempt < self._attempts:
                    delay = self._delay(attempt)
                    logger.info(
                        "HTTP %s from %s. Retrying in %.1fs", status, _redact(url), delay
                    )
                    await asyncio.sleep(delay)
                    continue
                raise UpstreamHTTPError(status, _redact(url), response.text)
            if status >= 400:
                raise UpstreamHTTPError(status, _redact(url), response.text)
            return response


def _redact(url: str) -> str:
    """Drop the query string so API keys never reach logs or messages."""

    return url.split("?", 1)[0]
