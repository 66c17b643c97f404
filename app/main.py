"""Entry point for the ReelScope MCP server."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .config import Settings, get_settings
from .services.media import MediaQueryService
from .tools import ToolHandlers

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Look up movies and TV shows on TMDB, where to stream them, and their IMDb "
    "ratings via OMDb. Person and collection searches return TMDB ids usable "
    "with discover_by_actor and get_collection_details."
)


class ServiceContainer:
    """Owns the provider HTTP clients and the query service built on them.

    The service is created on first use so that a missing API key only
    surfaces when a tool actually needs it. The clients live for the whole
    process and are shared by every MCP session; only :meth:`aclose` ends them.
    """

    def __init__(
        self,
        settings: Settings,
        service: MediaQueryService | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._service = service
        self._transport = transport
        self._exit_stack = AsyncExitStack()

    def get(self) -> MediaQueryService:
        if self._service is None:
            self._service = self._build_service()
        return self._service

    def _build_service(self) -> MediaQueryService:
        timeout = httpx.Timeout(self._settings.http_timeout_seconds, connect=10.0)
        tmdb_http = httpx.AsyncClient(
            base_url=str(self._settings.tmdb_api_url),
            timeout=timeout,
            transport=self._transport,
        )
        omdb_http = httpx.AsyncClient(
            base_url=str(self._settings.omdb_api_url),
            timeout=timeout,
            transport=self._transport,
        )
        self._exit_stack.push_async_callback(tmdb_http.aclose)
        self._exit_stack.push_async_callback(omdb_http.aclose)
        logger.info("Initialised TMDB and OMDb HTTP clients")
        return MediaQueryService.from_http_clients(self._settings, tmdb_http, omdb_http)

    async def aclose(self) -> None:
        """Close owned clients; a later :meth:`get` builds fresh ones."""

        await self._exit_stack.aclose()
        self._exit_stack = AsyncExitStack()
        self._service = None


def create_server(
    settings: Settings | None = None,
    *,
    container: ServiceContainer | None = None,
) -> FastMCP:
    """Build the MCP server and register every tool.

    FastMCP enters the lifespan once per client session, so the lifespan only
    hands out the shared container. Closing it is up to the process owner.
    """

    resolved = settings or get_settings()
    shared = container or ServiceContainer(resolved)

    @asynccontextmanager
    async def lifespan(_: FastMCP) -> AsyncIterator[ServiceContainer]:
        yield shared

    mcp_server = FastMCP(resolved.app_name, instructions=INSTRUCTIONS, lifespan=lifespan)
    handlers = ToolHandlers(shared.get)
    read_only = ToolAnnotations(readOnlyHint=True, openWorldHint=True)
    for handler in handlers.registry():
        mcp_server.add_tool(handler, annotations=read_only)
    return mcp_server


def configure_logging(settings: Settings) -> None:
    """Send logs to stderr so the stdio transport stays clean."""

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
