"""Module executed when running ``python -m reelscope``."""

from __future__ import annotations

import asyncio
import logging

import uvicorn

from app.config import Settings, get_settings
from app.main import ServiceContainer, configure_logging, create_server

logger = logging.getLogger(__name__)


async def serve(settings: Settings) -> None:
    """Run the MCP server and close the upstream clients once it stops."""

    container = ServiceContainer(settings)
    server = create_server(settings, container=container)
    logger.info("Starting %s over %s", settings.app_name, settings.mcp_transport)
    try:
        if settings.mcp_transport == "stdio":
            await server.run_stdio_async()
            return

        if settings.mcp_transport == "sse":
            asgi_app = server.sse_app()
        else:
            asgi_app = server.streamable_http_app()
        config = uvicorn.Config(
            asgi_app,
            host=settings.server_host,
            port=settings.server_port,
            log_level=settings.log_level.lower(),
        )
        await uvicorn.Server(config).serve()
    finally:
        await container.aclose()


def main() -> None:
    """Start the MCP server on the configured transport."""

    settings = get_settings()
    configure_logging(settings)
    asyncio.run(serve(settings))


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
