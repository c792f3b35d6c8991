"""Entry point for the Contact Book API server.

Starts the FastAPI application with Uvicorn.  Host and port are taken
from the ``HOST`` and ``PORT`` environment variables (see
``contact_book_api.app.core.config``).

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from contact_book_api.app.core.config import settings
from contact_book_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Server stopped")


if __name__ == "__main__":
    main()
