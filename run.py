"""Entry point for serving the LawnCare Pro API.

Host, port and log level are read from the environment (``HOST``,
``PORT``, ``LOG_LEVEL``; see ``lawn_care_api.app.core.config``).  A
``.env`` file is not read automatically; export variables before
starting.

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from lawn_care_api.app.core.config import settings
from lawn_care_api.app.main import app


async def run_api() -> None:
    """Serve the API with Uvicorn until interrupted."""
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
        pass


if __name__ == "__main__":
    main()
