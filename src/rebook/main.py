"""Application entry point for the Rebook server."""

from __future__ import annotations

import logging

import uvicorn

from rebook.config.settings import AppConfig, LogLevel

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQL statements are logged through ``db.debug_sql`` only.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def main() -> None:
    """Start the Rebook server."""
    config = AppConfig()
    configure_logging(LogLevel.DEBUG if config.debug else config.log_level)
    uvicorn.run(
        "rebook.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
