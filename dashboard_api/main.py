"""CLI entrypoint for launching the dashboard API with Uvicorn."""
from __future__ import annotations

import logging

import uvicorn

from .api import create_app
from .config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
    logging.info(
        "Starting dashboard API on %s:%d with %s metrics",
        settings.host,
        settings.port,
        settings.metric_source,
    )

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
