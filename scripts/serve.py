#!/usr/bin/env python3
"""Script to serve the scraping API and run the recurring scraping jobs."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from project_hub.api.app import create_app
from project_hub.config import Settings, configure_logging

logger = logging.getLogger(__name__)


def main():
    settings = Settings.from_env()
    configure_logging(settings)

    app = create_app(settings)
    repository = app.extensions["catalog_repository"]
    scheduler = app.extensions["scraping_scheduler"]

    try:
        repository.connect()
        repository.initialize_schema()
    except Exception as e:
        logger.error(f"Failed to prepare catalog storage: {e}")
        return 1

    if scheduler is not None:
        scheduler.start()
    else:
        logger.warning("Scraping scheduler not started; only read endpoints are available")

    try:
        logger.info(f"Serving API on {settings.API_HOST}:{settings.API_PORT}")
        app.run(host=settings.API_HOST, port=settings.API_PORT)
    finally:
        if scheduler is not None:
            scheduler.stop(timeout=5)
        repository.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
