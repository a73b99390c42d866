#!/usr/bin/env python3
"""Script to run the scraping pipeline once and store the catalog."""

import argparse
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from project_hub.application.scraping_service import SOURCES
from project_hub.config import ConfigurationError, Settings, configure_logging
from project_hub.container import build_scheduler
from project_hub.infrastructure.repository_factory import build_catalog_repository

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the Project Hub scraper once.")
    parser.add_argument(
        "--source",
        choices=("all",) + SOURCES,
        default="all",
        help="Source to scrape (default: all)",
    )
    parser.add_argument(
        "--init-schema",
        action="store_true",
        help="Create the catalog tables before scraping",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Scrape projects and store them in the catalog."""
    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings)

    try:
        settings.validate_scraping()
    except ConfigurationError as e:
        logger.critical(str(e))
        return 2

    repository = build_catalog_repository(settings)
    try:
        repository.connect()
        if args.init_schema:
            repository.initialize_schema()

        scheduler = build_scheduler(settings, repository)
        result = scheduler.run_once(args.source)

        final_count = repository.get_entry_count()
        logger.info(
            f"Scraping completed: {result.saved}/{result.total} projects saved. "
            f"Total entries in catalog: {final_count}"
        )
        return 0 if result.total > 0 else 1

    except Exception as e:
        logger.error(f"Scraping failed: {e}", exc_info=True)
        return 1
    finally:
        repository.close()


if __name__ == "__main__":
    sys.exit(main())
