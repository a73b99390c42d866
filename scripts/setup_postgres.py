#!/usr/bin/env python3
"""Script to initialize the PostgreSQL catalog schema and domains."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from project_hub.config import Settings, configure_logging
from project_hub.domain.catalog import DOMAINS
from project_hub.infrastructure.database import CatalogRepository

logger = logging.getLogger(__name__)


def main():
    """Initialize database schema."""
    settings = Settings.from_env()
    configure_logging(settings)
    try:
        db_repo = CatalogRepository(settings.postgres_dsn)
        db_repo.connect()
        db_repo.initialize_schema()
        db_repo.ensure_domains(DOMAINS)
        db_repo.close()
        logger.info("Database schema setup completed successfully")
        return 0
    except Exception as e:
        logger.error(f"Failed to setup database schema: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
