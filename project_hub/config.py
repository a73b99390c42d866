"""Application configuration and logging setup."""
from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigurationError(Exception):
    """Raised when a required setting is missing."""
    pass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # GitHub
    GITHUB_TOKEN: str | None = None

    # Storage backend: postgres | memory
    CATALOG_BACKEND: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "project_hub"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"

    # Classification
    MIN_STARS: int = 30
    MEDIUM_STAR_THRESHOLD: int = 500
    HARD_STAR_THRESHOLD: int = 5000

    # Fetching
    PER_PAGE: int = 100
    MAX_PAGES_PER_QUERY: int = 3
    PAGE_DELAY_SECONDS: float = 1.0
    QUERY_DELAY_SECONDS: float = 1.5
    TARGET_PER_DOMAIN: int = 200
    RESOLVE_LIVE_URLS: bool = False

    # Scheduling
    SCRAPE_INTERVAL_HOURS: float = 6
    GITHUB_SCRAPE_INTERVAL_HOURS: float = 2

    # API
    STATS_CACHE_TTL_SECONDS: int = 300
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    FRONTEND_ORIGIN: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables, loading ``.env`` first."""
        if dotenv:
            load_dotenv()

        return cls(
            GITHUB_TOKEN=os.getenv("GITHUB_TOKEN") or None,
            CATALOG_BACKEND=os.getenv("CATALOG_BACKEND", cls.CATALOG_BACKEND).lower(),
            POSTGRES_HOST=os.getenv("POSTGRES_HOST", cls.POSTGRES_HOST),
            POSTGRES_PORT=os.getenv("POSTGRES_PORT", cls.POSTGRES_PORT),
            POSTGRES_DB=os.getenv("POSTGRES_DB", cls.POSTGRES_DB),
            POSTGRES_USER=os.getenv("POSTGRES_USER", cls.POSTGRES_USER),
            POSTGRES_PASSWORD=os.getenv("POSTGRES_PASSWORD", cls.POSTGRES_PASSWORD),
            MIN_STARS=int(os.getenv("MIN_STARS", cls.MIN_STARS)),
            MEDIUM_STAR_THRESHOLD=int(os.getenv("MEDIUM_STAR_THRESHOLD", cls.MEDIUM_STAR_THRESHOLD)),
            HARD_STAR_THRESHOLD=int(os.getenv("HARD_STAR_THRESHOLD", cls.HARD_STAR_THRESHOLD)),
            PER_PAGE=int(os.getenv("PER_PAGE", cls.PER_PAGE)),
            MAX_PAGES_PER_QUERY=int(os.getenv("MAX_PAGES_PER_QUERY", cls.MAX_PAGES_PER_QUERY)),
            PAGE_DELAY_SECONDS=float(os.getenv("PAGE_DELAY_SECONDS", cls.PAGE_DELAY_SECONDS)),
            QUERY_DELAY_SECONDS=float(os.getenv("QUERY_DELAY_SECONDS", cls.QUERY_DELAY_SECONDS)),
            TARGET_PER_DOMAIN=int(os.getenv("TARGET_PER_DOMAIN", cls.TARGET_PER_DOMAIN)),
            RESOLVE_LIVE_URLS=_env_bool("RESOLVE_LIVE_URLS", cls.RESOLVE_LIVE_URLS),
            SCRAPE_INTERVAL_HOURS=float(os.getenv("SCRAPE_INTERVAL_HOURS", cls.SCRAPE_INTERVAL_HOURS)),
            GITHUB_SCRAPE_INTERVAL_HOURS=float(
                os.getenv("GITHUB_SCRAPE_INTERVAL_HOURS", cls.GITHUB_SCRAPE_INTERVAL_HOURS)
            ),
            STATS_CACHE_TTL_SECONDS=int(os.getenv("STATS_CACHE_TTL_SECONDS", cls.STATS_CACHE_TTL_SECONDS)),
            API_HOST=os.getenv("API_HOST", cls.API_HOST),
            API_PORT=int(os.getenv("API_PORT", cls.API_PORT)),
            FRONTEND_ORIGIN=os.getenv("FRONTEND_ORIGIN", cls.FRONTEND_ORIGIN),
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            LOG_FILE=os.getenv("LOG_FILE") or None,
        )

    @property
    def postgres_dsn(self) -> str:
        return (
            f"host={self.POSTGRES_HOST} port={self.POSTGRES_PORT} dbname={self.POSTGRES_DB} "
            f"user={self.POSTGRES_USER} password={self.POSTGRES_PASSWORD}"
        )

    def validate_scraping(self) -> None:
        """
        Check the settings the scraper cannot run without.

        Raises:
            ConfigurationError: If GITHUB_TOKEN is missing
        """
        if not self.GITHUB_TOKEN:
            raise ConfigurationError(
                "GITHUB_TOKEN is not set; create a personal access token at "
                "https://github.com/settings/tokens and add it to .env"
            )

    def scraping_enabled(self) -> bool:
        """Validate scraping settings, logging critically instead of raising."""
        try:
            self.validate_scraping()
        except ConfigurationError as e:
            logger.critical(f"Scraping disabled: {e}")
            return False
        return True


def configure_logging(settings: Settings | None = None) -> None:
    """Log to stdout and, when LOG_FILE is set, to a rotating file."""
    settings = settings or Settings()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                settings.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
        )

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
