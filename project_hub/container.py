"""Wiring of the scraping pipeline from settings."""
from __future__ import annotations

import logging

from project_hub.application.catalog_writer import CatalogWriter
from project_hub.application.classifier import Classifier
from project_hub.application.live_url import LiveUrlResolver
from project_hub.application.scheduler import ScrapingScheduler
from project_hub.application.scraping_service import ScrapingService
from project_hub.application.source_fetcher import SourceFetcher
from project_hub.application.synthesizer import ContentSynthesizer
from project_hub.config import Settings
from project_hub.infrastructure.cache import TTLCache
from project_hub.infrastructure.github_client import GitHubSearchClient

logger = logging.getLogger(__name__)


def build_scraping_service(settings: Settings, repository) -> ScrapingService:
    github_client = GitHubSearchClient(token=settings.GITHUB_TOKEN)
    fetcher = SourceFetcher(
        github_client,
        per_page=settings.PER_PAGE,
        max_pages_per_query=settings.MAX_PAGES_PER_QUERY,
        page_delay=settings.PAGE_DELAY_SECONDS,
        query_delay=settings.QUERY_DELAY_SECONDS,
    )
    classifier = Classifier(
        min_stars=settings.MIN_STARS,
        medium_threshold=settings.MEDIUM_STAR_THRESHOLD,
        hard_threshold=settings.HARD_STAR_THRESHOLD,
    )
    return ScrapingService(
        fetcher=fetcher,
        classifier=classifier,
        synthesizer=ContentSynthesizer(),
        writer=CatalogWriter(repository),
        live_urls=LiveUrlResolver(github_client, scan_readme=settings.RESOLVE_LIVE_URLS),
        target_per_domain=settings.TARGET_PER_DOMAIN,
    )


def build_scheduler(settings: Settings, repository, cache: TTLCache | None = None) -> ScrapingScheduler:
    return ScrapingScheduler(
        build_scraping_service(settings, repository),
        cache=cache,
        interval_hours=settings.SCRAPE_INTERVAL_HOURS,
        github_interval_hours=settings.GITHUB_SCRAPE_INTERVAL_HOURS,
    )
