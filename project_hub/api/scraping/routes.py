"""Scraping blueprint: manual trigger, status, stats and sources."""
from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from project_hub.application.scheduler import ScrapeInProgressError, ScrapingScheduler
from project_hub.config import ConfigurationError
from project_hub.infrastructure.database import PersistenceError
from ..errors import fail, ok
from .schemas import ScrapeRequest

logger = logging.getLogger(__name__)

bp = Blueprint("scraping", __name__)

STATS_CACHE_KEY = "scraping:stats"


def _scheduler() -> ScrapingScheduler:
    scheduler = current_app.extensions.get("scraping_scheduler")
    if scheduler is None:
        raise ConfigurationError("Scraping is disabled: GITHUB_TOKEN is not configured")
    return scheduler


def _stats() -> dict:
    cache = current_app.extensions["stats_cache"]
    stats = cache.get(STATS_CACHE_KEY)
    if stats is None:
        stats = current_app.extensions["catalog_repository"].get_stats()
        cache.set(STATS_CACHE_KEY, stats)
    return stats


@bp.post("/scrape")
def scrape():
    payload = ScrapeRequest.model_validate_json(request.data) if request.data else ScrapeRequest()
    scheduler = _scheduler()
    source = payload.source or "all"
    logger.info(f"Manual scraping triggered via API for source: {source}")

    try:
        result = scheduler.run_once(payload.source)
    except ScrapeInProgressError:
        raise
    except Exception as e:
        return fail(str(e) or "Failed to scrape projects", 500)

    name = "all sources" if source == "all" else source
    return ok(
        result.to_dict(),
        message=f"Successfully scraped {result.saved}/{result.total} projects from {name}",
    )


@bp.get("/status")
def status():
    scheduler = current_app.extensions.get("scraping_scheduler")
    if scheduler is None:
        data = {"enabled": False, "isRunning": False, "phase": "IDLE"}
    else:
        data = {"enabled": True, **scheduler.status()}

    try:
        data["stats"] = _stats()
    except PersistenceError as e:
        logger.error(f"Failed to get scraping stats: {e}")
        data["stats"] = None

    message = "Scraping service is active" if data["enabled"] else "Scraping service is disabled"
    return ok(data, message=message)


@bp.get("/stats")
def stats():
    return ok(_stats())


@bp.get("/sources")
def sources():
    settings = current_app.extensions["settings"]
    every_run = f"Every {settings.SCRAPE_INTERVAL_HOURS:g} hours"
    return ok({
        "sources": [
            {
                "id": "github",
                "name": "GitHub",
                "description": "Real open-source applications with actual stars and activity",
                "updateFrequency": f"Every {settings.GITHUB_SCRAPE_INTERVAL_HOURS:g} hours",
            },
            {
                "id": "kaggle",
                "name": "Kaggle Competitions",
                "description": "Data science competitions with real deadlines",
                "updateFrequency": every_run,
            },
            {
                "id": "hackathon",
                "name": "Hackathon Projects",
                "description": "Winning projects from hackathons on Devpost",
                "updateFrequency": every_run,
            },
            {
                "id": "upwork",
                "name": "Freelance Projects",
                "description": "Client briefs from Upwork and similar platforms",
                "updateFrequency": every_run,
            },
        ]
    })
