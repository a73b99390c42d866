"""Application factory and blueprint registration."""
from __future__ import annotations

import logging

from flask import Flask
from flask_cors import CORS

from project_hub.application.scheduler import ScrapingScheduler
from project_hub.config import Settings
from project_hub.container import build_scheduler
from project_hub.infrastructure.cache import TTLCache
from project_hub.infrastructure.repository_factory import build_catalog_repository
from .errors import register_error_handlers
from .health.routes import bp as health_bp
from .scraping.routes import bp as scraping_bp

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    scheduler: ScrapingScheduler | None = None,
    repository=None,
    cache: TTLCache | None = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Collaborators not passed in are built from ``settings``. Without a GitHub
    token no scheduler is built and the scrape endpoint answers 503.
    """
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": settings.FRONTEND_ORIGIN}})

    repository = repository if repository is not None else build_catalog_repository(settings)
    cache = cache or TTLCache(default_ttl=settings.STATS_CACHE_TTL_SECONDS)
    if scheduler is None and settings.scraping_enabled():
        scheduler = build_scheduler(settings, repository, cache)

    app.extensions["settings"] = settings
    app.extensions["catalog_repository"] = repository
    app.extensions["stats_cache"] = cache
    app.extensions["scraping_scheduler"] = scheduler

    # Register blueprints
    app.register_blueprint(health_bp, url_prefix="/api/health")
    app.register_blueprint(scraping_bp, url_prefix="/api/scraping")

    # Global error handlers
    register_error_handlers(app)
    return app
