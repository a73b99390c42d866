"""Health check endpoints."""
from __future__ import annotations

from flask import Blueprint, current_app

from ..errors import ok


bp = Blueprint("health", __name__)


@bp.get("/")
def alive():
    return ok({
        "status": "ok",
        "scrapingEnabled": current_app.extensions.get("scraping_scheduler") is not None,
    })
