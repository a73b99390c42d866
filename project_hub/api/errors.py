"""Global HTTP error handling and JSON response helpers."""
from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify
from pydantic import ValidationError

from project_hub.application.scheduler import ScrapeInProgressError
from project_hub.config import ConfigurationError
from project_hub.infrastructure.database import PersistenceError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def invalid_body(err: ValidationError):
        return fail(f"Invalid request: {err.errors(include_url=False)}", 400)

    @app.errorhandler(ScrapeInProgressError)
    def in_progress(err: ScrapeInProgressError):
        return fail(str(err), 409)

    @app.errorhandler(ConfigurationError)
    def not_configured(err: ConfigurationError):
        return fail(str(err), 503)

    @app.errorhandler(PersistenceError)
    def storage_failed(err: PersistenceError):
        logger.error(f"Storage error: {err}")
        return fail("Catalog storage is unavailable", 500)

    @app.errorhandler(400)
    def bad_request(err: Exception):  # type: ignore[override]
        return fail(str(err), 400)

    @app.errorhandler(404)
    def not_found(err: Exception):  # type: ignore[override]
        return fail(str(err), 404)

    @app.errorhandler(405)
    def method_not_allowed(err: Exception):  # type: ignore[override]
        return fail(str(err), 405)

    @app.errorhandler(500)
    def internal(err: Exception):  # type: ignore[override]
        return fail("unexpected error", 500)


def ok(data: Any, message: str | None = None, status: int = 200):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(error: str, status: int):
    return jsonify({"success": False, "error": error}), status
