import logging
import logging.handlers

import pytest

from project_hub.config import ConfigurationError, Settings, configure_logging
from project_hub.infrastructure.database import CatalogRepository
from project_hub.infrastructure.memory_store import MemoryCatalogRepository
from project_hub.infrastructure.repository_factory import build_catalog_repository


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
    monkeypatch.setenv("MIN_STARS", "50")
    monkeypatch.setenv("PAGE_DELAY_SECONDS", "0.5")
    monkeypatch.setenv("RESOLVE_LIVE_URLS", "yes")
    monkeypatch.setenv("CATALOG_BACKEND", "Memory")

    settings = Settings.from_env(dotenv=False)

    assert settings.GITHUB_TOKEN == "ghp_env"
    assert settings.MIN_STARS == 50
    assert settings.PAGE_DELAY_SECONDS == 0.5
    assert settings.RESOLVE_LIVE_URLS is True
    assert settings.CATALOG_BACKEND == "memory"
    assert settings.HARD_STAR_THRESHOLD == 5000


def test_missing_token_disables_scraping(caplog):
    settings = Settings(GITHUB_TOKEN=None)

    with pytest.raises(ConfigurationError):
        settings.validate_scraping()
    with caplog.at_level(logging.CRITICAL):
        assert settings.scraping_enabled() is False
    assert "GITHUB_TOKEN" in caplog.text


def test_postgres_dsn():
    settings = Settings(POSTGRES_HOST="db", POSTGRES_DB="catalog")
    assert "host=db" in settings.postgres_dsn
    assert "dbname=catalog" in settings.postgres_dsn


def test_repository_factory():
    assert isinstance(build_catalog_repository(Settings(CATALOG_BACKEND="memory")), MemoryCatalogRepository)
    assert isinstance(build_catalog_repository(Settings()), CatalogRepository)
    with pytest.raises(ConfigurationError):
        build_catalog_repository(Settings(CATALOG_BACKEND="sqlite"))


def test_configure_logging_adds_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "scraper.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        configure_logging(Settings(LOG_FILE=str(log_file), LOG_LEVEL="DEBUG"))
        logging.getLogger("project_hub.test").debug("hello")

        handlers = root.handlers[:]
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers)
        for handler in handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers[:]:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
