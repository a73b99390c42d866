"""Catalog repository factory (postgres|memory)."""
from __future__ import annotations

from project_hub.config import ConfigurationError, Settings
from project_hub.infrastructure.database import CatalogRepository
from project_hub.infrastructure.memory_store import MemoryCatalogRepository


def build_catalog_repository(settings: Settings):
    backend = (settings.CATALOG_BACKEND or "postgres").lower()
    if backend == "memory":
        return MemoryCatalogRepository()
    if backend == "postgres":
        return CatalogRepository(settings.postgres_dsn)
    raise ConfigurationError(f"Unknown CATALOG_BACKEND: {settings.CATALOG_BACKEND}")
