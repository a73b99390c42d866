"""In-process catalog storage for local runs and tests."""

import logging
import threading
from collections import Counter
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from project_hub.domain.catalog import CatalogEntry, Domain
from project_hub.infrastructure.database import REFRESHED_COLUMNS

logger = logging.getLogger(__name__)


class MemoryCatalogRepository:
    """Same interface as CatalogRepository, backed by dicts behind a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._domains: Dict[str, Domain] = {}
        # Keyed by source URL, which is unique in the catalog
        self._entries: Dict[str, CatalogEntry] = {}

    def connect(self):
        pass

    def close(self):
        pass

    def initialize_schema(self):
        logger.info("Using in-memory catalog; no schema to create")

    def ensure_domains(self, domains: Iterable[Domain]) -> int:
        count = 0
        with self._lock:
            for domain in domains:
                self._domains[domain.slug] = domain
                count += 1
        return count

    def replace_domain_entries(
        self, domain: Domain, entries: List[CatalogEntry], source_type: str = "github"
    ) -> int:
        with self._lock:
            if domain.slug not in self._domains:
                raise KeyError(f"Domain not ensured: {domain.slug}")
            stale = [
                url for url, e in self._entries.items()
                if e.domain_id == domain.id and e.source_type == source_type
            ]
            for url in stale:
                del self._entries[url]
            for entry in entries:
                self._entries[entry.source_url] = entry
        logger.info(f"Replaced {len(stale)} entries of {domain.slug} with {len(entries)} new entries")
        return len(entries)

    def upsert_entries(self, entries: List[CatalogEntry]) -> int:
        """Insert new entries and refresh source fields of known ones; returns inserts."""
        inserted = 0
        with self._lock:
            for entry in entries:
                current = self._entries.get(entry.source_url)
                if current is None:
                    self._entries[entry.source_url] = entry
                    inserted += 1
                else:
                    changes = {name: getattr(entry, name) for name in REFRESHED_COLUMNS}
                    self._entries[entry.source_url] = replace(current, **changes)
        logger.info(f"Upserted {len(entries)} entries ({inserted} new)")
        return inserted

    def existing_keys(self, exclude_source_type: Optional[str] = None) -> Tuple[Set[str], Set[str]]:
        with self._lock:
            kept = [e for e in self._entries.values() if e.source_type != exclude_source_type]
        return {e.source_url for e in kept}, {e.base_name for e in kept}

    def entries(self, domain_id: Optional[str] = None) -> List[CatalogEntry]:
        with self._lock:
            return [
                e for e in self._entries.values()
                if domain_id is None or e.domain_id == domain_id
            ]

    def domains(self) -> List[Domain]:
        with self._lock:
            return list(self._domains.values())

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            entries = list(self._entries.values())
            domains = list(self._domains.values())
        per_domain = Counter(e.domain_id for e in entries)
        return {
            "entries": len(entries),
            "activeEntries": sum(1 for e in entries if e.is_active),
            "domains": len(domains),
            "bySource": dict(Counter(e.source_type for e in entries)),
            "byDomain": {d.slug: per_domain.get(d.id, 0) for d in domains},
        }

    def get_entry_count(self) -> int:
        with self._lock:
            return len(self._entries)
