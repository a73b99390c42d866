"""PostgreSQL storage for domains and catalog entries."""

import logging
import uuid
import psycopg2
from psycopg2.extras import execute_values
from psycopg2.pool import ThreadedConnectionPool
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
import os

from project_hub.domain.catalog import CatalogEntry, Domain

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a catalog write or read fails; the transaction is rolled back."""
    pass


ENTRY_COLUMNS = (
    "id", "title", "slug", "description", "source_type", "source_id", "source_url",
    "repo_owner", "repo_name", "base_name", "default_branch", "download_url", "live_url",
    "download_count", "like_count", "domain_id", "stars", "forks", "language",
    "tech_stack", "technical_skills", "difficulty", "topics", "sub_domain",
    "case_study", "problem_statement", "solution_description", "prerequisites_text",
    "deliverables", "supposed_deadline", "estimated_min_time", "estimated_max_time",
    "introduction", "author", "is_active", "qa_status", "last_updated",
)

# Refreshed from the source on conflict; review fields and counters are kept
REFRESHED_COLUMNS = (
    "title", "description", "domain_id", "stars", "forks", "language", "live_url",
    "topics", "default_branch", "download_url", "last_updated",
)


def entry_row(entry: CatalogEntry) -> Tuple[Any, ...]:
    """Flatten a catalog entry into a row ordered like ENTRY_COLUMNS."""
    return (
        str(uuid.uuid4()),
        entry.title,
        entry.slug,
        entry.description,
        entry.source_type,
        entry.source_id,
        entry.source_url,
        entry.repo_owner,
        entry.repo_name,
        entry.base_name,
        entry.default_branch,
        entry.download_url,
        entry.live_url,
        entry.download_count,
        entry.like_count,
        entry.domain_id,
        entry.stars,
        entry.forks,
        entry.language,
        list(entry.tech_stack),
        list(entry.technical_skills),
        entry.difficulty.value,
        list(entry.topics),
        entry.sub_domain,
        entry.case_study,
        entry.problem_statement,
        entry.solution_description,
        entry.prerequisites_text,
        list(entry.deliverables),
        entry.supposed_deadline,
        entry.estimated_min_time,
        entry.estimated_max_time,
        entry.introduction,
        entry.author,
        entry.is_active,
        entry.qa_status.value,
        entry.last_updated,
    )


SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS domains (
        id VARCHAR(64) PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        slug VARCHAR(255) NOT NULL,
        description TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT unique_domain_slug UNIQUE (slug)
    );

    CREATE TABLE IF NOT EXISTS catalog_entries (
        id VARCHAR(36) PRIMARY KEY,
        title TEXT NOT NULL,
        slug TEXT,
        description TEXT NOT NULL,
        source_type VARCHAR(32) NOT NULL DEFAULT 'github',
        source_id VARCHAR(255),
        source_url TEXT NOT NULL,
        repo_owner VARCHAR(255),
        repo_name VARCHAR(255),
        base_name VARCHAR(255) NOT NULL,
        default_branch VARCHAR(255) NOT NULL DEFAULT 'main',
        download_url TEXT NOT NULL DEFAULT '',
        live_url TEXT,
        download_count INTEGER NOT NULL DEFAULT 0,
        like_count INTEGER NOT NULL DEFAULT 0,
        domain_id VARCHAR(64) NOT NULL REFERENCES domains(id) ON DELETE CASCADE,
        stars INTEGER NOT NULL DEFAULT 0,
        forks INTEGER NOT NULL DEFAULT 0,
        language VARCHAR(128),
        tech_stack TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
        technical_skills TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
        difficulty VARCHAR(16) NOT NULL DEFAULT 'MEDIUM'
            CHECK (difficulty IN ('EASY', 'MEDIUM', 'HARD')),
        topics TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
        sub_domain VARCHAR(255),
        case_study TEXT,
        problem_statement TEXT,
        solution_description TEXT,
        prerequisites_text TEXT,
        deliverables TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
        supposed_deadline VARCHAR(64),
        estimated_min_time INTEGER NOT NULL DEFAULT 10,
        estimated_max_time INTEGER NOT NULL DEFAULT 40,
        introduction TEXT,
        author VARCHAR(255) NOT NULL DEFAULT 'Project Hub',
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        qa_status VARCHAR(16) NOT NULL DEFAULT 'PENDING'
            CHECK (qa_status IN ('PENDING', 'APPROVED', 'REJECTED', 'NEEDS_REWORK')),
        qa_feedback TEXT,
        reviewed_at TIMESTAMPTZ,
        reviewed_by VARCHAR(255),
        last_updated TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT unique_entry_source_url UNIQUE (source_url)
    );

    CREATE INDEX IF NOT EXISTS idx_catalog_entries_domain_id ON catalog_entries(domain_id);
    CREATE INDEX IF NOT EXISTS idx_catalog_entries_difficulty ON catalog_entries(difficulty);
    CREATE INDEX IF NOT EXISTS idx_catalog_entries_stars ON catalog_entries(stars);
    CREATE INDEX IF NOT EXISTS idx_catalog_entries_base_name ON catalog_entries(base_name);
    CREATE INDEX IF NOT EXISTS idx_catalog_entries_is_active ON catalog_entries(is_active);
"""


class CatalogRepository:
    """Repository for storing the project catalog in PostgreSQL."""

    def __init__(self, connection_string: Optional[str] = None):
        """
        Initialize database repository.

        Args:
            connection_string: PostgreSQL connection string. If None, uses env vars.
        """
        if connection_string is None:
            # Build connection string from environment variables
            db_host = os.getenv("POSTGRES_HOST", "localhost")
            db_port = os.getenv("POSTGRES_PORT", "5432")
            db_name = os.getenv("POSTGRES_DB", "project_hub")
            db_user = os.getenv("POSTGRES_USER", "postgres")
            db_password = os.getenv("POSTGRES_PASSWORD", "postgres")

            connection_string = (
                f"host={db_host} port={db_port} dbname={db_name} "
                f"user={db_user} password={db_password}"
            )

        self.connection_string = connection_string
        self.pool: Optional[ThreadedConnectionPool] = None

    def connect(self):
        """Initialize connection pool."""
        try:
            self.pool = ThreadedConnectionPool(1, 5, self.connection_string)
            logger.info("Database connection pool created")
        except psycopg2.Error as e:
            logger.error(f"Error creating connection pool: {e}")
            raise PersistenceError(f"Cannot connect to database: {e}") from e

    def close(self):
        """Close connection pool."""
        if self.pool:
            self.pool.closeall()
            logger.info("Database connection pool closed")

    def _get_connection(self):
        """Get a connection from the pool."""
        if not self.pool:
            self.connect()
        return self.pool.getconn()

    def _return_connection(self, conn):
        """Return a connection to the pool."""
        if self.pool:
            self.pool.putconn(conn)

    def _transaction(self, description: str, operation) -> Any:
        """
        Run ``operation(cursor)`` in one transaction.

        Raises:
            PersistenceError: If the operation fails; the transaction is rolled back
        """
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                result = operation(cur)
            conn.commit()
            return result
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Error {description}: {e}")
            raise PersistenceError(f"Error {description}: {e}") from e
        finally:
            self._return_connection(conn)

    def initialize_schema(self):
        """Create database tables if they don't exist."""
        self._transaction("initializing schema", lambda cur: cur.execute(SCHEMA_SQL))
        logger.info("Database schema initialized")

    def ensure_domains(self, domains: Iterable[Domain]) -> int:
        """
        Insert domains or refresh their names, keyed by slug.

        Idempotent: repeated calls leave exactly one row per slug.

        Returns:
            Number of domains ensured
        """
        values = [(d.id, d.name, d.slug, d.description) for d in domains]
        if not values:
            return 0

        def operation(cur):
            execute_values(
                cur,
                """
                INSERT INTO domains (id, name, slug, description) VALUES %s
                ON CONFLICT (slug)
                DO UPDATE SET
                    name = EXCLUDED.name,
                    updated_at = CURRENT_TIMESTAMP
                """,
                values,
            )

        self._transaction("ensuring domains", operation)
        return len(values)

    def replace_domain_entries(
        self, domain: Domain, entries: List[CatalogEntry], source_type: str = "github"
    ) -> int:
        """
        Replace the entries of one source in a domain with a new batch, in one transaction.

        An entry whose source URL currently belongs to another domain is moved
        to this one instead of failing the unique constraint.

        Returns:
            Number of entries written
        """
        rows = [entry_row(e) for e in entries]
        columns = ", ".join(ENTRY_COLUMNS)
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in ENTRY_COLUMNS if c != "id")

        def operation(cur):
            cur.execute(
                "DELETE FROM catalog_entries WHERE domain_id = %s AND source_type = %s",
                (domain.id, source_type),
            )
            deleted = cur.rowcount
            if rows:
                execute_values(
                    cur,
                    f"""
                    INSERT INTO catalog_entries ({columns}) VALUES %s
                    ON CONFLICT (source_url)
                    DO UPDATE SET {updates}, updated_at = CURRENT_TIMESTAMP
                    """,
                    rows,
                    page_size=500,
                )
            return deleted

        deleted = self._transaction(f"replacing entries of {domain.slug}", operation)
        logger.info(f"Replaced {deleted} entries of {domain.slug} with {len(rows)} new entries")
        return len(rows)

    def upsert_entries(self, entries: List[CatalogEntry]) -> int:
        """
        Insert new entries and refresh counters of known ones, keyed by source URL.

        Returns:
            Number of newly inserted entries
        """
        if not entries:
            return 0

        rows = [entry_row(e) for e in entries]
        columns = ", ".join(ENTRY_COLUMNS)
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in REFRESHED_COLUMNS)

        def operation(cur):
            results = execute_values(
                cur,
                f"""
                INSERT INTO catalog_entries ({columns}) VALUES %s
                ON CONFLICT (source_url)
                DO UPDATE SET {updates}, updated_at = CURRENT_TIMESTAMP
                RETURNING (xmax = 0) AS inserted
                """,
                rows,
                page_size=500,
                fetch=True,
            )
            return sum(1 for (inserted,) in results if inserted)

        inserted = self._transaction("upserting entries", operation)
        logger.info(f"Upserted {len(rows)} entries ({inserted} new)")
        return inserted

    def existing_keys(self, exclude_source_type: Optional[str] = None) -> Tuple[Set[str], Set[str]]:
        """
        Source URLs and base names already in the catalog.

        Args:
            exclude_source_type: Leave out entries of this source type

        Returns:
            Tuple of (source URLs, base names)
        """
        def operation(cur):
            if exclude_source_type is None:
                cur.execute("SELECT source_url, base_name FROM catalog_entries")
            else:
                cur.execute(
                    "SELECT source_url, base_name FROM catalog_entries WHERE source_type <> %s",
                    (exclude_source_type,),
                )
            return cur.fetchall()

        rows = self._transaction("loading existing keys", operation)
        return {url for url, _ in rows}, {name for _, name in rows}

    def get_stats(self) -> Dict[str, Any]:
        """Entry counts overall, per source type and per domain."""
        def operation(cur):
            cur.execute(
                "SELECT COUNT(*), COUNT(*) FILTER (WHERE is_active) FROM catalog_entries"
            )
            total, active = cur.fetchone()
            cur.execute("SELECT COUNT(*) FROM domains")
            domains = cur.fetchone()[0]
            cur.execute(
                "SELECT source_type, COUNT(*) FROM catalog_entries GROUP BY source_type"
            )
            by_source = dict(cur.fetchall())
            cur.execute(
                """
                SELECT d.slug, COUNT(e.id)
                FROM domains d LEFT JOIN catalog_entries e ON e.domain_id = d.id
                GROUP BY d.slug
                """
            )
            by_domain = dict(cur.fetchall())
            return {
                "entries": total,
                "activeEntries": active,
                "domains": domains,
                "bySource": by_source,
                "byDomain": by_domain,
            }

        return self._transaction("reading catalog stats", operation)

    def get_entry_count(self) -> int:
        """Get the total number of catalog entries in the database."""
        return self.get_stats()["entries"]
