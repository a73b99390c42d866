#!/usr/bin/env python3
"""Script to dump the project catalog to CSV and JSON."""

import logging
import sys
import os
import csv
import json
from datetime import datetime
from typing import Any, Dict, List

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import psycopg2
from psycopg2.extras import RealDictCursor

from project_hub.config import Settings, configure_logging

logger = logging.getLogger(__name__)

CATALOG_QUERY = """
    SELECT e.id, e.title, e.slug, d.slug AS domain, e.source_type, e.source_url,
           e.live_url, e.download_url, e.difficulty, e.stars, e.forks, e.language,
           e.tech_stack, e.technical_skills, e.topics, e.supposed_deadline,
           e.estimated_min_time, e.estimated_max_time, e.qa_status, e.is_active,
           e.last_updated, e.created_at, e.updated_at
    FROM catalog_entries e
    JOIN domains d ON d.id = e.domain_id
    ORDER BY d.slug, e.stars DESC
"""


def get_db_connection(settings: Settings):
    """Get database connection."""
    return psycopg2.connect(settings.postgres_dsn)


def fetch_catalog(settings: Settings) -> List[Dict[str, Any]]:
    """Read every catalog entry with its domain slug."""
    conn = get_db_connection(settings)
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(CATALOG_QUERY)
            return [dict(row) for row in cur.fetchall()]
    finally:
        conn.close()


def _serializable(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in row.items()
    }


def dump_to_csv(rows: List[Dict[str, Any]], output_file: str):
    """Dump catalog rows to CSV; array columns are joined with semicolons."""
    with open(output_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=rows[0].keys())
        writer.writeheader()
        for row in rows:
            writer.writerow({
                key: "; ".join(value) if isinstance(value, list) else value
                for key, value in row.items()
            })

    logger.info(f"Dumped {len(rows)} catalog entries to {output_file}")


def dump_to_json(rows: List[Dict[str, Any]], output_file: str):
    """Dump catalog rows to JSON."""
    data = [_serializable(row) for row in rows]
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Dumped {len(data)} catalog entries to {output_file}")


def main():
    """Dump catalog to CSV and JSON."""
    settings = Settings.from_env()
    configure_logging(settings)
    try:
        rows = fetch_catalog(settings)
        if not rows:
            logger.warning("No data to dump")
            return 0

        output_dir = os.getenv("OUTPUT_DIR", "artifacts")
        os.makedirs(output_dir, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        csv_file = os.path.join(output_dir, f"catalog_{timestamp}.csv")
        json_file = os.path.join(output_dir, f"catalog_{timestamp}.json")

        dump_to_csv(rows, csv_file)
        dump_to_json(rows, json_file)

        logger.info(f"Catalog dump completed. Files: {csv_file}, {json_file}")
        return 0
    except Exception as e:
        logger.error(f"Catalog dump failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
