from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from project_hub.domain.catalog import DOMAINS, WEB_DEVELOPMENT, CatalogEntry, Difficulty
from project_hub.infrastructure.database import (
    ENTRY_COLUMNS,
    CatalogRepository,
    PersistenceError,
    entry_row,
)


@pytest.fixture
def repo():
    repository = CatalogRepository("host=localhost dbname=test")
    repository.pool = MagicMock()
    return repository


def connection(repo):
    return repo.pool.getconn.return_value


def cursor(repo):
    return connection(repo).cursor.return_value.__enter__.return_value


def sample_entry():
    return CatalogEntry(
        title="Recipe Sharing App",
        description="Share recipes",
        source_url="https://github.com/alice/recipe-sharing-app",
        domain_id="web-dev",
        difficulty=Difficulty.EASY,
        base_name="recipe-sharing-app",
        tech_stack=["Frontend: React"],
    )


def test_entry_row_matches_columns():
    row = entry_row(sample_entry())

    assert len(row) == len(ENTRY_COLUMNS)
    values = dict(zip(ENTRY_COLUMNS, row))
    assert values["difficulty"] == "EASY"
    assert values["qa_status"] == "PENDING"
    assert values["tech_stack"] == ["Frontend: React"]


def test_ensure_domains_upserts_by_slug(repo):
    with patch("project_hub.infrastructure.database.execute_values") as execute_values:
        assert repo.ensure_domains(DOMAINS) == 5

    sql = execute_values.call_args[0][1]
    assert "ON CONFLICT (slug)" in sql
    connection(repo).commit.assert_called_once()
    repo.pool.putconn.assert_called_once_with(connection(repo))


def test_replace_deletes_and_inserts_in_one_transaction(repo):
    cursor(repo).rowcount = 3
    with patch("project_hub.infrastructure.database.execute_values") as execute_values:
        written = repo.replace_domain_entries(WEB_DEVELOPMENT, [sample_entry()])

    assert written == 1
    cursor(repo).execute.assert_called_once()
    delete_sql, params = cursor(repo).execute.call_args[0]
    assert delete_sql.startswith("DELETE FROM catalog_entries")
    assert params == ("web-dev", "github")
    assert "ON CONFLICT (source_url)" in execute_values.call_args[0][1]
    connection(repo).commit.assert_called_once()


def test_failed_replace_rolls_back(repo):
    cursor(repo).execute.side_effect = psycopg2.OperationalError("server closed the connection")

    with pytest.raises(PersistenceError):
        repo.replace_domain_entries(WEB_DEVELOPMENT, [sample_entry()])

    connection(repo).rollback.assert_called_once()
    connection(repo).commit.assert_not_called()
    repo.pool.putconn.assert_called_once()


def test_upsert_counts_inserted_rows(repo):
    with patch("project_hub.infrastructure.database.execute_values") as execute_values:
        execute_values.return_value = [(True,), (False,), (True,)]
        inserted = repo.upsert_entries([sample_entry()] * 3)

    assert inserted == 2
    assert execute_values.call_args[1]["fetch"] is True


def test_upsert_nothing_skips_database(repo):
    assert repo.upsert_entries([]) == 0
    repo.pool.getconn.assert_not_called()


def test_existing_keys(repo):
    cursor(repo).fetchall.return_value = [("u/a", "a"), ("u/b", "b")]

    assert repo.existing_keys() == ({"u/a", "u/b"}, {"a", "b"})


def test_existing_keys_filters_by_source_type(repo):
    cur = cursor(repo)
    cur.fetchall.return_value = [("kaggle/t", "t")]

    assert repo.existing_keys(exclude_source_type="github") == ({"kaggle/t"}, {"t"})
    sql, params = cur.execute.call_args[0]
    assert "source_type <> %s" in sql
    assert params == ("github",)


def test_connect_failure_raises_persistence_error():
    repo = CatalogRepository("host=nowhere")
    with patch(
        "project_hub.infrastructure.database.ThreadedConnectionPool",
        side_effect=psycopg2.OperationalError("could not connect"),
    ):
        with pytest.raises(PersistenceError):
            repo.connect()
