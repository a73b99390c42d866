from unittest.mock import MagicMock, call

import pytest

from project_hub.application.source_fetcher import SourceFetcher
from project_hub.infrastructure.github_client import FetchError, GitHubSearchClient, PageResult


class StubClient:
    """Serves scripted pages per (query, page)."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def search_repositories(self, query, page=1, per_page=100):
        self.calls.append((query, page))
        outcome = self.pages.get((query, page), [])
        if isinstance(outcome, FetchError):
            return PageResult(query=query, page=page, error=outcome)
        return PageResult(query=query, page=page, repositories=outcome)


@pytest.fixture
def candidates(make_candidate):
    def build(count, prefix):
        return [make_candidate(name=f"{prefix}-{i}") for i in range(count)]
    return build


def make_fetcher(client, **kwargs):
    options = dict(per_page=2, max_pages_per_query=3, page_delay=1.0, query_delay=1.5, sleep=MagicMock())
    options.update(kwargs)
    return SourceFetcher(client, **options)


def test_short_page_ends_query(candidates):
    client = StubClient({("q1", 1): candidates(2, "a"), ("q1", 2): candidates(1, "b")})
    fetcher = make_fetcher(client)

    report = fetcher.fetch_query("q1")

    assert len(report.candidates) == 3
    assert report.pages_fetched == 2
    assert client.calls == [("q1", 1), ("q1", 2)]
    fetcher.sleep.assert_called_once_with(1.0)


def test_failed_page_is_recorded_and_ends_query(candidates):
    error = FetchError(query="q1", page=2, message="rate limited", status_code=403)
    client = StubClient({("q1", 1): candidates(2, "a"), ("q1", 2): error})

    report = make_fetcher(client).fetch_query("q1")

    assert len(report.candidates) == 2
    assert report.errors == [error]
    assert client.calls == [("q1", 1), ("q1", 2)]


def test_query_delay_between_queries(candidates):
    client = StubClient({("q1", 1): candidates(1, "a"), ("q2", 1): candidates(1, "b")})
    fetcher = make_fetcher(client)

    report = fetcher.fetch(["q1", "q2"])

    assert len(report.candidates) == 2
    assert fetcher.sleep.call_args_list == [call(1.5)]


def test_failures_do_not_stop_later_queries(candidates):
    error = FetchError(query="q1", page=1, message="HTTP 500")
    client = StubClient({("q1", 1): error, ("q2", 1): candidates(1, "b")})

    report = make_fetcher(client).fetch(["q1", "q2"])

    assert len(report.candidates) == 1
    assert len(report.errors) == 1


def test_budget_stops_fetching(candidates):
    client = StubClient({
        ("q1", 1): candidates(2, "a"),
        ("q1", 2): candidates(2, "b"),
        ("q2", 1): candidates(2, "c"),
    })

    report = make_fetcher(client).fetch(["q1", "q2"], budget=2)

    assert len(report.candidates) == 2
    assert client.calls == [("q1", 1)]


def test_unknown_domain_fetches_nothing():
    client = StubClient({})
    report = make_fetcher(client).fetch_domain("underwater-basket-weaving")

    assert report.candidates == []
    assert client.calls == []


def test_every_domain_has_queries():
    from project_hub.domain.catalog import DOMAINS

    for domain in DOMAINS:
        assert SourceFetcher.DOMAIN_QUERIES[domain.slug]


def test_rate_limit_skips_remaining_queries(candidates):
    error = FetchError(query="q1", page=1, message="rate limited", status_code=403)
    client = StubClient({("q1", 1): error, ("q2", 1): candidates(1, "b")})

    report = make_fetcher(client).fetch(["q1", "q2"])

    assert report.errors == [error]
    assert report.candidates == []
    assert client.calls == [("q1", 1)]


def test_page_size_above_api_maximum_keeps_paging(make_candidate):
    full_page = [make_candidate(name=f"app-{i}") for i in range(GitHubSearchClient.MAX_PER_PAGE)]
    client = StubClient({("q1", 1): full_page, ("q1", 2): full_page[:1]})

    report = make_fetcher(client, per_page=250).fetch_query("q1")

    assert client.calls == [("q1", 1), ("q1", 2)]
    assert len(report.candidates) == GitHubSearchClient.MAX_PER_PAGE + 1
