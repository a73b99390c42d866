"""GitHub REST search client returning explicit per-page results."""

import time
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
import requests

from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchError:
    """Transport or rate-limit failure of a single page request."""

    query: str
    page: int
    message: str
    status_code: Optional[int] = None

    @property
    def rate_limited(self) -> bool:
        return self.status_code in (403, 429)


@dataclass
class PageResult:
    """Either the repositories of one search page or the error that prevented it."""

    query: str
    page: int
    repositories: List[CandidateRepository] = field(default_factory=list)
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GitHubSearchClient:
    """Client for the GitHub repository search API."""

    # Search allows 30 requests per minute authenticated, 10 unauthenticated;
    # pacing between requests is the caller's job (see SourceFetcher)

    API_URL = "https://api.github.com"
    MAX_RETRIES = 3
    RETRY_DELAY_SECONDS = 2
    MAX_PER_PAGE = 100
    USER_AGENT = "Project-Hub-Scraper"

    def __init__(
        self,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
        sleep=time.sleep,
    ):
        """
        Initialize GitHub search client.

        Args:
            token: GitHub personal access token. If None, uses GITHUB_TOKEN env var.
            session: HTTP session to reuse; a new one is created if omitted
            timeout: Per-request timeout in seconds
            sleep: Sleep function used between retries
        """
        if token is None:
            token = os.getenv("GITHUB_TOKEN")

        self.token = token
        self.timeout = timeout
        self.sleep = sleep
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.USER_AGENT,
        }

        if self.token:
            self.headers["Authorization"] = f"token {self.token}"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """
        Issue a GET request, retrying transport errors with a fixed delay.

        Raises:
            requests.RequestException: If the request still fails after retries
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                return self.session.get(
                    f"{self.API_URL}{path}",
                    params=params,
                    headers={**self.headers, **(headers or {})},
                    timeout=self.timeout,
                )
            except requests.exceptions.RequestException as e:
                if attempt < self.MAX_RETRIES - 1:
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}. "
                        f"Retrying in {self.RETRY_DELAY_SECONDS}s..."
                    )
                    self.sleep(self.RETRY_DELAY_SECONDS)
                else:
                    raise

        raise requests.exceptions.RetryError("Max retries exceeded")

    def search_repositories(self, query: str, page: int = 1, per_page: int = 100) -> PageResult:
        """
        Fetch one page of repositories matching a search query, most stars first.

        Never raises for transport or API failures; the failure is logged and
        returned as ``PageResult.error`` so callers can move on to the next query.

        Args:
            query: GitHub search query string (e.g., "booking system stars:>30")
            page: 1-based page number
            per_page: Page size (max 100)

        Returns:
            Page result
        """
        params = {
            "q": query,
            "sort": "stars",
            "order": "desc",
            "per_page": min(per_page, self.MAX_PER_PAGE),
            "page": page,
        }

        try:
            response = self._get("/search/repositories", params=params)
        except requests.exceptions.RequestException as e:
            return self._failed(query, page, f"transport error: {e}")

        if response.status_code == 200:
            try:
                items = response.json().get("items", [])
                repositories = [CandidateRepository.from_github(item) for item in items]
            except (ValueError, KeyError, TypeError) as e:
                return self._failed(query, page, f"malformed response: {e}", response.status_code)
            return PageResult(query=query, page=page, repositories=repositories)

        if response.status_code == 401:
            return self._failed(query, page, "authentication failed, check GITHUB_TOKEN", 401)

        if response.status_code in (403, 429):
            remaining = response.headers.get("X-RateLimit-Remaining")
            wait_time = _seconds_until_reset(response.headers.get("X-RateLimit-Reset"))
            return self._failed(
                query,
                page,
                f"rate limited (remaining={remaining}, resets in {wait_time}s)",
                response.status_code,
            )

        # Search only exposes the first 1000 results; deeper pages answer 422
        return self._failed(query, page, f"HTTP {response.status_code}: {response.text[:200]}", response.status_code)

    def get_readme(self, owner: str, repo: str) -> Optional[str]:
        """
        Fetch the raw README of a repository.

        Returns:
            README text, or None if it is missing or cannot be fetched
        """
        try:
            response = self._get(
                f"/repos/{owner}/{repo}/readme",
                headers={"Accept": "application/vnd.github.raw+json"},
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Failed to fetch README for {owner}/{repo}: {e}")
            return None

        if response.status_code != 200:
            return None
        return response.text

    def _failed(self, query: str, page: int, message: str, status_code: Optional[int] = None) -> PageResult:
        error = FetchError(query=query, page=page, message=message, status_code=status_code)
        logger.warning(f"GitHub search failed for '{query}' page {page}: {message}")
        return PageResult(query=query, page=page, error=error)


def _seconds_until_reset(header: Optional[str]) -> int:
    try:
        reset_time = int(header or 0)
    except ValueError:
        return 0
    return max(reset_time - int(time.time()), 0)
