"""Paginated, rate-paced fetching of GitHub candidates per domain."""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from project_hub.domain.repository import CandidateRepository
from project_hub.infrastructure.github_client import FetchError, GitHubSearchClient

logger = logging.getLogger(__name__)


@dataclass
class FetchReport:
    """Candidates gathered by a fetch session plus the pages that failed."""

    candidates: List[CandidateRepository] = field(default_factory=list)
    errors: List[FetchError] = field(default_factory=list)
    pages_fetched: int = 0

    def extend(self, other: "FetchReport") -> None:
        self.candidates.extend(other.candidates)
        self.errors.extend(other.errors)
        self.pages_fetched += other.pages_fetched


class SourceFetcher:
    """Runs search queries page by page with fixed delays between requests."""

    # Application-style queries per domain; search sorts by stars descending
    DOMAIN_QUERIES: Dict[str, List[str]] = {
        "web-development": [
            "e-commerce shop application stars:>30",
            "online store marketplace stars:>30",
            "blogging platform cms stars:>30",
            "social network application stars:>30",
            "real-time chat app stars:>30",
            "video streaming platform stars:>30",
            "task management application stars:>30",
            "kanban board application stars:>30",
            "invoice billing application stars:>30",
            "crm customer management system stars:>30",
            "booking reservation system stars:>30",
            "appointment scheduling application stars:>30",
            "restaurant food ordering application stars:>30",
            "real estate property listing platform stars:>30",
            "online learning platform lms stars:>30",
            "fitness workout tracker application stars:>30",
            "expense tracker budgeting app stars:>30",
            "portfolio website builder stars:>30",
            "note taking application stars:>30",
            "job board platform stars:>30",
        ],
        "artificial-intelligence": [
            "chatbot conversational-ai stars:>100",
            "computer vision application stars:>100",
            "image generation ai stars:>100",
            "speech recognition transcription stars:>100",
            "recommendation system stars:>100",
            "sentiment analysis nlp stars:>100",
            "document processing ocr stars:>100",
            "face recognition facial stars:>100",
            "object detection yolo stars:>100",
            "text summarization nlp stars:>100",
            "ai assistant virtual stars:>100",
            "voice assistant speech stars:>100",
        ],
        "machine-learning": [
            "fraud detection machine-learning stars:>100",
            "churn prediction customer stars:>100",
            "recommendation engine ml stars:>100",
            "demand forecasting ml stars:>100",
            "credit scoring risk stars:>100",
            "defect detection quality control stars:>100",
            "predictive maintenance iot stars:>100",
            "time series forecasting stars:>100",
            "customer segmentation clustering stars:>100",
            "medical diagnosis prediction stars:>100",
        ],
        "data-science": [
            "analytics dashboard visualization stars:>50",
            "business intelligence bi stars:>50",
            "reporting analytics system stars:>50",
            "metrics monitoring dashboard stars:>50",
            "ab testing experimentation stars:>50",
            "web analytics tracking stars:>50",
            "financial analytics portfolio stars:>50",
            "data pipeline etl stars:>50",
            "log analysis monitoring stars:>50",
            "kpi tracking dashboard stars:>50",
            "real-time analytics streaming stars:>50",
        ],
        "cybersecurity": [
            "security scanner vulnerability stars:>100",
            "intrusion detection ids stars:>100",
            "firewall security network stars:>100",
            "authentication sso identity stars:>100",
            "malware analysis detection stars:>100",
            "penetration testing security stars:>100",
            "threat intelligence security stars:>100",
            "security monitoring siem stars:>100",
            "password manager vault stars:>100",
            "security audit compliance stars:>100",
        ],
    }

    def __init__(
        self,
        github_client: GitHubSearchClient,
        per_page: int = 100,
        max_pages_per_query: int = 3,
        page_delay: float = 1.0,
        query_delay: float = 1.5,
        sleep=time.sleep,
    ):
        """
        Initialize source fetcher.

        Args:
            github_client: GitHub search client
            per_page: Repositories requested per page
            max_pages_per_query: Pages fetched per query at most
            page_delay: Seconds to wait between page requests
            query_delay: Seconds to wait between distinct queries
            sleep: Sleep function, replaceable in tests
        """
        self.github_client = github_client
        self.per_page = per_page
        self.max_pages_per_query = max_pages_per_query
        self.page_delay = page_delay
        self.query_delay = query_delay
        self.sleep = sleep

    def queries_for(self, domain_slug: str) -> List[str]:
        return self.DOMAIN_QUERIES.get(domain_slug, [])

    def fetch_query(self, query: str, budget: Optional[int] = None) -> FetchReport:
        """
        Fetch up to ``max_pages_per_query`` pages for one query.

        A failed or empty page ends the query; the failure is recorded in the
        report, never raised.
        """
        report = FetchReport()
        page_size = min(self.per_page, GitHubSearchClient.MAX_PER_PAGE)

        for page in range(1, self.max_pages_per_query + 1):
            if page > 1:
                self.sleep(self.page_delay)

            result = self.github_client.search_repositories(query, page=page, per_page=self.per_page)
            if not result.ok:
                report.errors.append(result.error)
                break

            report.pages_fetched += 1
            report.candidates.extend(result.repositories)

            if len(result.repositories) < page_size:
                break
            if budget is not None and len(report.candidates) >= budget:
                break

        return report

    def fetch(self, queries: List[str], budget: Optional[int] = None) -> FetchReport:
        """
        Run queries sequentially, stopping once ``budget`` candidates are collected.

        A rate-limited query ends the fetch, since later queries would fail too.

        Args:
            queries: Search queries in priority order
            budget: Maximum number of raw candidates to gather (None for no limit)

        Returns:
            Aggregated fetch report
        """
        report = FetchReport()

        for index, query in enumerate(queries):
            if budget is not None and len(report.candidates) >= budget:
                break
            if index > 0:
                self.sleep(self.query_delay)

            logger.info(f"Searching: \"{query}\"...")
            remaining = None if budget is None else budget - len(report.candidates)
            query_report = self.fetch_query(query, budget=remaining)
            report.extend(query_report)
            if any(error.rate_limited for error in query_report.errors):
                logger.warning(f"Rate limited on \"{query}\", skipping {len(queries) - index - 1} remaining queries")
                break

        if report.errors:
            logger.warning(f"{len(report.errors)} page request(s) failed during fetch")
        logger.info(
            f"Fetched {len(report.candidates)} candidates from {report.pages_fetched} page(s)"
        )
        return report

    def fetch_domain(self, domain_slug: str, budget: Optional[int] = None) -> FetchReport:
        """Fetch candidates for every query mapped to a domain."""
        queries = self.queries_for(domain_slug)
        if not queries:
            logger.warning(f"No search queries mapped for domain: {domain_slug}")
            return FetchReport()
        return self.fetch(queries, budget=budget)
