"""Application service running the scraping pipeline end to end."""

import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from project_hub.application.catalog_writer import CatalogWriter, build_entry
from project_hub.application.classifier import Classifier
from project_hub.application.deduplicator import Deduplicator
from project_hub.application.live_url import LiveUrlResolver, download_url
from project_hub.application.source_fetcher import FetchReport, SourceFetcher
from project_hub.application.synthesizer import ContentSynthesizer
from project_hub.domain.catalog import DOMAINS, CatalogEntry, Domain, domain_by_slug
from project_hub.domain.repository import CandidateRepository
from project_hub.domain.run import RunPhase, RunResult
from project_hub.infrastructure.curated_sources import CURATED_SOURCES, CuratedSources

logger = logging.getLogger(__name__)

SOURCES = ("github",) + CURATED_SOURCES

PhaseCallback = Callable[[RunPhase], None]


def _no_phase(phase: RunPhase) -> None:
    pass


class ScrapingService:
    """Fetches, classifies, deduplicates, synthesizes and persists catalog entries."""

    # Raw candidates fetched per domain for every entry we want to keep
    FETCH_BUDGET_FACTOR = 10

    def __init__(
        self,
        fetcher: SourceFetcher,
        classifier: Classifier,
        synthesizer: ContentSynthesizer,
        writer: CatalogWriter,
        live_urls: Optional[LiveUrlResolver] = None,
        curated: Optional[CuratedSources] = None,
        target_per_domain: int = 200,
        domains: Sequence[Domain] = DOMAINS,
    ):
        """
        Initialize scraping service.

        Args:
            fetcher: GitHub source fetcher
            classifier: Repository classifier
            synthesizer: Narrative content synthesizer
            writer: Catalog writer
            live_urls: Live URL resolver; homepage-only when omitted
            curated: Curated (non-GitHub) sources
            target_per_domain: Maximum entries kept per domain on a GitHub run
            domains: Domains to fill on a GitHub run
        """
        self.fetcher = fetcher
        self.classifier = classifier
        self.synthesizer = synthesizer
        self.writer = writer
        self.live_urls = live_urls or LiveUrlResolver()
        self.curated = curated or CuratedSources()
        self.target_per_domain = target_per_domain
        self.domains = list(domains)
        # Held from dedupe to write so each run sees the others' committed entries
        self._catalog_lock = threading.Lock()

    def run(self, source: Optional[str] = None, on_phase: PhaseCallback = _no_phase) -> RunResult:
        """
        Run the pipeline for one source, or for all of them when source is None or "all".

        Raises:
            ValueError: If the source is unknown
        """
        if source in (None, "all"):
            return self.run_all(on_phase)
        if source == "github":
            return self.run_github(on_phase)
        if source in CURATED_SOURCES:
            return self.run_curated(source, on_phase)
        raise ValueError(f"Unknown source: {source}")

    def run_github(self, on_phase: PhaseCallback = _no_phase) -> RunResult:
        """
        Re-seed every domain from GitHub search.

        Each domain's GitHub entries are replaced as a whole. A domain whose
        fetch produced nothing but errors is left untouched. Base names already
        stored by curated sources are taken, so matching repositories are skipped.
        """
        logger.info(f"Starting GitHub scrape for {len(self.domains)} domains")

        on_phase(RunPhase.FETCHING)
        self.writer.ensure_domains()
        budget = self.target_per_domain * self.FETCH_BUDGET_FACTOR
        reports: Dict[str, FetchReport] = {}
        for domain in self.domains:
            logger.info(f"Scraping {domain.name}...")
            reports[domain.slug] = self.fetcher.fetch_domain(domain.slug, budget=budget)

        with self._catalog_lock:
            on_phase(RunPhase.CLASSIFYING)
            _, curated_names = self.writer.existing_keys(exclude_source_type="github")
            deduplicator = Deduplicator(seen_names=curated_names)
            selected: Dict[str, List[CandidateRepository]] = {}
            for domain in self.domains:
                selected[domain.slug] = self._select(domain, reports[domain.slug].candidates, deduplicator)

            on_phase(RunPhase.SYNTHESIZING)
            entries: Dict[str, List[CatalogEntry]] = {
                domain.slug: [self._github_entry(c, domain) for c in selected[domain.slug]]
                for domain in self.domains
            }

            on_phase(RunPhase.WRITING)
            saved = 0
            for domain in self.domains:
                report = reports[domain.slug]
                if not report.candidates and report.errors:
                    logger.warning(f"Skipping {domain.name}: every request failed, keeping existing entries")
                    continue
                saved += self.writer.replace_domain(domain, entries[domain.slug])

        total = sum(len(e) for e in entries.values())
        logger.info(f"GitHub scrape completed: {saved}/{total} projects saved")
        return RunResult(source="github", total=total, saved=saved)

    def _select(
        self,
        domain: Domain,
        candidates: List[CandidateRepository],
        deduplicator: Deduplicator,
    ) -> List[CandidateRepository]:
        """Classify then deduplicate candidates, keeping at most target_per_domain."""
        kept: List[CandidateRepository] = []
        excluded: Counter = Counter()
        duplicates = 0

        for candidate in candidates:
            if len(kept) >= self.target_per_domain:
                break
            decision = self.classifier.classify(candidate)
            if not decision.included:
                excluded[decision.reason.value] += 1
                continue
            if not deduplicator.accept(candidate):
                duplicates += 1
                continue
            kept.append(candidate)

        logger.info(
            f"{domain.name}: kept {len(kept)} of {len(candidates)} candidates "
            f"({sum(excluded.values())} excluded, {duplicates} duplicates)"
        )
        if excluded:
            logger.debug(f"{domain.name} exclusions: {dict(excluded)}")
        return kept

    def _github_entry(self, candidate: CandidateRepository, domain: Domain) -> CatalogEntry:
        difficulty = self.classifier.difficulty(candidate)
        content = self.synthesizer.synthesize(candidate, domain.name, difficulty)
        return build_entry(
            candidate,
            content,
            domain,
            difficulty,
            live_url=self.live_urls.resolve(candidate),
            download_url=download_url(candidate),
        )

    def run_curated(self, source: str, on_phase: PhaseCallback = _no_phase) -> RunResult:
        """
        Add projects from a curated source through the incremental path.

        Known source URLs are refreshed in place; a new URL whose base name is
        already in the catalog is skipped as a duplicate.
        """
        on_phase(RunPhase.FETCHING)
        projects = self.curated.fetch(source)

        with self._catalog_lock:
            on_phase(RunPhase.CLASSIFYING)
            known_urls, known_names = self.writer.existing_keys()
            deduplicator = Deduplicator(seen_names=known_names)
            accepted = []
            for project in projects:
                candidate = project.to_candidate()
                if candidate.url in known_urls or deduplicator.accept(candidate):
                    accepted.append((project, candidate))
                else:
                    logger.info(f"Skipping duplicate {source} project: {project.title}")

            on_phase(RunPhase.SYNTHESIZING)
            entries = []
            for project, candidate in accepted:
                domain = domain_by_slug(project.domain_slug)
                content = self.synthesizer.synthesize(candidate, domain.name, project.difficulty)
                entries.append(build_entry(
                    candidate,
                    content,
                    domain,
                    project.difficulty,
                    live_url=project.url,
                    title=project.title,
                    supposed_deadline=project.supposed_deadline,
                ))

            on_phase(RunPhase.WRITING)
            saved = self.writer.upsert(entries)
        logger.info(f"{source} scrape completed: {saved}/{len(projects)} projects saved")
        return RunResult(source=source, total=len(projects), saved=saved)

    def run_all(self, on_phase: PhaseCallback = _no_phase) -> RunResult:
        """
        Run every source concurrently and sum their results.

        Phase changes are reported for the GitHub run only, which dominates the
        duration. Fetching overlaps; deduplication and writing take turns under
        the catalog lock. The first failure is re-raised once all sources finished.
        """
        logger.info("Starting comprehensive scraping of all sources")

        with ThreadPoolExecutor(max_workers=len(SOURCES), thread_name_prefix="scrape") as executor:
            futures = {
                "github": executor.submit(self.run_github, on_phase),
                **{source: executor.submit(self.run_curated, source) for source in CURATED_SOURCES},
            }

        results: List[RunResult] = []
        failures = []
        for source, future in futures.items():
            error = future.exception()
            if error is not None:
                logger.error(f"Scraping {source} failed: {error}")
                failures.append(error)
            else:
                results.append(future.result())

        if failures:
            raise failures[0]

        total = sum(r.total for r in results)
        saved = sum(r.saved for r in results)
        logger.info(f"Comprehensive scraping completed: {saved}/{total} projects saved")
        return RunResult(source="all", total=total, saved=saved)
