"""Builds catalog entries and writes them through a catalog repository."""

import logging
from typing import List, Optional, Sequence

from project_hub.application.deduplicator import normalize_base_name
from project_hub.application.synthesizer import SynthesizedContent
from project_hub.domain.catalog import DOMAINS, CatalogEntry, Difficulty, Domain
from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)


def build_entry(
    candidate: CandidateRepository,
    content: SynthesizedContent,
    domain: Domain,
    difficulty: Difficulty,
    live_url: Optional[str] = None,
    download_url: str = "",
    title: Optional[str] = None,
    supposed_deadline: Optional[str] = None,
) -> CatalogEntry:
    """
    Combine a candidate and its synthesized narrative into a catalog entry.

    Args:
        candidate: Accepted candidate
        content: Narrative generated for the candidate
        domain: Catalog domain the entry belongs to
        difficulty: Difficulty tier
        live_url: Resolved live URL; defaults to the source URL
        download_url: Source archive URL, empty for non-repository sources
        title: Overrides the title derived from the repository name
        supposed_deadline: Overrides the deadline implied by the difficulty
    """
    return CatalogEntry(
        title=title or content.title,
        slug=f"{candidate.owner}-{candidate.name}".lower(),
        description=candidate.description or content.case_study,
        source_type=candidate.source_type,
        source_id=candidate.id,
        source_url=candidate.url,
        repo_owner=candidate.owner,
        repo_name=candidate.name,
        base_name=normalize_base_name(candidate.name),
        default_branch=candidate.default_branch,
        download_url=download_url,
        live_url=live_url or candidate.url,
        domain_id=domain.id,
        stars=candidate.stars,
        forks=candidate.forks,
        language=candidate.language,
        tech_stack=content.tech_stack,
        technical_skills=content.technical_skills,
        difficulty=difficulty,
        topics=list(candidate.topics),
        sub_domain=content.category_key,
        case_study=content.case_study,
        problem_statement=content.problem_statement,
        solution_description=content.solution_description,
        prerequisites_text=content.prerequisites,
        deliverables=content.deliverables,
        supposed_deadline=supposed_deadline or content.supposed_deadline,
        estimated_min_time=content.estimated_min_time,
        estimated_max_time=content.estimated_max_time,
        introduction=content.introduction,
        last_updated=candidate.updated_at,
    )


class CatalogWriter:
    """Persists catalog entries, making sure their domains exist first."""

    def __init__(self, repository, domains: Sequence[Domain] = DOMAINS):
        """
        Args:
            repository: CatalogRepository or MemoryCatalogRepository
            domains: Domains to upsert before any entry is written
        """
        self.repository = repository
        self.domains = list(domains)

    def ensure_domains(self) -> int:
        count = self.repository.ensure_domains(self.domains)
        logger.info(f"Ensured {count} domains")
        return count

    def replace_domain(self, domain: Domain, entries: List[CatalogEntry]) -> int:
        """
        Replace the GitHub entries of one domain atomically.

        Returns:
            Number of entries written
        """
        self.ensure_domains()
        written = self.repository.replace_domain_entries(domain, entries, source_type="github")
        logger.info(f"Saved {written} projects to {domain.name}")
        return written

    def upsert(self, entries: List[CatalogEntry]) -> int:
        """
        Incrementally write entries keyed by source URL.

        Returns:
            Number of newly inserted entries
        """
        if not entries:
            return 0
        self.ensure_domains()
        return self.repository.upsert_entries(entries)

    def existing_keys(self, exclude_source_type=None):
        """Source URLs and base names already stored, optionally leaving out one source type."""
        return self.repository.existing_keys(exclude_source_type)
