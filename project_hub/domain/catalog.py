"""Domain entities for the persisted project catalog."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_RANK[self]


_DIFFICULTY_RANK = {Difficulty.EASY: 0, Difficulty.MEDIUM: 1, Difficulty.HARD: 2}


class ReviewStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    NEEDS_REWORK = "NEEDS_REWORK"


@dataclass(frozen=True)
class Domain:
    """Top-level subject category partitioning the catalog."""

    id: str
    name: str
    slug: str

    @property
    def description(self) -> str:
        return f"{self.name} - Real-world industry projects from GitHub"


WEB_DEVELOPMENT = Domain(id="web-dev", name="Web Development", slug="web-development")
ARTIFICIAL_INTELLIGENCE = Domain(id="ai", name="Artificial Intelligence", slug="artificial-intelligence")
MACHINE_LEARNING = Domain(id="ml", name="Machine Learning", slug="machine-learning")
DATA_SCIENCE = Domain(id="data-science", name="Data Science", slug="data-science")
CYBERSECURITY = Domain(id="cyber", name="Cybersecurity", slug="cybersecurity")

DOMAINS: List[Domain] = [
    WEB_DEVELOPMENT,
    ARTIFICIAL_INTELLIGENCE,
    MACHINE_LEARNING,
    DATA_SCIENCE,
    CYBERSECURITY,
]


def domain_by_slug(slug: str) -> Domain:
    for domain in DOMAINS:
        if domain.slug == slug:
            return domain
    raise KeyError(f"Unknown domain: {slug}")


@dataclass
class CatalogEntry:
    """A persisted, user-facing project listing."""

    title: str
    description: str
    source_url: str
    domain_id: str
    difficulty: Difficulty
    base_name: str
    source_type: str = "github"
    source_id: Optional[str] = None
    slug: Optional[str] = None
    repo_owner: Optional[str] = None
    repo_name: Optional[str] = None
    default_branch: str = "main"
    download_url: str = ""
    live_url: Optional[str] = None
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    tech_stack: List[str] = field(default_factory=list)
    technical_skills: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    sub_domain: Optional[str] = None
    case_study: Optional[str] = None
    problem_statement: Optional[str] = None
    solution_description: Optional[str] = None
    prerequisites_text: Optional[str] = None
    deliverables: List[str] = field(default_factory=list)
    supposed_deadline: Optional[str] = None
    estimated_min_time: int = 10
    estimated_max_time: int = 40
    introduction: Optional[str] = None
    author: str = "Project Hub"
    is_active: bool = True
    # Owned by other subsystems; the scraper only initializes them
    download_count: int = 0
    like_count: int = 0
    qa_status: ReviewStatus = ReviewStatus.PENDING
    qa_feedback: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    last_updated: Optional[datetime] = None
