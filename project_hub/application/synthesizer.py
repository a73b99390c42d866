"""Templated narrative content for catalog entries."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from project_hub.domain.catalog import Difficulty
from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_PATH = Path(__file__).with_name("narratives.yaml")

# Topics that say nothing about the technology used
GENERIC_TOPICS = {"awesome", "hacktoberfest", "good-first-issue", "beginner-friendly"}


@dataclass
class SynthesizedContent:
    """Narrative fields generated for one catalog entry."""

    title: str
    category_key: Optional[str]
    case_study: str
    problem_statement: str
    solution_description: str
    tech_stack: List[str]
    prerequisites: str
    deliverables: List[str]
    introduction: str
    supposed_deadline: str
    estimated_min_time: int
    estimated_max_time: int
    technical_skills: List[str] = field(default_factory=list)


def title_from_name(name: str) -> str:
    """``recipe-sharing_app`` -> ``Recipe Sharing App``."""
    words = name.replace("_", "-").split("-")
    return " ".join(w[:1].upper() + w[1:] for w in words if w)


def load_templates(path: Path = DEFAULT_TEMPLATES_PATH) -> Dict[str, Any]:
    """Load the narrative template asset."""
    with open(path, "r", encoding="utf-8") as f:
        templates = yaml.safe_load(f)
    logger.debug(f"Loaded {len(templates['categories'])} narrative categories from {path}")
    return templates


class ContentSynthesizer:
    """
    Generates case study, problem, solution and stack text by keyword lookup.

    Repository names are matched against the category keywords in the order
    the template asset lists them; the first hit wins and unmatched names fall
    back to the category-parameterized default.
    """

    def __init__(self, templates: Optional[Dict[str, Any]] = None):
        self.templates = templates if templates is not None else load_templates()
        self.categories: List[Dict[str, Any]] = self.templates["categories"]

    def match_category(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the first template category whose keyword occurs in the name."""
        project_type = name.lower()
        for category in self.categories:
            if any(keyword in project_type for keyword in category["keywords"]):
                return category
        return None

    def tech_stack(self, candidate: CandidateRepository) -> List[str]:
        """Stack clauses chosen by language, plus clauses implied by the name."""
        stacks = self.templates["tech_stacks"]
        language = candidate.language or stacks["default_language"]
        clauses = stacks["languages"].get(language, stacks["fallback"]).split("; ")

        project_type = candidate.name.lower()
        for addition in stacks["additions"]:
            if any(keyword in project_type for keyword in addition["keywords"]):
                clauses.append(addition["clause"])
        return clauses

    def technical_skills(self, candidate: CandidateRepository) -> List[str]:
        skills = [candidate.language] if candidate.language else []
        relevant = [t for t in candidate.topics if t not in GENERIC_TOPICS][:5]
        return list(dict.fromkeys(skills + relevant))

    def synthesize(
        self,
        candidate: CandidateRepository,
        category: str,
        difficulty: Difficulty,
    ) -> SynthesizedContent:
        """
        Build the narrative fields for a candidate.

        Args:
            candidate: Accepted repository
            category: Human-readable domain name, e.g. "Web Development"
            difficulty: Difficulty tier already assigned to the candidate

        Returns:
            Synthesized content
        """
        title = title_from_name(candidate.name)
        language = candidate.language or self.templates["tech_stacks"]["default_language"]
        values = {
            "category": category,
            "language": language,
            "title": title,
            "full_name": candidate.full_name,
            "stars": f"{candidate.stars:,}",
        }

        matched = self.match_category(candidate.name)
        texts = matched or self.templates["default"]

        min_time = self.templates["estimated_min_hours"][difficulty.value]
        solution = self.templates["solution_intro"].format(**values) + texts["capabilities"].format(**values)

        return SynthesizedContent(
            title=title,
            category_key=matched["key"] if matched else None,
            case_study=texts["case_study"].format(**values),
            problem_statement=texts["problem_statement"].format(**values),
            solution_description=solution,
            tech_stack=self.tech_stack(candidate),
            prerequisites=self.templates["prerequisites"][difficulty.value],
            deliverables=list(self.templates["deliverables"]),
            introduction=self.templates["introduction"].format(**values),
            supposed_deadline=self.templates["deadlines"][difficulty.value],
            estimated_min_time=min_time,
            estimated_max_time=min_time + self.templates["estimated_extra_hours"],
            technical_skills=self.technical_skills(candidate),
        )
