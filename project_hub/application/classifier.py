"""Heuristic classification of candidate repositories."""

import logging
import re
from typing import Optional, Sequence

from project_hub.domain.catalog import Difficulty
from project_hub.domain.classification import ClassificationDecision, ExclusionReason
from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)


# Markers of libraries, frameworks, dev tooling and learning material
EXCLUSION_KEYWORDS = [
    # Libraries & frameworks
    "library", "framework", "plugin", "sdk", "api-wrapper", "package", "module",
    "component-library", "ui-library", "react-component", "vue-component",
    "angular-module", ".js", "-js",

    # Dev tools
    "boilerplate", "template", "starter", "cli-tool", "command-line",
    "generator", "scaffolding", "toolkit", "build-tool", "bundler",
    "webpack-", "vite-", "babel-", "eslint-", "prettier-",

    # Learning material
    "tutorial", "example", "demo", "course-material", "workshop", "exercises",
    "practice", "lessons", "learning-resources", "awesome-", "awesome list",
    "curated", "cheatsheet", "cheat-sheet", "handbook", "snippets", "cookbook",

    # Documentation & books
    "documentation", "ebook", "e-book", "dotfiles",

    # Testing helpers
    "mock", "faker", "test-utils", "testing-library",

    # Generic helper repos
    "utils", "helpers", "utilities", "lodash", "jquery",
]

LIBRARY_NAME_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^[a-z]+-utils$",
        r"^[a-z]+-helper$",
        r"^[a-z]+-lib$",
        r"^lib-[a-z]+$",
        r"^react-[a-z]+-component$",
        r"^vue-[a-z]+-component$",
        r"^[a-z]+\.js$",
        r"^js-[a-z]+$",
        r"^[a-z]+-plugin$",
        r"^[a-z]+-package$",
        r"^awesome-",
        r"^learning-",
        r"^tutorial-",
        r"^example-",
        r"^demo-",
        r"-template$",
        r"-starter$",
        r"-boilerplate$",
        r"-examples?$",
        r"-samples?$",
        r"-demo$",
        r"-tutorial$",
    )
]

LIBRARY_DESCRIPTION_PHRASES = [
    "javascript library", "js library", "ui library", "component library",
    "utility library", "is a library", "is a framework", "is a plugin",
    "is a package", "is a tool", "is a cli", "is a boilerplate",
    "is a template", "is a starter", "collection of", "curated list",
    "awesome list", "learning resources", "tutorial series", "code examples",
    "sample projects",
]

APPLICATION_KEYWORDS = [
    "platform", "application", "app", "system", "service", "portal",
    "dashboard", "management", "crm", "cms", "erp", "saas", "marketplace",
    "e-commerce", "social-network", "chat", "messenger", "streaming", "blog",
    "forum", "analytics", "monitoring", "automation", "scheduling", "booking",
    "reservation", "inventory", "tracking", "reporting", "billing",
]

PRODUCTION_KEYWORDS = [
    "production", "deployed", "live", "software", "product", "solution",
    "website", "web", "tracker", "detector", "scanner", "assistant",
]

MIN_DESCRIPTION_LENGTH = 15
DEFAULT_MIN_STARS = 30
DEFAULT_MEDIUM_THRESHOLD = 500
DEFAULT_HARD_THRESHOLD = 5000


def difficulty_for_stars(
    stars: int,
    medium_threshold: int = DEFAULT_MEDIUM_THRESHOLD,
    hard_threshold: int = DEFAULT_HARD_THRESHOLD,
) -> Difficulty:
    """
    Map a star count to a difficulty tier.

    Args:
        stars: Repository star count
        medium_threshold: Star count that must be exceeded for MEDIUM
        hard_threshold: Star count that must be exceeded for HARD

    Returns:
        Difficulty tier, monotone in ``stars``
    """
    if stars > hard_threshold:
        return Difficulty.HARD
    if stars > medium_threshold:
        return Difficulty.MEDIUM
    return Difficulty.EASY


def _first_match(text: str, keywords: Sequence[str]) -> Optional[str]:
    for keyword in keywords:
        if keyword in text:
            return keyword
    return None


class Classifier:
    """Decides whether a candidate is a real application worth cataloging."""

    def __init__(
        self,
        min_stars: int = DEFAULT_MIN_STARS,
        medium_threshold: int = DEFAULT_MEDIUM_THRESHOLD,
        hard_threshold: int = DEFAULT_HARD_THRESHOLD,
        exclusion_keywords: Sequence[str] = EXCLUSION_KEYWORDS,
        application_keywords: Sequence[str] = APPLICATION_KEYWORDS,
        production_keywords: Sequence[str] = PRODUCTION_KEYWORDS,
    ):
        """
        Initialize classifier.

        Args:
            min_stars: Minimum star count a candidate needs to be included
            medium_threshold: Star threshold for MEDIUM difficulty
            hard_threshold: Star threshold for HARD difficulty
            exclusion_keywords: Keywords marking libraries, tools and tutorials
            application_keywords: Vocabulary of real applications
            production_keywords: Vocabulary of deployed products
        """
        if medium_threshold >= hard_threshold:
            raise ValueError("medium_threshold must be lower than hard_threshold")

        self.min_stars = min_stars
        self.medium_threshold = medium_threshold
        self.hard_threshold = hard_threshold
        self.exclusion_keywords = [k.lower() for k in exclusion_keywords]
        self.application_keywords = [k.lower() for k in application_keywords]
        self.production_keywords = [k.lower() for k in production_keywords]

    def classify(
        self,
        candidate: CandidateRepository,
        min_stars: Optional[int] = None,
    ) -> ClassificationDecision:
        """
        Classify a candidate; the first exclusion rule that fires wins.

        Args:
            candidate: Repository to classify
            min_stars: Overrides the configured star minimum for this call

        Returns:
            Classification decision with the reason of an exclusion
        """
        decision = self._classify(candidate, self.min_stars if min_stars is None else min_stars)
        if not decision.included:
            logger.debug(f"{candidate.full_name}: {decision}")
        return decision

    def _classify(self, candidate: CandidateRepository, min_stars: int) -> ClassificationDecision:
        text = candidate.search_text

        keyword = _first_match(text, self.exclusion_keywords)
        if keyword:
            return ClassificationDecision.exclude(ExclusionReason.EXCLUDED_KEYWORD, keyword)

        if candidate.archived or candidate.disabled:
            return ClassificationDecision.exclude(ExclusionReason.ARCHIVED)

        for pattern in LIBRARY_NAME_PATTERNS:
            if pattern.search(candidate.name):
                return ClassificationDecision.exclude(ExclusionReason.LIBRARY_NAME, pattern.pattern)

        description = (candidate.description or "").strip()
        phrase = _first_match(description.lower(), LIBRARY_DESCRIPTION_PHRASES)
        if phrase:
            return ClassificationDecision.exclude(ExclusionReason.LIBRARY_DESCRIPTION, phrase)

        if len(description) < MIN_DESCRIPTION_LENGTH:
            return ClassificationDecision.exclude(ExclusionReason.MISSING_DESCRIPTION)

        if candidate.stars < min_stars:
            return ClassificationDecision.exclude(
                ExclusionReason.INSUFFICIENT_STARS, f"{candidate.stars} < {min_stars}"
            )

        if not (_first_match(text, self.application_keywords) or _first_match(text, self.production_keywords)):
            return ClassificationDecision.exclude(ExclusionReason.NO_APPLICATION_SIGNAL)

        return ClassificationDecision.include()

    def difficulty(self, candidate: CandidateRepository) -> Difficulty:
        """Difficulty tier of a candidate from its star count."""
        return difficulty_for_stars(candidate.stars, self.medium_threshold, self.hard_threshold)
