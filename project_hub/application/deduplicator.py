"""Run-scoped duplicate suppression for candidate repositories."""

import logging
import re
from typing import Iterable, Optional, Set

from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)


# Applied in order to the lowercased name
VERSION_SUFFIX_PATTERNS = [
    re.compile(r"-v\d+$"),
    re.compile(r"_v\d+$"),
    re.compile(r"-version-?\d+$"),
    re.compile(r"-ver-?\d+$"),
]


def normalize_base_name(name: str) -> str:
    """
    Reduce a repository name to its base form.

    ``Chat-App-v2``, ``chat-app_v3`` and ``chat-app-version-1`` all become
    ``chat-app``.
    """
    base = name.strip().lower()
    for pattern in VERSION_SUFFIX_PATTERNS:
        base = pattern.sub("", base)
    return base


class Deduplicator:
    """Tracks seen source ids and base names for a single pipeline run."""

    def __init__(
        self,
        seen_ids: Optional[Iterable[str]] = None,
        seen_names: Optional[Iterable[str]] = None,
    ):
        """
        Initialize deduplicator.

        Args:
            seen_ids: Source ids to treat as already accepted
            seen_names: Base names to treat as already accepted
        """
        self.seen_ids: Set[str] = set(seen_ids or [])
        self.seen_names: Set[str] = {normalize_base_name(n) for n in (seen_names or [])}

    def is_duplicate(self, candidate: CandidateRepository) -> bool:
        return (
            candidate.id in self.seen_ids
            or normalize_base_name(candidate.name) in self.seen_names
        )

    def accept(self, candidate: CandidateRepository) -> bool:
        """
        Accept a candidate unless its id or base name was already seen.

        Both seen-sets are updated together, only on acceptance.

        Returns:
            True if the candidate is new
        """
        if self.is_duplicate(candidate):
            logger.debug(f"Duplicate/versioned project: {candidate.full_name}")
            return False
        self.seen_ids.add(candidate.id)
        self.seen_names.add(normalize_base_name(candidate.name))
        return True
