"""Classification outcome for a candidate repository."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ExclusionReason(str, Enum):
    EXCLUDED_KEYWORD = "excluded-keyword"
    ARCHIVED = "archived"
    LIBRARY_NAME = "library-name"
    LIBRARY_DESCRIPTION = "library-description"
    MISSING_DESCRIPTION = "missing-description"
    INSUFFICIENT_STARS = "insufficient-stars"
    NO_APPLICATION_SIGNAL = "no-application-signal"


@dataclass(frozen=True)
class ClassificationDecision:
    """Include/exclude verdict, computed once per candidate per run."""

    included: bool
    reason: Optional[ExclusionReason] = None
    detail: Optional[str] = None

    @classmethod
    def include(cls) -> "ClassificationDecision":
        return cls(included=True)

    @classmethod
    def exclude(cls, reason: ExclusionReason, detail: Optional[str] = None) -> "ClassificationDecision":
        return cls(included=False, reason=reason, detail=detail)

    def __str__(self) -> str:
        if self.included:
            return "included"
        if self.detail:
            return f"excluded ({self.reason.value}: {self.detail})"
        return f"excluded ({self.reason.value})"
