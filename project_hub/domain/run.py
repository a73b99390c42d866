"""Pipeline run phases and results."""

from dataclasses import asdict, dataclass
from enum import Enum


class RunPhase(str, Enum):
    IDLE = "IDLE"
    FETCHING = "FETCHING"
    CLASSIFYING = "CLASSIFYING"
    SYNTHESIZING = "SYNTHESIZING"
    WRITING = "WRITING"
    FAILED = "FAILED"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one pipeline run: projects accepted and projects written."""

    source: str
    total: int
    saved: int

    def to_dict(self) -> dict:
        return asdict(self)
