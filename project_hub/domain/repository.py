"""Domain entities for repositories fetched from external sources."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class CandidateRepository:
    """Immutable candidate fetched from a source, not yet classified."""

    id: str
    name: str
    owner: str
    full_name: str
    url: str
    description: Optional[str] = None
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    homepage: Optional[str] = None
    default_branch: str = "main"
    archived: bool = False
    disabled: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    source_type: str = "github"

    @property
    def search_text(self) -> str:
        """Lowercased name, description and topics joined for keyword matching."""
        return f"{self.name} {self.description or ''} {' '.join(self.topics)}".lower()

    @classmethod
    def from_github(cls, item: dict) -> "CandidateRepository":
        """
        Build a candidate from a GitHub REST search item.

        Args:
            item: One element of the ``items`` array of a search response

        Returns:
            Candidate repository
        """
        owner = (item.get("owner") or {}).get("login", "")
        return cls(
            id=str(item["id"]),
            name=item["name"],
            owner=owner,
            full_name=item.get("full_name") or f"{owner}/{item['name']}",
            url=item["html_url"],
            description=item.get("description"),
            stars=item.get("stargazers_count", 0),
            forks=item.get("forks_count", 0),
            language=item.get("language"),
            topics=list(item.get("topics") or []),
            homepage=item.get("homepage"),
            default_branch=item.get("default_branch") or "main",
            archived=bool(item.get("archived", False)),
            disabled=bool(item.get("disabled", False)),
            created_at=_parse_timestamp(item.get("created_at")),
            updated_at=_parse_timestamp(item.get("updated_at")),
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
