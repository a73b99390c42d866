"""Detection of a repository's deployed demo URL."""

import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)

DEPLOYMENT_HOST_SUFFIXES = (
    ".herokuapp.com", ".vercel.app", ".netlify.app", ".render.com", ".onrender.com",
    ".railway.app", ".fly.dev", ".azurewebsites.net", ".firebaseapp.com", ".web.app",
    ".pages.dev", ".surge.sh", ".now.sh", ".glitch.me", ".repl.co", ".streamlit.app",
)

README_LINK_PATTERNS: List[re.Pattern] = [
    re.compile(r"\[\s*(?:live\s+)?(?:demo|preview)\s*\]\((https?://[^\s)]+)\)", re.IGNORECASE),
    re.compile(r"\[\s*live\s*(?:site|app|version)?\s*\]\((https?://[^\s)]+)\)", re.IGNORECASE),
    re.compile(r"(?:live\s+)?(?:demo|preview|live)\s*:\s*<?(https?://[^\s)>\]]+)", re.IGNORECASE),
    re.compile(r"\bvisit\b[^\n]*?(https?://[^\s)>\]]+)", re.IGNORECASE),
]


def download_url(candidate: CandidateRepository) -> str:
    return f"{candidate.url}/archive/refs/heads/{candidate.default_branch or 'main'}.zip"


def is_deployment_url(url: str, repo_name: str = "") -> bool:
    """
    Whether ``url`` points at a deployed site rather than back at GitHub.

    Accepts well-known hosting platforms and custom domains; rejects GitHub
    itself and the repository's own plain GitHub Pages site.
    """
    url = (url or "").strip()
    if not url:
        return False
    if "github.com" in url:
        return False
    if repo_name and f"github.io/{repo_name}".lower() in url.lower():
        return False

    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = (parsed.hostname or "").lower()
    if parsed.scheme not in ("http", "https") or "." not in host:
        return False

    if host.endswith(DEPLOYMENT_HOST_SUFFIXES):
        return True
    # Custom domain
    return "github" not in host


def find_readme_link(readme: str) -> Optional[str]:
    """First demo/live/preview link in README text that is not a GitHub URL."""
    for pattern in README_LINK_PATTERNS:
        for match in pattern.finditer(readme):
            url = match.group(1).rstrip(".,;")
            if "github.com" not in url:
                return url
    return None


class LiveUrlResolver:
    """Resolves the live URL stored on a catalog entry."""

    def __init__(self, github_client=None, scan_readme: bool = False):
        """
        Args:
            github_client: Client used to fetch READMEs; required when scan_readme is set
            scan_readme: Look for demo links in the README when the homepage is unusable
        """
        self.github_client = github_client
        self.scan_readme = scan_readme and github_client is not None

    def validated(self, candidate: CandidateRepository) -> Optional[str]:
        """Homepage or README demo link, or None when neither qualifies."""
        if candidate.homepage and is_deployment_url(candidate.homepage, candidate.name):
            return candidate.homepage.strip()

        if not self.scan_readme or candidate.source_type != "github":
            return None

        readme = self.github_client.get_readme(candidate.owner, candidate.name)
        if not readme:
            return None
        link = find_readme_link(readme)
        if link:
            logger.debug(f"Demo link found in README of {candidate.full_name}: {link}")
        return link

    def resolve(self, candidate: CandidateRepository) -> str:
        """Validated live URL, else the raw homepage, else the repository page."""
        return self.validated(candidate) or candidate.homepage or candidate.url
