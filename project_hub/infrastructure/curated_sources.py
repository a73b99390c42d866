"""Non-GitHub project sources: Kaggle competitions, Devpost hackathons, Upwork briefs."""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from project_hub.domain.catalog import Difficulty
from project_hub.domain.repository import CandidateRepository

logger = logging.getLogger(__name__)

CURATED_SOURCES = ("kaggle", "hackathon", "upwork")

# Checked in order; the first domain with a matching pattern wins
DOMAIN_PATTERNS = [
    ("cybersecurity", re.compile(r"security|cyber|penetration|pentest|audit|malware|vulnerab")),
    ("machine-learning", re.compile(r"machine learning|\bml\b|forecast|predict|regression|classification")),
    ("artificial-intelligence", re.compile(
        r"\bai\b|artificial intelligence|deep learning|computer vision|nlp|chatbot|neural"
    )),
    ("data-science", re.compile(r"data|analytics|visuali[sz]ation|dashboard|kaggle")),
    ("web-development", re.compile(r"web|frontend|backend|react|vue|angular|node")),
]
DEFAULT_DOMAIN = "web-development"


def map_to_domain(tags: List[str], description: Optional[str] = None) -> str:
    """Pick a catalog domain slug from free-form tags and description."""
    text = f"{' '.join(tags)} {description or ''}".lower()
    for slug, pattern in DOMAIN_PATTERNS:
        if pattern.search(text):
            return slug
    return DEFAULT_DOMAIN


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


@dataclass(frozen=True)
class CuratedProject:
    """A project brief from a curated source, already assigned to a domain."""

    title: str
    description: str
    url: str
    source_type: str
    domain_slug: str
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: List[str] = field(default_factory=list)
    deadline_days: Optional[int] = None
    organization: Optional[str] = None

    @property
    def supposed_deadline(self) -> Optional[str]:
        if self.deadline_days is None:
            return None
        return f"{self.deadline_days} Days"

    def to_candidate(self) -> CandidateRepository:
        name = slugify(self.title)
        owner = self.organization or self.source_type
        return CandidateRepository(
            id=f"{self.source_type}:{self.url}",
            name=name,
            owner=owner,
            full_name=f"{owner}/{name}",
            url=self.url,
            description=self.description,
            topics=[slugify(t) for t in self.tags],
            source_type=self.source_type,
        )


KAGGLE_COMPETITIONS = [
    CuratedProject(
        title="Titanic: Machine Learning from Disaster",
        description="Predict survival on the Titanic and get familiar with ML basics",
        url="https://www.kaggle.com/c/titanic",
        source_type="kaggle",
        domain_slug="data-science",
        tags=["classification", "binary-classification", "tabular-data", "beginner"],
        deadline_days=30,
        organization="kaggle",
    ),
    CuratedProject(
        title="House Prices: Advanced Regression Techniques",
        description="Predict sales prices and practice feature engineering, random forests and gradient boosting",
        url="https://www.kaggle.com/c/house-prices-advanced-regression-techniques",
        source_type="kaggle",
        domain_slug="machine-learning",
        tags=["regression", "feature-engineering", "tabular-data"],
        deadline_days=45,
        organization="kaggle",
    ),
    CuratedProject(
        title="Digit Recognizer",
        description="Learn computer vision fundamentals with the famous MNIST handwritten digits",
        url="https://www.kaggle.com/c/digit-recognizer",
        source_type="kaggle",
        domain_slug="artificial-intelligence",
        tags=["computer-vision", "image-classification", "mnist"],
        deadline_days=60,
        organization="kaggle",
    ),
    CuratedProject(
        title="Natural Language Processing with Disaster Tweets",
        description="Classify which tweets announce a real disaster and which do not",
        url="https://www.kaggle.com/c/nlp-getting-started",
        source_type="kaggle",
        domain_slug="artificial-intelligence",
        tags=["nlp", "text-classification"],
        deadline_days=60,
        organization="kaggle",
    ),
    CuratedProject(
        title="Store Sales: Time Series Forecasting",
        description="Forecast grocery sales across stores from historical sales, promotions and holidays",
        url="https://www.kaggle.com/c/store-sales-time-series-forecasting",
        source_type="kaggle",
        domain_slug="data-science",
        tags=["time-series", "forecasting", "tabular-data"],
        deadline_days=60,
        organization="kaggle",
    ),
]

UPWORK_BRIEFS = [
    CuratedProject(
        title="E-commerce Website Development",
        description="Build a modern e-commerce platform with React and Node.js including checkout and Stripe payments",
        url="https://www.upwork.com/jobs/~0123456789abcdef",
        source_type="upwork",
        domain_slug="web-development",
        tags=["React", "Node.js", "MongoDB", "Stripe"],
        deadline_days=14,
        organization="tech-startup",
    ),
    CuratedProject(
        title="Machine Learning Model for Sales Prediction",
        description="Develop a predictive model for sales forecasting using historical retail data",
        url="https://www.upwork.com/jobs/~fedcba9876543210",
        source_type="upwork",
        domain_slug="machine-learning",
        difficulty=Difficulty.HARD,
        tags=["Python", "TensorFlow", "Forecasting"],
        deadline_days=21,
        organization="retail-corp",
    ),
    CuratedProject(
        title="Cybersecurity Audit and Penetration Testing",
        description="Audit a customer-facing web application and perform penetration testing with a written report",
        url="https://www.upwork.com/jobs/~abcdef1234567890",
        source_type="upwork",
        domain_slug="cybersecurity",
        difficulty=Difficulty.HARD,
        tags=["Cybersecurity", "Penetration Testing", "Security Audit"],
        deadline_days=7,
        organization="finance-company",
    ),
    CuratedProject(
        title="Sales Analytics Dashboard",
        description="Create an interactive dashboard visualizing monthly revenue, churn and regional sales KPIs",
        url="https://www.upwork.com/jobs/~0a1b2c3d4e5f6a7b",
        source_type="upwork",
        domain_slug="data-science",
        tags=["Python", "Plotly", "SQL", "Dashboard"],
        deadline_days=14,
        organization="saas-company",
    ),
]

HACKATHON_FALLBACK = [
    CuratedProject(
        title="AI-Powered Health Assistant",
        description="Mobile app for real-time health monitoring using AI and machine learning",
        url="https://devpost.com/software/ai-powered-health-assistant",
        source_type="hackathon",
        domain_slug="artificial-intelligence",
        tags=["AI", "Healthcare", "Mobile", "React Native"],
        organization="devpost",
    ),
    CuratedProject(
        title="Phishing Link Detector",
        description="Browser extension that flags phishing links in real time using URL reputation checks",
        url="https://devpost.com/software/phishing-link-detector",
        source_type="hackathon",
        domain_slug="cybersecurity",
        tags=["Security", "Chrome Extension", "JavaScript"],
        organization="devpost",
    ),
    CuratedProject(
        title="Community Food Bank Tracker",
        description="Web platform connecting food banks with volunteers and tracking donations by neighbourhood",
        url="https://devpost.com/software/community-food-bank-tracker",
        source_type="hackathon",
        domain_slug="web-development",
        tags=["Web", "Flask", "PostgreSQL"],
        organization="devpost",
    ),
]


class DevpostScraper:
    """Scrapes winning hackathon projects from the Devpost software gallery."""

    SEARCH_URL = "https://devpost.com/software/search"
    BASE_URL = "https://devpost.com"
    USER_AGENT = "Mozilla/5.0 (compatible; Project-Hub-Scraper)"

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 30):
        self.session = session or requests.Session()
        self.timeout = timeout

    def parse(self, html: str, limit: int = 10) -> List[CuratedProject]:
        """Extract projects from a gallery page."""
        soup = BeautifulSoup(html, "html.parser")
        projects = []

        for item in soup.select(".software-list-item")[:limit]:
            link = item.select_one(".link-to-software")
            if link is None:
                continue
            title = link.get_text(strip=True)
            href = link.get("href")
            if not title or not href:
                continue

            tagline = item.select_one(".tagline")
            description = tagline.get_text(strip=True) if tagline else ""
            tags = [t.get_text(strip=True) for t in item.select(".tag")]
            url = href if href.startswith("http") else f"{self.BASE_URL}{href}"

            projects.append(CuratedProject(
                title=title,
                description=description or f"{title} hackathon project",
                url=url,
                source_type="hackathon",
                domain_slug=map_to_domain(tags, description),
                tags=tags,
                organization="devpost",
            ))

        return projects

    def fetch(self, limit: int = 10) -> List[CuratedProject]:
        """
        Fetch winning projects, falling back to a static list on failure.

        Returns:
            Hackathon projects (never empty)
        """
        try:
            response = self.session.get(
                self.SEARCH_URL,
                params={"query": "hackathon winner", "sort": "wins"},
                headers={"User-Agent": self.USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
            projects = self.parse(response.text, limit=limit)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error scraping Devpost: {e}. Using fallback projects")
            return list(HACKATHON_FALLBACK)

        if not projects:
            logger.warning("Devpost page had no recognizable projects. Using fallback projects")
            return list(HACKATHON_FALLBACK)

        logger.info(f"Scraped {len(projects)} hackathon projects from Devpost")
        return projects


class CuratedSources:
    """Dispatches a curated source name to the function that lists its projects."""

    def __init__(self, devpost: Optional[DevpostScraper] = None):
        self.devpost = devpost or DevpostScraper()
        self._fetchers: Dict[str, Callable[[], List[CuratedProject]]] = {
            "kaggle": lambda: list(KAGGLE_COMPETITIONS),
            "hackathon": self.devpost.fetch,
            "upwork": lambda: list(UPWORK_BRIEFS),
        }

    def fetch(self, source: str) -> List[CuratedProject]:
        if source not in self._fetchers:
            raise ValueError(f"Unknown curated source: {source}")
        projects = self._fetchers[source]()
        logger.info(f"Collected {len(projects)} {source} projects")
        return projects
