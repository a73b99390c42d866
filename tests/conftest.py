import pytest

from project_hub.domain.repository import CandidateRepository


def github_item(**overrides):
    """A repository item shaped like the GitHub search API returns it."""
    item = {
        "id": 1001,
        "name": "recipe-sharing-app",
        "full_name": "alice/recipe-sharing-app",
        "owner": {"login": "alice"},
        "html_url": "https://github.com/alice/recipe-sharing-app",
        "description": "A web application for sharing and discovering family recipes",
        "stargazers_count": 120,
        "forks_count": 14,
        "language": "JavaScript",
        "topics": ["recipes", "web-app"],
        "homepage": "https://recipes-demo.vercel.app",
        "default_branch": "main",
        "archived": False,
        "disabled": False,
        "created_at": "2022-03-01T10:00:00Z",
        "updated_at": "2024-05-01T12:30:00Z",
    }
    item.update(overrides)
    return item


@pytest.fixture
def make_candidate():
    counter = {"next": 1}

    def factory(**overrides):
        name = overrides.pop("name", "recipe-sharing-app")
        owner = overrides.pop("owner", "alice")
        if "id" not in overrides:
            overrides["id"] = str(counter["next"])
            counter["next"] += 1
        fields = dict(
            name=name,
            owner=owner,
            full_name=f"{owner}/{name}",
            url=f"https://github.com/{owner}/{name}",
            description="A web application for sharing and discovering family recipes",
            stars=120,
            forks=14,
            language="JavaScript",
            topics=["recipes", "web-app"],
        )
        fields.update(overrides)
        return CandidateRepository(**fields)

    return factory


@pytest.fixture
def item_factory():
    return github_item
