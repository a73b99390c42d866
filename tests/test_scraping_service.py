from unittest.mock import MagicMock

import pytest

from project_hub.application.catalog_writer import CatalogWriter
from project_hub.application.classifier import Classifier
from project_hub.application.scraping_service import ScrapingService
from project_hub.application.source_fetcher import FetchReport
from project_hub.application.synthesizer import ContentSynthesizer
from project_hub.domain.catalog import DATA_SCIENCE, WEB_DEVELOPMENT, Difficulty
from project_hub.domain.run import RunPhase
from project_hub.infrastructure.curated_sources import KAGGLE_COMPETITIONS, CuratedProject
from project_hub.infrastructure.github_client import FetchError
from project_hub.infrastructure.memory_store import MemoryCatalogRepository


@pytest.fixture(scope="module")
def synthesizer():
    return ContentSynthesizer()


@pytest.fixture
def store():
    return MemoryCatalogRepository()


def build_service(store, synthesizer, reports, curated=None, target=200):
    fetcher = MagicMock()
    fetcher.fetch_domain.side_effect = lambda slug, budget=None: reports.get(slug, FetchReport())
    return ScrapingService(
        fetcher=fetcher,
        classifier=Classifier(),
        synthesizer=synthesizer,
        writer=CatalogWriter(store),
        curated=curated or MagicMock(),
        target_per_domain=target,
        domains=[WEB_DEVELOPMENT, DATA_SCIENCE],
    )


def test_github_run_classifies_dedupes_and_writes(store, synthesizer, make_candidate):
    reports = {
        "web-development": FetchReport(candidates=[
            make_candidate(name="recipe-sharing-app", homepage="https://recipes.vercel.app"),
            make_candidate(name="awesome-web-apps"),
            make_candidate(name="chat-app-v1", description="Real-time chat application for teams"),
            make_candidate(name="chat-app-v2", description="Real-time chat application for teams"),
        ]),
        "data-science": FetchReport(candidates=[
            make_candidate(name="sales-dashboard", description="Analytics dashboard for retail sales", stars=800),
            # Same base name as an entry accepted for another domain in this run
            make_candidate(name="recipe-sharing-app-v3"),
        ]),
    }
    service = build_service(store, synthesizer, reports)
    phases = []

    result = service.run("github", on_phase=phases.append)

    assert (result.source, result.total, result.saved) == ("github", 3, 3)
    assert phases == [RunPhase.FETCHING, RunPhase.CLASSIFYING, RunPhase.SYNTHESIZING, RunPhase.WRITING]

    web = {e.repo_name: e for e in store.entries("web-dev")}
    assert set(web) == {"recipe-sharing-app", "chat-app-v1"}
    recipe = web["recipe-sharing-app"]
    assert recipe.difficulty == Difficulty.EASY
    assert recipe.live_url == "https://recipes.vercel.app"
    assert recipe.download_url.endswith("/archive/refs/heads/main.zip")
    assert recipe.slug == "alice-recipe-sharing-app"
    assert recipe.technical_skills == ["JavaScript", "recipes", "web-app"]
    assert web["chat-app-v1"].sub_domain == "chat"
    assert web["chat-app-v1"].base_name == "chat-app"

    [dashboard] = store.entries("data-science")
    assert dashboard.difficulty == Difficulty.MEDIUM


def test_target_per_domain_caps_entries(store, synthesizer, make_candidate):
    reports = {"web-development": FetchReport(candidates=[
        make_candidate(name=f"shop-app-{i}", description=f"Online shop application number {i}")
        for i in range(5)
    ])}

    result = build_service(store, synthesizer, reports, target=2).run_github()

    assert result.saved == 2
    assert len(store.entries("web-dev")) == 2


def test_failed_domain_keeps_existing_entries(store, synthesizer, make_candidate):
    good = {"web-development": FetchReport(candidates=[make_candidate()])}
    build_service(store, synthesizer, good).run_github()

    failed = {"web-development": FetchReport(errors=[FetchError("q", 1, "rate limited", 403)])}
    build_service(store, synthesizer, failed).run_github()

    assert len(store.entries("web-dev")) == 1


def test_curated_run_upserts_and_skips_duplicates(store, synthesizer, make_candidate):
    curated = MagicMock()
    curated.fetch.return_value = list(KAGGLE_COMPETITIONS[:2])
    service = build_service(store, synthesizer, {}, curated=curated)

    first = service.run("kaggle")
    second = service.run("kaggle")

    assert (first.total, first.saved) == (2, 2)
    assert (second.total, second.saved) == (2, 0)
    titles = sorted(e.title for e in store.entries())
    assert titles == sorted(p.title for p in KAGGLE_COMPETITIONS[:2])
    titanic = [e for e in store.entries() if "titanic" in e.source_url][0]
    assert titanic.source_type == "kaggle"
    assert titanic.supposed_deadline == "30 Days"
    assert titanic.download_url == ""


def test_curated_project_with_known_base_name_is_skipped(store, synthesizer, make_candidate):
    reports = {"web-development": FetchReport(candidates=[
        make_candidate(name="e-commerce-website-development", description="Online shop application with carts")
    ])}
    curated = MagicMock()
    curated.fetch.return_value = [CuratedProject(
        title="E-commerce Website Development",
        description="Build a storefront",
        url="https://www.upwork.com/jobs/~1",
        source_type="upwork",
        domain_slug="web-development",
    )]
    service = build_service(store, synthesizer, reports, curated=curated)
    service.run_github()

    result = service.run("upwork")

    assert (result.total, result.saved) == (1, 0)
    assert [e.source_type for e in store.entries()] == ["github"]


def test_run_all_combines_sources(store, synthesizer, make_candidate):
    curated = MagicMock()
    curated.fetch.side_effect = lambda source: list(KAGGLE_COMPETITIONS[:1]) if source == "kaggle" else []
    reports = {"web-development": FetchReport(candidates=[make_candidate()])}

    result = build_service(store, synthesizer, reports, curated=curated).run()

    assert result.source == "all"
    assert (result.total, result.saved) == (2, 2)


def test_run_all_reraises_source_failure(store, synthesizer):
    curated = MagicMock()
    curated.fetch.side_effect = RuntimeError("devpost exploded")

    with pytest.raises(RuntimeError):
        build_service(store, synthesizer, {}, curated=curated).run("all")


def test_unknown_source(store, synthesizer):
    with pytest.raises(ValueError):
        build_service(store, synthesizer, {}).run("linkedin")


def upwork_storefront():
    return CuratedProject(
        title="E-commerce Website Development",
        description="Build a storefront",
        url="https://www.upwork.com/jobs/~1",
        source_type="upwork",
        domain_slug="web-development",
    )


def test_github_run_skips_base_names_stored_by_curated_sources(store, synthesizer, make_candidate):
    reports = {"web-development": FetchReport(candidates=[
        make_candidate(name="e-commerce-website-development", description="Online shop application with carts"),
        make_candidate(),
    ])}
    curated = MagicMock()
    curated.fetch.return_value = [upwork_storefront()]
    service = build_service(store, synthesizer, reports, curated=curated)
    service.run("upwork")

    result = service.run("github")

    assert (result.total, result.saved) == (1, 1)
    by_name = {e.base_name: e.source_type for e in store.entries()}
    assert by_name == {"e-commerce-website-development": "upwork", "recipe-sharing-app": "github"}


def test_github_rerun_does_not_block_on_its_own_entries(store, synthesizer, make_candidate):
    reports = {"web-development": FetchReport(candidates=[make_candidate()])}
    service = build_service(store, synthesizer, reports)

    service.run_github()
    result = service.run_github()

    assert result.saved == 1
    assert len(store.entries("web-dev")) == 1


def test_run_all_never_stores_a_base_name_twice(store, synthesizer, make_candidate):
    reports = {"web-development": FetchReport(candidates=[
        make_candidate(name="e-commerce-website-development", description="Online shop application with carts"),
    ])}
    curated = MagicMock()
    curated.fetch.side_effect = lambda source: [upwork_storefront()] if source == "upwork" else []

    build_service(store, synthesizer, reports, curated=curated).run("all")

    names = [e.base_name for e in store.entries()]
    assert names == ["e-commerce-website-development"]
