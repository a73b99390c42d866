import threading
from unittest.mock import MagicMock

import pytest

from project_hub.application.scheduler import ScrapeInProgressError, ScrapingScheduler
from project_hub.domain.run import RunPhase, RunResult
from project_hub.infrastructure.cache import TTLCache


class BlockingService:
    """Scraping service whose run blocks until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = []

    def run(self, source=None, on_phase=None):
        self.calls.append(source)
        on_phase(RunPhase.CLASSIFYING)
        self.started.set()
        self.release.wait(timeout=5)
        return RunResult(source=source or "all", total=4, saved=3)


def test_run_once_returns_result_and_records_state():
    service = MagicMock()
    service.run.return_value = RunResult(source="github", total=10, saved=7)
    scheduler = ScrapingScheduler(service)

    result = scheduler.run_once("github")

    assert result == RunResult(source="github", total=10, saved=7)
    status = scheduler.status()
    assert status["isRunning"] is False
    assert status["phase"] == "IDLE"
    assert status["lastResult"] == {"source": "github", "total": 10, "saved": 7}
    assert status["lastRunAt"] is not None


def test_run_once_while_running_raises():
    service = BlockingService()
    scheduler = ScrapingScheduler(service)
    worker = threading.Thread(target=scheduler.run_once)
    worker.start()
    assert service.started.wait(timeout=5)

    try:
        assert scheduler.is_running
        assert scheduler.status()["phase"] == "CLASSIFYING"
        with pytest.raises(ScrapeInProgressError, match="already in progress"):
            scheduler.run_once("github")
    finally:
        service.release.set()
        worker.join(timeout=5)

    assert service.calls == [None]
    assert not scheduler.is_running


def test_failure_is_recorded_and_flag_cleared():
    service = MagicMock()
    service.run.side_effect = RuntimeError("database went away")
    scheduler = ScrapingScheduler(service)

    with pytest.raises(RuntimeError):
        scheduler.run_once()

    status = scheduler.status()
    assert status["isRunning"] is False
    assert status["phase"] == "IDLE"
    assert status["lastError"] == "database went away"

    service.run.side_effect = None
    service.run.return_value = RunResult(source="all", total=1, saved=1)
    scheduler.run_once()
    assert scheduler.status()["lastError"] is None


def test_cache_cleared_after_run():
    cache = TTLCache()
    cache.set("scraping:stats", {"entries": 1})
    cache.set("other:key", 1)
    service = MagicMock()
    service.run.return_value = RunResult(source="all", total=0, saved=0)

    ScrapingScheduler(service, cache=cache).run_once()

    assert cache.get("scraping:stats") is None
    assert cache.get("other:key") == 1


def test_scheduled_run_skips_when_busy():
    service = BlockingService()
    scheduler = ScrapingScheduler(service)
    worker = threading.Thread(target=scheduler.run_once)
    worker.start()
    assert service.started.wait(timeout=5)

    try:
        # Logged and skipped, not raised
        scheduler._run_scheduled(scheduler.jobs[1])
    finally:
        service.release.set()
        worker.join(timeout=5)

    assert service.calls == [None]


def test_schedulers_do_not_share_state():
    first = ScrapingScheduler(BlockingService())
    second = ScrapingScheduler(MagicMock())
    assert first.state is not second.state


def test_jobs_run_on_interval_until_stopped():
    service = MagicMock()
    ran = threading.Event()

    def run(source=None, on_phase=None):
        ran.set()
        return RunResult(source=source or "all", total=0, saved=0)

    service.run.side_effect = run
    scheduler = ScrapingScheduler(service, interval_hours=1, github_interval_hours=0.00001)

    scheduler.start()
    try:
        assert ran.wait(timeout=5)
    finally:
        scheduler.stop(timeout=5)

    assert scheduler._threads == []
    assert "github" in [c.args[0] for c in service.run.call_args_list]
