"""Recurring and manual triggering of the scraping pipeline."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from project_hub.application.scraping_service import ScrapingService
from project_hub.domain.run import RunPhase, RunResult
from project_hub.infrastructure.cache import TTLCache

logger = logging.getLogger(__name__)

CACHE_PREFIX = "scraping:"


class ScrapeInProgressError(Exception):
    """Raised when a run is requested while another one is active."""
    pass


@dataclass
class SchedulerState:
    """Mutable run state owned by one scheduler instance."""

    phase: RunPhase = RunPhase.IDLE
    is_running: bool = False
    last_run_at: Optional[datetime] = None
    last_result: Optional[RunResult] = None
    last_error: Optional[str] = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "isRunning": self.is_running,
            "phase": self.phase.value,
            "lastRunAt": self.last_run_at.isoformat() if self.last_run_at else None,
            "lastResult": self.last_result.to_dict() if self.last_result else None,
            "lastError": self.last_error,
        }


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    source: Optional[str]
    interval_seconds: float


class ScrapingScheduler:
    """
    Runs the pipeline on demand and on fixed intervals, one run at a time.

    The running flag is checked and set under a lock, so a second caller gets
    ScrapeInProgressError instead of starting an overlapping run. Scheduled
    runs that collide with an active run are skipped, not queued.
    """

    def __init__(
        self,
        service: ScrapingService,
        cache: Optional[TTLCache] = None,
        interval_hours: float = 6,
        github_interval_hours: float = 2,
    ):
        """
        Initialize scheduler.

        Args:
            service: Scraping service executing the runs
            cache: Read cache whose scraping keys are cleared after each run
            interval_hours: Interval of the all-sources job
            github_interval_hours: Interval of the GitHub-only job
        """
        self.service = service
        self.cache = cache
        self.state = SchedulerState()
        self.jobs: List[ScheduledJob] = [
            ScheduledJob("comprehensive", None, interval_hours * 3600),
            ScheduledJob("github", "github", github_interval_hours * 3600),
        ]
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self.state.is_running

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return self.state.snapshot()

    def _set_phase(self, phase: RunPhase) -> None:
        with self._lock:
            self.state.phase = phase
        logger.debug(f"Scraping phase: {phase.value}")

    def run_once(self, source: Optional[str] = None) -> RunResult:
        """
        Run the pipeline once for a source ("all" or None for every source).

        Returns:
            Run result with accepted and saved counts

        Raises:
            ScrapeInProgressError: If a run is already active
        """
        with self._lock:
            if self.state.is_running:
                raise ScrapeInProgressError("Scraping is already in progress")
            self.state.is_running = True
            self.state.phase = RunPhase.FETCHING

        logger.info(f"Scraping triggered for: {source or 'all sources'}")
        try:
            result = self.service.run(source, on_phase=self._set_phase)
        except Exception as e:
            with self._lock:
                self.state.phase = RunPhase.FAILED
                self.state.last_error = str(e)
            logger.error(f"Scraping failed for {source or 'all sources'}: {e}", exc_info=True)
            raise
        else:
            with self._lock:
                self.state.last_result = result
                self.state.last_error = None
            logger.info(f"Scraping completed: {result.saved}/{result.total} projects saved")
            return result
        finally:
            with self._lock:
                self.state.is_running = False
                self.state.phase = RunPhase.IDLE
                self.state.last_run_at = datetime.now(timezone.utc)
            if self.cache is not None:
                self.cache.clear_prefix(CACHE_PREFIX)

    def _run_scheduled(self, job: ScheduledJob) -> None:
        logger.info(f"Running scheduled {job.name} scraping...")
        try:
            self.run_once(job.source)
        except ScrapeInProgressError:
            logger.warning(f"Scraping already in progress, skipping scheduled {job.name} run")
        except Exception as e:
            # Already logged by run_once; keep the job alive for its next interval
            logger.error(f"Scheduled {job.name} scraping failed: {e}")

    def _loop(self, job: ScheduledJob, stop_event: threading.Event) -> None:
        while not stop_event.wait(job.interval_seconds):
            self._run_scheduled(job)

    def start(self) -> None:
        """Start the recurring jobs on daemon threads."""
        if self._threads:
            logger.warning("Scheduler already started")
            return

        self._stop_event = threading.Event()
        for job in self.jobs:
            thread = threading.Thread(
                target=self._loop,
                args=(job, self._stop_event),
                name=f"scheduler-{job.name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

        logger.info("Scheduler service started with the following schedule:")
        for job in self.jobs:
            logger.info(f"  {job.name}: every {job.interval_seconds / 3600:g} hours")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Prevent future scheduled runs.

        A run already in progress is not interrupted; ``timeout`` bounds how
        long to wait for the job threads.
        """
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
        logger.info("Scheduler service stopped")
