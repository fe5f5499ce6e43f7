"""In-memory job registry and the background runner that feeds it."""

from __future__ import annotations

import copy
import logging
import secrets
import threading
import time
from datetime import datetime, timezone
from typing import Any

from ..archive.reader import ArchiveHandle
from ..archive.validate import validate_zip_structure
from ..archive.walker import parse
from ..core.errors import MissingManifest
from ..core.model import BatchJob, BatchProcessingResult, ParsedBatch
from ..core.ports import StorageProvider, TripRepository
from .applier import apply_batch

logger = logging.getLogger(__name__)


class JobTracker:
    """
    Process-lifetime registry of batch jobs.

    Nothing is persisted and nothing is evicted: jobs live for as long as
    this object does, so a restarted process knows none of the previous ids.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, BatchJob] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_job_id() -> str:
        return f"batch_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"

    def create(self, user_id: str | None = None, total_trips: int = 0) -> str:
        job = BatchJob(id=self.new_job_id(), user_id=user_id, total_trips=total_trips)
        with self._lock:
            self._jobs[job.id] = job
        return job.id

    def update(self, job_id: str, **changes: Any) -> None:
        """Apply field changes to a job (last writer wins)."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise KeyError(job_id)
            for key, value in changes.items():
                if not hasattr(job, key):
                    raise AttributeError(f"BatchJob has no field {key!r}")
                setattr(job, key, value)

    def get(self, job_id: str) -> BatchJob | None:
        """Snapshot of the job, or None for unknown (or expired) ids."""
        with self._lock:
            job = self._jobs.get(job_id)
            return copy.deepcopy(job) if job is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BatchRunner:
    """
    Accepts uploads and runs them as background jobs.

    submit() does all archive and manifest checks synchronously, so a fatal
    error is raised to the caller before any job exists. Trips are then
    applied one after the other on a worker thread. There is no cancellation
    and no timeout: a hung storage call hangs the job.
    """

    def __init__(
        self,
        storage: StorageProvider,
        repository: TripRepository,
        tracker: JobTracker | None = None,
        background: bool = True,
    ):
        self.storage = storage
        self.repository = repository
        self.tracker = tracker or JobTracker()
        self.background = background
        self._threads: dict[str, threading.Thread] = {}

    def prepare(self, buffer: bytes) -> ParsedBatch:
        """Load, validate and parse an archive. Raises on fatal errors."""
        handle = ArchiveHandle.load(buffer)
        errors = validate_zip_structure(handle)
        if errors:
            raise MissingManifest(errors)
        return parse(handle)

    def submit(self, buffer: bytes, user_id: str | None = None) -> str:
        batch = self.prepare(buffer)
        job_id = self.tracker.create(user_id=user_id, total_trips=len(batch.trips))
        logger.info("Job %s accepted with %d trip(s)", job_id, len(batch.trips))

        if self.background:
            thread = threading.Thread(
                target=self._work, args=(job_id, batch, user_id), name=job_id, daemon=True
            )
            self._threads[job_id] = thread
            thread.start()
        else:
            self.run_job(job_id, batch, user_id)
        return job_id

    def wait(self, job_id: str, timeout: float | None = None) -> BatchJob | None:
        thread = self._threads.get(job_id)
        if thread is not None:
            thread.join(timeout)
        return self.tracker.get(job_id)

    def _work(self, job_id: str, batch: ParsedBatch, user_id: str | None) -> None:
        try:
            self.run_job(job_id, batch, user_id)
        finally:
            self._threads.pop(job_id, None)

    @property
    def running(self) -> list[str]:
        """Ids of jobs whose worker thread has not finished yet."""
        return list(self._threads)

    def run_job(self, job_id: str, batch: ParsedBatch, user_id: str | None = None) -> None:
        self.tracker.update(job_id, status="processing")

        def on_progress(result: BatchProcessingResult) -> None:
            self.tracker.update(
                job_id,
                processed_trips=result.processed_trips,
                failed_trips=len(result.errors),
            )

        try:
            result = apply_batch(
                batch, self.storage, self.repository, user_id=user_id, on_progress=on_progress
            )
        except Exception as e:
            logger.exception("Job %s failed", job_id)
            self.tracker.update(
                job_id, status="failed", error=str(e) or type(e).__name__, completed_at=_now()
            )
            return

        # A job with at least one created trip is completed, possibly with errors.
        status = "completed" if result.created_trip_ids else "failed"
        self.tracker.update(job_id, status=status, result=result, completed_at=_now())
        logger.info(
            "Job %s %s: %d created, %d error(s)",
            job_id, status, len(result.created_trip_ids), len(result.errors),
        )
