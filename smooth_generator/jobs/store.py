"""
Job Store — single-slot persistence for "the current job".

Holds zero or one JobRecord in the options store and keeps it consistent
with the host scheduler's registration for the job type:

    record stored, job type not scheduled  → record is stale, delete it
    no record,     job type scheduled      → orphaned schedule entry, remove it

That reconciliation runs as an explicit side effect of
get_current_and_reconcile(). peek() reads without touching anything.

Writes are optimistic: create() is an insert-if-absent, record_progress()
is a compare-and-swap on the row version, retried a bounded number of
times. A progress update that finds the row gone raises JobNotFound and
never recreates the record.

create() stores the record before it schedules the job type, so a
reconcile landing between those two steps would judge the fresh record
stale. Reconciliation, create() and delete_current() therefore run under
the options store's job_lock, shared by every JobStore over the same
options. DuckDB allows one writing process per file, so the lock covers
every writer.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from smooth_generator.errors import JobAlreadyExists, JobConflict, JobNotFound
from smooth_generator.jobs.controller import HostScheduler
from smooth_generator.jobs.record import JobRecord, record_from_option
from smooth_generator.options import OptionsStore

logger = logging.getLogger(__name__)

OPTION_KEY = "smoothgenerator_async_job"
JOB_TYPE = "smoothgenerator"


class JobStore:
    def __init__(
        self,
        options: OptionsStore,
        scheduler: HostScheduler,
        job_type: str = JOB_TYPE,
        option_key: str = OPTION_KEY,
        max_cas_retries: int = 5,
    ):
        self.options = options
        self.scheduler = scheduler
        self.job_type = job_type
        self.option_key = option_key
        self.max_cas_retries = max_cas_retries

    # ── Reads ──

    def peek(self) -> Optional[JobRecord]:
        """Return the stored record as-is. No reconciliation, no side effects."""
        stored = self.options.get(self.option_key)
        return record_from_option(stored.value) if stored else None

    def get_current_and_reconcile(self) -> Optional[JobRecord]:
        """
        Return the current job, or None.

        Side effects: deletes a stored record whose job type is no longer
        scheduled, and unschedules a job type that has no stored record.
        """
        loaded = self._load_reconciled()
        return loaded[0] if loaded else None

    def _load_reconciled(self) -> Optional[Tuple[JobRecord, int]]:
        with self.options.job_lock:
            return self._reconcile()

    def _reconcile(self) -> Optional[Tuple[JobRecord, int]]:
        """Caller holds job_lock."""
        stored = self.options.get(self.option_key)
        scheduled = self.scheduler.is_scheduled(self.job_type)

        if stored is None:
            if scheduled:
                logger.info(f"[JobStore] Removing orphaned schedule entry for '{self.job_type}'")
                self.scheduler.unschedule(self.job_type)
            return None

        if not scheduled:
            logger.info(f"[JobStore] Dropping stale job record; '{self.job_type}' is not scheduled")
            self._remove()
            return None

        return record_from_option(stored.value), stored.version

    # ── Writes ──

    def create(self, generator_key: str, amount: int, parameters: Optional[Dict[str, Any]] = None) -> JobRecord:
        """Start a job. Raises JobAlreadyExists if one is in progress."""
        if not generator_key:
            raise ValueError("A job needs a generator key.")

        record = JobRecord(
            generator_key=generator_key,
            amount=amount,
            parameters=dict(parameters or {}),
            pending=amount,
        )

        with self.options.job_lock:
            if self._reconcile() is not None:
                raise JobAlreadyExists()

            # Insert-if-absent: a concurrent create that got here first wins
            if not self.options.add(self.option_key, record.model_dump()):
                raise JobAlreadyExists()

            self.scheduler.schedule(self.job_type)
        logger.info(f"[JobStore] Created job: {amount} x {generator_key}")
        return record

    def record_progress(self, delta: int) -> JobRecord:
        """Fold a finished batch into the current job. Raises JobNotFound if there is none."""
        if delta < 0:
            raise ValueError(f"Progress delta must be >= 0, got {delta}")

        for _ in range(self.max_cas_retries):
            loaded = self._load_reconciled()
            if loaded is None:
                raise JobNotFound()

            record, version = loaded
            updated = record.with_progress(delta)
            if self.options.compare_and_swap(self.option_key, version, updated.model_dump()):
                return updated

            logger.debug(f"[JobStore] Version {version} changed under us, retrying progress update")

        raise JobConflict(
            f"Gave up recording progress after {self.max_cas_retries} conflicting writes."
        )

    def delete_current(self) -> None:
        """Unschedule and remove the current job. Safe to call when there is none."""
        with self.options.job_lock:
            self._remove()

    def _remove(self) -> None:
        self.scheduler.unschedule(self.job_type)
        if self.options.delete(self.option_key):
            logger.info("[JobStore] Deleted current job")
