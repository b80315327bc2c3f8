"""
Batch Processing Controller — the host-side scheduler.

Keeps a persisted set of enqueued job types and drives the processor bound
to each one through the polling protocol:

    total_pending() → next_batch(default_batch_size()) → process(batch)

until pending reaches zero, then calls the processor's complete() hook and
drops the job type from the set.

Retry policy lives here, not in the processors: a ProcessingError is
logged and counted, and after max_consecutive_failures in a row the job
type is unscheduled and the error re-raised. UnknownGenerator is never
retried.
"""
import logging
from typing import Dict, List, Optional

from smooth_generator.errors import JobStateError, ProcessingError, UnknownGenerator
from smooth_generator.options import OptionsStore

logger = logging.getLogger(__name__)

ENQUEUED_KEY = "smoothgenerator_enqueued_processors"


class HostScheduler:
    """What the job store needs from the scheduler."""

    def is_scheduled(self, job_type: str) -> bool:
        raise NotImplementedError

    def schedule(self, job_type: str) -> None:
        raise NotImplementedError

    def unschedule(self, job_type: str) -> None:
        raise NotImplementedError


class BatchProcessor:
    """What the controller needs from a processor (see jobs.driver.BatchDriver)."""
    name: str = ""
    description: str = ""

    def total_pending(self) -> int:
        raise NotImplementedError

    def next_batch(self, requested_size: int):
        raise NotImplementedError

    def process(self, batch) -> int:
        """Generate a batch. Returns how many items were credited to the job."""
        raise NotImplementedError

    def default_batch_size(self) -> int:
        raise NotImplementedError

    def complete(self) -> None:
        raise NotImplementedError


class BatchProcessingController(HostScheduler):
    def __init__(self, options: OptionsStore, max_consecutive_failures: int = 3):
        self.options = options
        self.max_consecutive_failures = max_consecutive_failures
        self._processors: Dict[str, BatchProcessor] = {}
        self._failures: Dict[str, int] = {}
        self.last_errors: Dict[str, str] = {}

    def register(self, job_type: str, processor: BatchProcessor) -> None:
        self._processors[job_type] = processor

    # ═══════════════════════════════════════════════════════════════
    # SCHEDULE REGISTRATION
    # ═══════════════════════════════════════════════════════════════

    def enqueued(self) -> List[str]:
        stored = self.options.get(ENQUEUED_KEY)
        return list(stored.value) if stored else []

    def is_scheduled(self, job_type: str) -> bool:
        return job_type in self.enqueued()

    def schedule(self, job_type: str) -> None:
        self._update_enqueued(lambda types: types if job_type in types else types + [job_type])
        self._failures[job_type] = 0
        self.last_errors.pop(job_type, None)

    def unschedule(self, job_type: str) -> None:
        self._update_enqueued(lambda types: [t for t in types if t != job_type])
        self._failures.pop(job_type, None)

    def _update_enqueued(self, change) -> None:
        while True:
            stored = self.options.get(ENQUEUED_KEY)
            if stored is None:
                new_types = change([])
                if not new_types or self.options.add(ENQUEUED_KEY, new_types):
                    return
                continue
            new_types = change(list(stored.value))
            if new_types == stored.value:
                return
            if self.options.compare_and_swap(ENQUEUED_KEY, stored.version, new_types):
                return

    # ═══════════════════════════════════════════════════════════════
    # POLLING
    # ═══════════════════════════════════════════════════════════════

    def _processor(self, job_type: str) -> BatchProcessor:
        processor = self._processors.get(job_type)
        if processor is None:
            raise LookupError(f"No batch processor registered for '{job_type}'")
        return processor

    def process_next_batch(self, job_type: str) -> int:
        """
        Run one poll for a job type. Returns how many items the batch
        credited to the job, 0 when there was nothing to do.
        """
        processor = self._processor(job_type)
        if not self.is_scheduled(job_type):
            return 0

        if processor.total_pending() == 0:
            self._finish(job_type, processor)
            return 0

        batch = processor.next_batch(processor.default_batch_size())
        if batch is None:
            return 0

        try:
            processed = processor.process(batch)
        except UnknownGenerator as e:
            logger.error(f"[Controller] {processor.name or job_type}: {e}; unscheduling")
            self.last_errors[job_type] = str(e)
            self.unschedule(job_type)
            raise
        except ProcessingError as e:
            failures = self._failures.get(job_type, 0) + 1
            self._failures[job_type] = failures
            self.last_errors[job_type] = str(e)
            logger.error(
                f"[Controller] Batch of {batch.amount} failed for {processor.name or job_type} "
                f"({failures}/{self.max_consecutive_failures}): {e}"
            )
            if failures >= self.max_consecutive_failures:
                logger.error(f"[Controller] Giving up on '{job_type}' after {failures} failed batches")
                self.unschedule(job_type)
            raise

        self._failures[job_type] = 0
        if processor.total_pending() == 0:
            self._finish(job_type, processor)
        return processed

    def run_until_exhausted(self, job_type: str, max_iterations: Optional[int] = None) -> int:
        """
        Poll a job type until nothing is pending. Returns the number of
        items processed. Re-raises the last ProcessingError once the
        failure limit unschedules the job.
        """
        total = 0
        iterations = 0
        while self.is_scheduled(job_type):
            if max_iterations is not None and iterations >= max_iterations:
                break
            iterations += 1
            try:
                done = self.process_next_batch(job_type)
            except ProcessingError:
                if self.is_scheduled(job_type):
                    continue
                raise
            total += done
            if done == 0 and self.is_scheduled(job_type):
                logger.warning(f"[Controller] '{job_type}' has pending work but no batch to hand out")
                break
        return total

    def tick(self) -> Dict[str, int]:
        """One poll for every enqueued job type with a registered processor."""
        results: Dict[str, int] = {}
        for job_type in self.enqueued():
            if job_type not in self._processors:
                continue
            try:
                results[job_type] = self.process_next_batch(job_type)
            except (ProcessingError, UnknownGenerator):
                results[job_type] = 0
            except JobStateError as e:
                logger.warning(f"[Controller] {job_type}: {e}")
                self.last_errors[job_type] = str(e)
                results[job_type] = 0
        return results

    def _finish(self, job_type: str, processor: BatchProcessor) -> None:
        logger.info(f"[Controller] {processor.name or job_type} finished")
        processor.complete()
        self.unschedule(job_type)
