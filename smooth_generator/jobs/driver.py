"""
Batch Driver — adapts the Job Store and the generator registry to the
controller's polling protocol.

Nothing here retries or schedules. Each call reads the current job fresh
from the store, so a cancelled job simply stops producing batches.
"""
import logging
from typing import Optional

from smooth_generator.errors import JobNotFound, ProcessingError
from smooth_generator.generators import GeneratorRegistry
from smooth_generator.jobs.controller import BatchProcessor
from smooth_generator.jobs.record import BatchDescriptor
from smooth_generator.jobs.store import JobStore

logger = logging.getLogger(__name__)


class BatchDriver(BatchProcessor):
    name = "Smooth Generator"
    description = "Generates various types of store data objects with randomized data for use in testing."

    def __init__(self, store: JobStore, registry: GeneratorRegistry):
        self.store = store
        self.registry = registry

    def total_pending(self) -> int:
        job = self.store.get_current_and_reconcile()
        return job.pending if job else 0

    def default_batch_size(self) -> int:
        """Cap of the current job's generator; 0 without a job or with an unknown key."""
        job = self.store.get_current_and_reconcile()
        if job is None:
            return 0
        return self._cap(job.generator_key)

    def next_batch(self, requested_size: int) -> Optional[BatchDescriptor]:
        """
        Hand out the next chunk, or None when there is nothing to do.

        The amount never exceeds the requested size, what is pending, or the
        generator's cap.
        """
        job = self.store.get_current_and_reconcile()
        if job is None:
            return None

        amount = min(requested_size, job.pending, self._cap(job.generator_key))
        if amount < 1:
            return None

        return BatchDescriptor(
            generator_key=job.generator_key,
            amount=amount,
            parameters=job.parameters,
        )

    def process(self, batch: BatchDescriptor) -> int:
        """
        Generate one batch and record it. All or nothing: on failure the job
        keeps its counters and ProcessingError carries the generator's message.
        Raises UnknownGenerator when the key does not resolve.

        Returns the count the generator reported, or 0 when the job was
        cancelled before it could be credited.
        """
        generator = self.registry.resolve(batch.generator_key)

        try:
            result = generator.bulk_generate(batch.amount, dict(batch.parameters))
        except Exception as e:
            raise ProcessingError(str(e)) from e

        if not result.ok:
            raise ProcessingError(result.error)

        try:
            job = self.store.record_progress(result.count)
        except JobNotFound:
            # Cancelled while the batch was running; the objects exist but there is no job to credit
            logger.warning(
                f"[BatchDriver] Job went away during a {batch.generator_key} batch; "
                f"dropping {result.count} results"
            )
            return 0

        logger.info(
            f"[BatchDriver] {batch.generator_key}: {job.processed}/{job.amount} done, {job.pending} pending"
        )
        return result.count

    def complete(self) -> None:
        self.store.delete_current()

    def _cap(self, generator_key: str) -> int:
        generator = self.registry.get(generator_key)
        return generator.max_batch_size if generator else 0
