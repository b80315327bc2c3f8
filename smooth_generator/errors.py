"""
Error taxonomy for job handling and generation.

Two families, kept apart so callers can tell routine conditions from real
failures:

    JobStateError    — "a job is already running", "no job to update".
                       Expected, frequent, non-fatal. Surface, don't alert.
    GenerationError  — unknown generator key, a generator that failed a
                       batch. Worth alerting on.
"""


class SmoothGeneratorError(Exception):
    """Base class for every error raised by this package."""


# ═══════════════════════════════════════════════════════════════
# JOB STATE
# ═══════════════════════════════════════════════════════════════

class JobStateError(SmoothGeneratorError):
    """The current job is not in the state the operation needs."""


class JobAlreadyExists(JobStateError):
    def __init__(self, message: str = "Can't create a new job because one is already in progress."):
        super().__init__(message)


class JobNotFound(JobStateError):
    def __init__(self, message: str = "There is no job to update."):
        super().__init__(message)


class JobConflict(JobStateError):
    """Concurrent writers kept changing the job record under us."""


# ═══════════════════════════════════════════════════════════════
# GENERATION
# ═══════════════════════════════════════════════════════════════

class GenerationError(SmoothGeneratorError):
    """A batch could not be generated."""


class UnknownGenerator(GenerationError):
    def __init__(self, generator_key: str):
        self.generator_key = generator_key
        super().__init__(f'A generator for "{generator_key}" can\'t be found.')


class ProcessingError(GenerationError):
    """The generation routine failed; carries the routine's own message."""
