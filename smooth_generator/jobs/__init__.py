"""Job handling: the persisted job slot, the batch driver and the controller."""

from .record import BatchDescriptor, JobRecord  # noqa: F401
from .controller import BatchProcessingController, HostScheduler  # noqa: F401
from .store import JobStore  # noqa: F401
from .driver import BatchDriver  # noqa: F401

__all__ = [
    "BatchDescriptor",
    "BatchDriver",
    "BatchProcessingController",
    "HostScheduler",
    "JobRecord",
    "JobStore",
]
