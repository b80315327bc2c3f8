"""Job record: what is being generated and how far along it is."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class JobRecord(BaseModel):
    """
    State of the one in-flight bulk generation job.

    processed only ever grows. pending starts at amount and is clamped at 0,
    so processed + pending == amount unless a generator over-reports.
    """
    generator_key: str = ""
    amount: int = Field(default=0, ge=0)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    processed: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)

    def with_progress(self, delta: int) -> "JobRecord":
        """Return a copy with delta more units done."""
        return self.model_copy(update={
            "processed": self.processed + delta,
            "pending": max(self.pending - delta, 0),
        })


class BatchDescriptor(BaseModel):
    """One chunk of work handed to the controller by next_batch."""
    generator_key: str
    amount: int = Field(ge=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)


def record_from_option(value: Optional[Dict[str, Any]]) -> Optional[JobRecord]:
    if not value:
        return None
    return JobRecord.model_validate(value)
