from pydantic import BaseModel, field_validator
from typing import Any, Literal


# --- Job API Models ---

class StartJobRequest(BaseModel):
    generator_key: str
    amount: int
    parameters: dict[str, Any] = {}

    @field_validator("generator_key")
    @classmethod
    def validate_generator_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("generator_key cannot be empty")
        return v.strip()

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v < 1:
            raise ValueError("amount must be a positive integer")
        return v


class JobProgress(BaseModel):
    generator_key: str
    amount: int
    processed: int
    pending: int


class HeartbeatResponse(BaseModel):
    status: Literal["running", "complete"]
    job: JobProgress | None = None
    processed_this_tick: int = 0
    last_error: str | None = None


class CancelResponse(BaseModel):
    cancelled: bool


# --- Discovery Models ---

class GeneratorInfo(BaseModel):
    key: str
    max_batch_size: int


class AdminDefaults(BaseModel):
    default_num_products: int
    default_num_orders: int


class HealthResponse(BaseModel):
    status: str
    db_path: str
    job_running: bool
    catalog: dict[str, int]
