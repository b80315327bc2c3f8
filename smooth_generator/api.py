"""
Smooth Generator Admin API

Endpoints:
  Jobs:
    POST   /jobs            — Start a background generation job
    GET    /jobs/current    — Progress of the current job, or "complete"
    DELETE /jobs/current    — Cancel the current job (no-op when there is none)
    POST   /heartbeat       — Run one controller poll, then report progress

  Discovery:
    GET    /generators      — Registered generators and their batch caps
    GET    /admin/defaults  — Default amounts for the admin form
    GET    /health          — Liveness plus catalog counts

There is no cron here: whoever shows the progress (an admin page, a script)
keeps calling /heartbeat, and each call advances the job by one batch.
"""
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request

from smooth_generator.config import Settings
from smooth_generator.errors import JobAlreadyExists
from smooth_generator.jobs.store import JOB_TYPE
from smooth_generator.models import (
    AdminDefaults, CancelResponse, GeneratorInfo, HealthResponse, HeartbeatResponse, JobProgress,
    StartJobRequest,
)
from smooth_generator.runtime import Runtime, build_runtime

logger = logging.getLogger(__name__)


# --- Helpers ---

def _runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def _progress(runtime: Runtime, processed_this_tick: int = 0) -> HeartbeatResponse:
    job = runtime.store.get_current_and_reconcile()
    last_error = runtime.controller.last_errors.get(JOB_TYPE)
    if job is None:
        return HeartbeatResponse(status="complete", processed_this_tick=processed_this_tick, last_error=last_error)
    return HeartbeatResponse(
        status="running",
        job=JobProgress(**job.model_dump(include={"generator_key", "amount", "processed", "pending"})),
        processed_this_tick=processed_this_tick,
        last_error=last_error,
    )


def create_app(settings: Optional[Settings] = None, runtime: Optional[Runtime] = None) -> FastAPI:
    app = FastAPI(title="Smooth Generator API", version="1.2.0")
    app.state.runtime = runtime or build_runtime(settings)

    # ═══════════════════════════════════════════════════════════════
    # JOBS
    # ═══════════════════════════════════════════════════════════════

    @app.post("/jobs", response_model=JobProgress, status_code=201)
    def start_job(body: StartJobRequest, request: Request):
        rt = _runtime(request)
        if body.generator_key not in rt.registry:
            raise HTTPException(
                status_code=404,
                detail=f'A generator for "{body.generator_key}" can\'t be found.',
            )
        try:
            job = rt.store.create(body.generator_key, body.amount, body.parameters)
        except JobAlreadyExists as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        logger.info(f"[API] Started {job.generator_key} job for {job.amount} items")
        return JobProgress(**job.model_dump(include={"generator_key", "amount", "processed", "pending"}))

    @app.get("/jobs/current", response_model=HeartbeatResponse)
    def current_job(request: Request):
        return _progress(_runtime(request))

    @app.delete("/jobs/current", response_model=CancelResponse)
    def cancel_job(request: Request):
        rt = _runtime(request)
        had_job = rt.store.peek() is not None
        rt.store.delete_current()
        if had_job:
            logger.info("[API] Current job cancelled")
        return CancelResponse(cancelled=had_job)

    @app.post("/heartbeat", response_model=HeartbeatResponse)
    def heartbeat(request: Request):
        rt = _runtime(request)
        processed = rt.controller.tick().get(JOB_TYPE, 0)
        return _progress(rt, processed_this_tick=processed)

    # ═══════════════════════════════════════════════════════════════
    # DISCOVERY
    # ═══════════════════════════════════════════════════════════════

    @app.get("/generators", response_model=list[GeneratorInfo])
    def list_generators(request: Request):
        registry = _runtime(request).registry
        return [GeneratorInfo(key=key, max_batch_size=registry.get(key).max_batch_size) for key in registry.keys()]

    @app.get("/admin/defaults", response_model=AdminDefaults)
    def admin_defaults(request: Request):
        admin = _runtime(request).settings.admin
        return AdminDefaults(
            default_num_products=admin.default_num_products,
            default_num_orders=admin.default_num_orders,
        )

    @app.get("/health", response_model=HealthResponse)
    def health(request: Request):
        rt = _runtime(request)
        return HealthResponse(
            status="ok",
            db_path=rt.settings.db_path,
            job_running=rt.store.peek() is not None,
            catalog=rt.catalog.summary(),
        )

    return app
