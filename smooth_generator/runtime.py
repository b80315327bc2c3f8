"""
Runtime wiring: builds the object graph both entry points (API and CLI)
share, from one Settings object:

    StoreCatalog ─┬─ GeneratorRegistry
                  └─ DuckDBOptions ─┬─ BatchProcessingController
                                    └─ JobStore ── BatchDriver (registered on the controller)

Catalog and options live in the same DuckDB database; the options store
gets its own cursor so the two never share a connection object.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from smooth_generator.catalog import StoreCatalog
from smooth_generator.config import Settings, load_settings
from smooth_generator.generators import GeneratorRegistry, build_registry
from smooth_generator.jobs import BatchDriver, BatchProcessingController, JobStore
from smooth_generator.jobs.store import JOB_TYPE
from smooth_generator.options import DuckDBOptions

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    catalog: StoreCatalog
    options: DuckDBOptions
    controller: BatchProcessingController
    registry: GeneratorRegistry
    store: JobStore
    driver: BatchDriver

    def close(self) -> None:
        self.options.close()
        self.catalog.close()


def build_runtime(settings: Optional[Settings] = None) -> Runtime:
    settings = settings or load_settings()

    if settings.db_path != ":memory:":
        Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)

    catalog = StoreCatalog(settings.db_path)
    options = DuckDBOptions(settings.db_path, connection=catalog.connection.cursor())
    controller = BatchProcessingController(
        options,
        max_consecutive_failures=settings.scheduler.max_consecutive_failures,
    )
    registry = build_registry(catalog, settings)
    store = JobStore(options, controller, max_cas_retries=settings.scheduler.max_cas_retries)
    driver = BatchDriver(store, registry)
    controller.register(JOB_TYPE, driver)

    logger.info(f"[Runtime] Ready (db: {settings.db_path}, seed: {settings.seed})")
    return Runtime(
        settings=settings,
        catalog=catalog,
        options=options,
        controller=controller,
        registry=registry,
        store=store,
        driver=driver,
    )
