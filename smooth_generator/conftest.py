import pytest
from faker import Faker

from smooth_generator.catalog import StoreCatalog
from smooth_generator.config import Settings
from smooth_generator.generators import GenerationResult, GeneratorRegistry
from smooth_generator.jobs import BatchDriver, BatchProcessingController, JobStore
from smooth_generator.jobs.store import JOB_TYPE
from smooth_generator.options import InMemoryOptions


class FakeGenerator:
    """Stands in for a real generator: hands out sequential ids, or fails on demand."""

    def __init__(self, max_batch_size: int = 100):
        self.max_batch_size = max_batch_size
        self.calls = []
        self.fail_with = None
        self.raise_with = None
        self.report = None  # override the reported count
        self._next_id = 1

    def bulk_generate(self, amount, parameters=None):
        self.calls.append((amount, dict(parameters or {})))
        if self.raise_with:
            raise self.raise_with
        if self.fail_with:
            return GenerationResult.failure(self.fail_with)
        count = amount if self.report is None else self.report
        ids = list(range(self._next_id, self._next_id + count))
        self._next_id += count
        return GenerationResult.success(ids)


@pytest.fixture
def options():
    return InMemoryOptions()


@pytest.fixture
def controller(options):
    return BatchProcessingController(options, max_consecutive_failures=3)


@pytest.fixture
def store(options, controller):
    return JobStore(options, controller)


@pytest.fixture
def fake_generator():
    return FakeGenerator(max_batch_size=100)


@pytest.fixture
def registry(fake_generator):
    registry = GeneratorRegistry()
    registry.register("widgets", fake_generator)
    return registry


@pytest.fixture
def driver(store, registry, controller):
    driver = BatchDriver(store, registry)
    controller.register(JOB_TYPE, driver)
    return driver


@pytest.fixture
def catalog():
    catalog = StoreCatalog(":memory:")
    yield catalog
    catalog.close()


@pytest.fixture
def settings():
    return Settings(seed=1234)


@pytest.fixture
def fake():
    fake = Faker()
    fake.seed_instance(1234)
    return fake
