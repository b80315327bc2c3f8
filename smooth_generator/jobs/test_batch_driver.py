import logging

import pytest

from smooth_generator.errors import GenerationError, ProcessingError, UnknownGenerator
from smooth_generator.jobs import BatchDescriptor


def test_processor_labels(driver):
    assert driver.name == "Smooth Generator"
    assert driver.description


# --- Pending & batch sizing ---

def test_nothing_pending_without_a_job(driver):
    assert driver.total_pending() == 0
    assert driver.next_batch(100) is None
    assert driver.default_batch_size() == 0


def test_default_batch_size_is_the_generator_cap(driver, store, fake_generator):
    fake_generator.max_batch_size = 40
    store.create("widgets", 500)
    assert driver.default_batch_size() == 40


def test_default_batch_size_is_zero_for_an_unknown_key(driver, store):
    store.create("gizmos", 10)
    assert driver.default_batch_size() == 0
    assert driver.next_batch(10) is None


@pytest.mark.parametrize("requested, pending, cap, expected", [
    (1000, 250, 100, 100),
    (30, 250, 100, 30),
    (1000, 7, 100, 7),
    (0, 250, 100, None),
    (-5, 250, 100, None),
])
def test_next_batch_is_the_smallest_limit(driver, store, fake_generator, requested, pending, cap, expected):
    fake_generator.max_batch_size = cap
    store.create("widgets", pending, {"type": "simple"})

    batch = driver.next_batch(requested)

    if expected is None:
        assert batch is None
    else:
        assert batch.amount == expected
        assert batch.generator_key == "widgets"
        assert batch.parameters == {"type": "simple"}


def test_next_batch_is_empty_once_nothing_is_pending(driver, store):
    store.create("widgets", 5)
    store.record_progress(5)
    assert driver.next_batch(100) is None


# --- Processing ---

def test_job_of_250_runs_in_three_batches(driver, store, fake_generator):
    store.create("widgets", 250, {})

    sizes = []
    for expected_pending in (150, 50, 0):
        batch = driver.next_batch(1000)
        sizes.append(batch.amount)
        driver.process(batch)
        job = store.get_current_and_reconcile()
        assert job.pending == expected_pending
        assert job.processed == 250 - expected_pending

    assert sizes == [100, 100, 50]
    assert [amount for amount, _ in fake_generator.calls] == [100, 100, 50]


def test_failed_batch_leaves_progress_untouched(driver, store, fake_generator):
    store.create("widgets", 10, {})
    fake_generator.fail_with = "Batch amount must be a number between 1 and 5."

    with pytest.raises(ProcessingError, match="between 1 and 5"):
        driver.process(driver.next_batch(100))

    job = store.get_current_and_reconcile()
    assert job.processed == 0
    assert job.pending == 10


def test_raising_generator_becomes_processing_error(driver, store, fake_generator):
    store.create("widgets", 10)
    fake_generator.raise_with = RuntimeError("disk full")

    with pytest.raises(ProcessingError, match="disk full") as exc_info:
        driver.process(driver.next_batch(10))

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert store.get_current_and_reconcile().processed == 0


def test_unknown_generator_fails_closed(driver, store):
    store.create("widgets", 10)

    with pytest.raises(UnknownGenerator, match='"gizmos"'):
        driver.process(BatchDescriptor(generator_key="gizmos", amount=5))

    assert store.get_current_and_reconcile().processed == 0
    assert issubclass(UnknownGenerator, GenerationError)


def test_progress_follows_the_reported_count(driver, store, fake_generator):
    store.create("widgets", 10)
    fake_generator.report = 3

    assert driver.process(driver.next_batch(10)) == 3

    job = store.get_current_and_reconcile()
    assert job.processed == 3
    assert job.pending == 7


def test_cancel_during_a_batch_drops_the_results(driver, store, fake_generator, caplog):
    store.create("widgets", 10)
    batch = driver.next_batch(10)

    original = fake_generator.bulk_generate

    def cancel_midway(amount, parameters=None):
        result = original(amount, parameters)
        store.delete_current()
        return result

    fake_generator.bulk_generate = cancel_midway

    with caplog.at_level(logging.WARNING):
        assert driver.process(batch) == 0

    assert store.get_current_and_reconcile() is None
    assert "dropping 10 results" in caplog.text


def test_complete_deletes_the_job(driver, store):
    store.create("widgets", 1)
    driver.complete()
    assert store.peek() is None
