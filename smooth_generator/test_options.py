import pytest

from smooth_generator.options import DuckDBOptions, InMemoryOptions


@pytest.fixture(params=["memory", "duckdb"])
def backend(request, tmp_path):
    if request.param == "memory":
        yield InMemoryOptions()
    else:
        store = DuckDBOptions(str(tmp_path / "options.duckdb"))
        yield store
        store.close()


def test_missing_key(backend):
    assert backend.get("nope") is None
    assert backend.delete("nope") is False


def test_add_is_insert_if_absent(backend):
    assert backend.add("job", {"amount": 1}) is True
    assert backend.add("job", {"amount": 2}) is False
    assert backend.get("job").value == {"amount": 1}
    assert backend.get("job").version == 1


def test_compare_and_swap_checks_the_version(backend):
    backend.add("job", {"processed": 0})

    assert backend.compare_and_swap("job", 1, {"processed": 5}) is True
    assert backend.compare_and_swap("job", 1, {"processed": 9}) is False

    stored = backend.get("job")
    assert stored.value == {"processed": 5}
    assert stored.version == 2


def test_compare_and_swap_on_a_missing_key_fails(backend):
    assert backend.compare_and_swap("job", 1, {"x": 1}) is False
    assert backend.get("job") is None


def test_set_upserts_and_bumps_the_version(backend):
    backend.set("k", [1])
    backend.set("k", [1, 2])
    assert backend.get("k") == ([1, 2], 2)


def test_values_come_back_as_copies(backend):
    value = {"parameters": {"type": "simple"}}
    backend.add("job", value)
    value["parameters"]["type"] = "variable"

    fetched = backend.get("job").value
    fetched["parameters"]["type"] = "changed"

    assert backend.get("job").value == {"parameters": {"type": "simple"}}


def test_duckdb_options_survive_a_reopen(tmp_path):
    path = str(tmp_path / "options.duckdb")
    first = DuckDBOptions(path)
    first.add("smoothgenerator_async_job", {"generator_key": "orders", "pending": 3})
    first.close()

    second = DuckDBOptions(path)
    assert second.get("smoothgenerator_async_job").value["pending"] == 3
    second.close()
