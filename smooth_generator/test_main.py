import polars as pl
import pytest
import yaml
from fastapi import FastAPI

from smooth_generator.main import display_time, main


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.delenv("SMOOTHGEN_DB_PATH", raising=False)
    monkeypatch.delenv("SMOOTHGEN_SEED", raising=False)
    path = tmp_path / "smoothgenerator.yaml"
    with open(path, "w") as f:
        yaml.dump({
            "db_path": str(tmp_path / "warehouse" / "store.duckdb"),
            "seed": 99,
            "generators": {"coupons": {"max_batch_size": 20}},
        }, f)
    return str(path)


def run(config, *argv):
    return main(["--config", config, *argv])


def test_display_time():
    assert display_time(1.234) == "1.23 seconds"
    assert display_time(61) == "1 min"
    assert display_time(600) == "10 mins"


# --- Direct generation ---

def test_generate_coupons_directly(config, capsys):
    assert run(config, "coupons", "5", "--min", "10", "--max", "20") == 0

    out = capsys.readouterr().out
    assert "Generating 5 coupons..." in out
    assert "Success: 5 coupons generated in" in out


def test_terms_amount_is_capped(config, capsys):
    assert run(config, "terms", "101") == 1
    assert "Amount cannot be over 100." in capsys.readouterr().out


def test_generator_errors_are_printed(config, capsys):
    assert run(config, "customers", "3", "--country", "XX") == 1
    assert 'Error: No data for a country with country code "XX"' in capsys.readouterr().out


def test_invalid_choice_exits(config):
    with pytest.raises(SystemExit):
        run(config, "products", "5", "--type", "grouped")


# --- Background job ---

def test_job_lifecycle(config, capsys):
    assert run(config, "job", "start", "coupons", "50", "--param", "min=5", "--param", "max=50") == 0
    assert "Started: 50 coupons" in capsys.readouterr().out

    assert run(config, "job", "start", "customers", "5") == 1
    assert "already in progress" in capsys.readouterr().out

    run(config, "job", "status")
    assert "coupons: 0/50 processed, 50 pending" in capsys.readouterr().out

    assert run(config, "job", "run", "--max-iterations", "1") == 0
    assert "Paused: 20/50 coupons processed" in capsys.readouterr().out

    assert run(config, "job", "run") == 0
    assert "Success: 30 coupons generated" in capsys.readouterr().out

    run(config, "job", "status")
    assert "No job in progress." in capsys.readouterr().out


def test_job_cancel(config, capsys):
    run(config, "job", "start", "coupons", "10")
    capsys.readouterr()

    run(config, "job", "cancel")
    assert "Job cancelled." in capsys.readouterr().out

    run(config, "job", "cancel")
    assert "No job to cancel." in capsys.readouterr().out


def test_job_start_errors(config, capsys):
    assert run(config, "job", "start", "reviews", "5") == 1
    assert 'A generator for "reviews" can\'t be found.' in capsys.readouterr().out

    assert run(config, "job", "start", "coupons", "5", "--param", "min") == 1
    assert "key=value" in capsys.readouterr().out


def test_failing_job_reports_the_error(config, capsys):
    run(config, "job", "start", "coupons", "10", "--param", "min=50", "--param", "max=10")

    assert run(config, "job", "run") == 1
    assert "greater than or equal to the minimum amount" in capsys.readouterr().out


# --- Export ---

def test_export_parquet_and_ndjson(config, tmp_path, capsys):
    run(config, "coupons", "4")

    parquet = tmp_path / "coupons.parquet"
    assert run(config, "export", "coupon", str(parquet)) == 0
    assert pl.read_parquet(parquet).height == 4

    ndjson = tmp_path / "coupons.jsonl"
    run(config, "export", "coupon", str(ndjson))
    assert pl.read_ndjson(ndjson)["code"].len() == 4
    assert "Exported 4 coupon rows" in capsys.readouterr().out


def test_export_of_nothing(config, tmp_path, capsys):
    assert run(config, "export", "order", str(tmp_path / "orders.parquet")) == 0
    assert "No order objects to export." in capsys.readouterr().out


# --- Serving ---

def test_serve_runs_the_admin_api(config, monkeypatch, capsys):
    monkeypatch.delenv("SMOOTHGEN_HOST", raising=False)
    monkeypatch.delenv("SMOOTHGEN_PORT", raising=False)
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    assert run(config, "serve", "--port", "9001") == 0

    app, kwargs = calls[0]
    assert isinstance(app, FastAPI)
    assert kwargs == {"host": "127.0.0.1", "port": 9001}
    assert "http://127.0.0.1:9001" in capsys.readouterr().out
