import pytest
from fastapi.testclient import TestClient

from smooth_generator.api import create_app
from smooth_generator.config import Settings


@pytest.fixture
def app():
    settings = Settings(seed=1234, generators={"coupons": {"max_batch_size": 100}, "terms": {"max_batch_size": 5}})
    app = create_app(settings)
    yield app
    app.state.runtime.close()


@pytest.fixture
def client(app):
    return TestClient(app)


# --- Jobs ---

def test_start_job(client):
    response = client.post("/jobs", json={"generator_key": "coupons", "amount": 150, "parameters": {"min": 5}})

    assert response.status_code == 201
    assert response.json() == {"generator_key": "coupons", "amount": 150, "processed": 0, "pending": 150}


def test_only_one_job_at_a_time(client):
    client.post("/jobs", json={"generator_key": "coupons", "amount": 10})

    response = client.post("/jobs", json={"generator_key": "customers", "amount": 5})

    assert response.status_code == 409
    assert "already in progress" in response.json()["detail"]
    assert client.get("/jobs/current").json()["job"]["generator_key"] == "coupons"


def test_unknown_generator_is_not_found(client):
    response = client.post("/jobs", json={"generator_key": "reviews", "amount": 10})

    assert response.status_code == 404
    assert client.get("/jobs/current").json()["status"] == "complete"


@pytest.mark.parametrize("body", [
    {"generator_key": "coupons", "amount": 0},
    {"generator_key": "   ", "amount": 5},
    {"generator_key": "coupons"},
])
def test_invalid_start_requests(client, body):
    assert client.post("/jobs", json=body).status_code == 422


def test_cancel_is_always_ok(client):
    first = client.delete("/jobs/current")
    assert first.status_code == 200
    assert first.json() == {"cancelled": False}

    client.post("/jobs", json={"generator_key": "coupons", "amount": 10})
    second = client.delete("/jobs/current")

    assert second.json() == {"cancelled": True}
    assert client.get("/jobs/current").json()["status"] == "complete"


# --- Heartbeat ---

def test_heartbeat_advances_one_batch_at_a_time(client):
    client.post("/jobs", json={"generator_key": "coupons", "amount": 150})

    first = client.post("/heartbeat").json()
    assert first["status"] == "running"
    assert first["processed_this_tick"] == 100
    assert first["job"]["processed"] == 100
    assert first["job"]["pending"] == 50

    second = client.post("/heartbeat").json()
    assert second["status"] == "complete"
    assert second["processed_this_tick"] == 50
    assert second["job"] is None

    assert client.get("/health").json()["catalog"]["coupon"] == 150


def test_heartbeat_uses_the_generator_cap(client):
    client.post("/jobs", json={"generator_key": "terms", "amount": 12, "parameters": {"taxonomy": "product_tag"}})

    ticks = []
    while True:
        body = client.post("/heartbeat").json()
        ticks.append(body["processed_this_tick"])
        if body["status"] == "complete":
            break

    assert ticks == [5, 5, 2]


def test_heartbeat_reports_generator_errors(client):
    client.post("/jobs", json={"generator_key": "coupons", "amount": 10, "parameters": {"min": 50, "max": 10}})

    body = client.post("/heartbeat").json()

    assert body["status"] == "running"
    assert body["processed_this_tick"] == 0
    assert "minimum amount" in body["last_error"]
    assert body["job"]["processed"] == 0


def test_heartbeat_without_a_job(client):
    body = client.post("/heartbeat").json()
    assert body == {"status": "complete", "job": None, "processed_this_tick": 0, "last_error": None}


# --- Discovery ---

def test_list_generators(client):
    response = client.get("/generators")

    assert response.status_code == 200
    caps = {g["key"]: g["max_batch_size"] for g in response.json()}
    assert caps == {"coupons": 100, "customers": 100, "orders": 100, "products": 100, "terms": 5}


def test_admin_defaults(client):
    assert client.get("/admin/defaults").json() == {"default_num_products": 10, "default_num_orders": 10}


def test_health(client):
    client.post("/jobs", json={"generator_key": "coupons", "amount": 3})

    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["db_path"] == ":memory:"
    assert body["job_running"] is True
    assert body["catalog"] == {}
