from fastapi.testclient import TestClient
from receiving.main import app


def test_health_ok():
    with TestClient(app) as c:
        r = c.get("/health")

    assert r.status_code == 200
    assert r.headers.get("content-type", "").startswith("application/json")
    data = r.json()
    assert data.get("ok") is True
    assert data["data"]["service"] == "Inbound Receiving"


def test_db_ping():
    with TestClient(app) as c:
        r = c.get("/db-ping")
    assert r.status_code == 200
    assert r.json()["data"]["select1"] == 1
