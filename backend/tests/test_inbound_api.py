import pytest
from fastapi.testclient import TestClient

from receiving.core.config import Settings
from receiving.main import app
from receiving.routers.inbound import get_registry
from receiving.services.workflow_service import WorkflowRegistry

from conftest import make_receipt

BASE = "/inbound-receipts/r-1"


@pytest.fixture
def registry(store, storage):
    store.create_receipt(make_receipt())
    settings = Settings(
        database_url="sqlite://",
        photo_dir="unused",
        photo_base_url="/photos",
        detail_slot_max_photos=20,
        allow_acknowledged_discrepancy=True,
        log_level="INFO",
        cors_allow_origins=["*"],
    )
    return WorkflowRegistry(store, storage, settings)


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def slots(client):
    return {s["key"]: s for s in client.get(BASE).json()["data"]["slots"]}


def upload(client, slot_id, source="camera"):
    return client.post(
        f"{BASE}/slots/{slot_id}/photos",
        files={"file": ("p.jpg", b"\xff\xd8jpeg", "image/jpeg")},
        data={"source": source},
        headers={"X-Actor": "worker-1"},
    )


def fill_photos(client):
    for s in slots(client).values():
        r = upload(client, s["slot_id"])
        assert r.status_code == 201, r.text


def test_get_receipt_snapshot(client):
    r = client.get(BASE)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "DRAFT"
    assert data["current_step"] == 1
    assert data["steps"] == {"1": "unlocked", "2": "locked", "3": "locked", "4": "locked"}
    assert [ln["line_id"] for ln in data["lines"]] == ["pl-a", "pl-b"]


def test_unknown_receipt_is_404(client):
    r = client.get("/inbound-receipts/nope")
    assert r.status_code == 404
    assert r.json()["ok"] is False


def test_upload_and_capacity(client):
    left = slots(client)["VEHICLE_LEFT"]["slot_id"]
    r = upload(client, left)
    assert r.status_code == 201
    body = r.json()["data"]
    assert body["slot"] == {"slot_id": left, "uploaded_count": 1, "required": 1, "max_photos": 1, "ok": True}
    assert body["photo"]["url"].startswith("memory://inbound/")

    r = upload(client, left, source="album")
    assert r.status_code == 409
    assert r.json()["ok"] is False
    assert r.json()["meta"] == {"slot_key": "VEHICLE_LEFT", "max_photos": 1}

    r = upload(client, left, source="fax")
    assert r.status_code == 422

    listed = client.get(f"{BASE}/slots/{left}/photos").json()
    assert listed["meta"]["count"] == 1


def test_delete_photo(client):
    left = slots(client)["VEHICLE_LEFT"]["slot_id"]
    photo_id = upload(client, left).json()["data"]["photo"]["id"]
    r = client.delete(f"{BASE}/photos/{photo_id}")
    assert r.status_code == 200
    assert r.json()["data"]["slot"]["uploaded_count"] == 0
    assert client.get(f"{BASE}/slots/{left}").json()["uploaded_count"] == 0


def test_navigate_is_clamped(client):
    r = client.post(f"{BASE}/navigate", json={"step": 3})
    assert r.status_code == 200
    assert r.json()["step"] == 1
    assert r.json()["clamped"] is True

    r = client.post(f"{BASE}/navigate", json={"step": 5})
    assert r.status_code == 422


def test_quantities_locked_before_photos(client):
    r = client.put(f"{BASE}/lines/pl-a", json={"received": 10})
    assert r.status_code == 409
    assert r.json()["meta"]["max_accessible_step"] == 1
    r = client.post(f"{BASE}/scan", json={"code": "A"})
    assert r.status_code == 409


def test_count_scan_and_confirm_with_discrepancy(client, store):
    fill_photos(client)

    r = client.put(f"{BASE}/lines/pl-a", json={"received": 9})
    assert r.json()["data"] == {"line_id": "pl-a", "ok": False, "delta": -1}
    for _ in range(5):
        assert client.post(f"{BASE}/scan", json={"code": "880000000002"}).status_code == 200

    r = client.post(f"{BASE}/scan", json={"code": "unknown"})
    assert r.status_code == 404

    r = client.post(f"{BASE}/lines/save")
    assert r.json()["data"]["status"] == "COUNTING"

    r = client.post(f"{BASE}/confirm", json={})
    assert r.status_code == 422
    body = r.json()
    assert body["meta"]["discrepancies"][0]["delta"] == -1
    assert body["meta"]["delta"] == -1

    r = client.post(f"{BASE}/confirm", json={"acknowledge_discrepancy": True}, headers={"X-Actor": "lead-1"})
    assert r.status_code == 200
    assert r.json()["status"] == "CONFIRMED"
    assert r.json()["has_issue"] is True

    r = client.put(f"{BASE}/lines/pl-a", json={"received": 10})
    assert r.status_code == 409

    r = client.post(f"{BASE}/putaway-ready")
    assert r.json()["data"]["status"] == "PUTAWAY_READY"
    assert store.load_receipt("r-1").status == "PUTAWAY_READY"


def test_confirm_without_photos_lists_missing_slots(client):
    r = client.post(f"{BASE}/confirm", json={})
    assert r.status_code == 422
    assert len(r.json()["meta"]["missing_slots"]) == 6


def test_reload_drops_unsaved_quantities(client):
    fill_photos(client)
    client.put(f"{BASE}/lines/pl-a", json={"received": 4})
    r = client.post(f"{BASE}/reload")
    lines = r.json()["data"]["lines"]
    assert lines[0]["received_qty"] == 0


def test_storage_failure_maps_to_502(client, storage):
    from receiving.domain.errors import TransportError

    storage.fail_next = TransportError("bucket down")
    left = slots(client)["VEHICLE_LEFT"]["slot_id"]
    assert upload(client, left).status_code == 502
    assert slots(client)["VEHICLE_LEFT"]["uploaded_count"] == 0


def test_finalized_receipts_leave_the_registry(client, registry):
    fill_photos(client)
    client.put(f"{BASE}/lines/pl-a", json={"received": 10})
    client.put(f"{BASE}/lines/pl-b", json={"received": 5})
    assert "r-1" in registry

    assert client.post(f"{BASE}/confirm", json={}).status_code == 200
    assert "r-1" not in registry

    # reads come straight from the store and are not cached again
    assert client.get(BASE).json()["data"]["status"] == "CONFIRMED"
    assert "r-1" not in registry

    assert client.post(f"{BASE}/putaway-ready").json()["data"]["status"] == "PUTAWAY_READY"
    assert "r-1" not in registry


def test_upload_route_runs_in_threadpool():
    import inspect

    from receiving.routers.inbound import upload_photo

    assert not inspect.iscoroutinefunction(upload_photo)
