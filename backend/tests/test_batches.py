from datetime import datetime

import pytest

from demopass.errors import ConflictError, NotFoundError, ValidationError
from demopass.services import batches as batch_service


def test_create_batch_round_trips_demo_dates_in_order(client):
    payload = {
        "batchId": "B-ORDER",
        "description": "Ordering check",
        "demoDates": ["2024-05-01", "2024-05-02", "2024-05-03"],
    }
    response = client.post("/api/batches", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["demoDates"] == ["2024-05-01", "2024-05-02", "2024-05-03"]

    fetched = client.get("/api/batches/{}".format(body["data"]["id"])).json()
    assert fetched["data"]["demoDates"] == ["2024-05-01", "2024-05-02", "2024-05-03"]
    assert fetched["data"]["batchId"] == "B-ORDER"


def test_create_batch_accepts_iso_datetimes(client):
    payload = {
        "batchId": "B-ISO",
        "description": "Dates from a date picker",
        "demoDates": ["2024-05-03T00:00:00.000Z", "2024-05-01"],
    }
    body = client.post("/api/batches", json=payload).json()
    assert body["data"]["demoDates"] == ["2024-05-03", "2024-05-01"]


def test_duplicate_batch_code_is_rejected(client, batch_payload):
    assert client.post("/api/batches", json=batch_payload).status_code == 201
    response = client.post("/api/batches", json=batch_payload)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "A batch with this ID already exists"}


def test_create_batch_requires_description(client):
    response = client.post("/api/batches", json={"batchId": "B2", "demoDates": []})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_batch_rejects_bad_date(db):
    with pytest.raises(ValidationError):
        batch_service.create_batch(db, "B3", "Bad dates", ["not-a-date"])


def test_list_batches_newest_first(db, client):
    older = batch_service.create_batch(db, "OLD", "Older batch", ["2024-05-01"])
    batch_service.create_batch(db, "NEW", "Newer batch", ["2024-05-02"])
    older.created_at = datetime(2020, 1, 1)
    db.commit()

    body = client.get("/api/batches").json()
    assert body["count"] == 2
    assert [b["batchId"] for b in body["data"]] == ["NEW", "OLD"]


def test_get_batch_by_code(client, batch_payload):
    client.post("/api/batches", json=batch_payload)
    response = client.get("/api/batches/code/B1")
    assert response.status_code == 200
    assert response.json()["data"]["description"] == "Python demo week"


def test_unknown_batch_is_not_found(client):
    for path in ("/api/batches/missing", "/api/batches/code/missing"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Batch not found"}


def test_update_batch_description_and_dates(client, batch_payload):
    created = client.post("/api/batches", json=batch_payload).json()["data"]
    response = client.put(
        "/api/batches/{}".format(created["id"]),
        json={"description": "Rescheduled", "demoDates": ["2024-06-01"]},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["description"] == "Rescheduled"
    assert data["demoDates"] == ["2024-06-01"]
    assert data["batchId"] == "B1"


def test_update_cannot_change_batch_code(db):
    batch = batch_service.create_batch(db, "KEEP", "Fixed code", ["2024-05-01"])
    with pytest.raises(ValidationError):
        batch_service.update_batch(db, batch.id, batch_code="CHANGED")
    # Sending the same code back is fine
    updated = batch_service.update_batch(db, batch.id, batch_code="KEEP", description="Still fixed")
    assert updated.description == "Still fixed"


def test_delete_batch_removes_enrollments(client, batch_payload, student_payload):
    created = client.post("/api/batches", json=batch_payload).json()["data"]
    enrollment = client.post("/api/enrollments", json=student_payload()).json()["data"]

    response = client.delete("/api/batches/{}".format(created["id"]))
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Batch deleted successfully"
    assert body["data"]["batchId"] == "B1"

    assert client.get("/api/batches/{}".format(created["id"])).status_code == 404
    assert client.get("/api/enrollments/{}".format(enrollment["id"])).status_code == 404


def test_delete_unknown_batch(db):
    with pytest.raises(NotFoundError):
        batch_service.delete_batch(db, "missing")


def test_duplicate_code_conflict_uses_http_400(db):
    batch_service.create_batch(db, "DUP", "First", ["2024-05-01"])
    with pytest.raises(ConflictError) as excinfo:
        batch_service.create_batch(db, "  DUP ", "Second", ["2024-05-01"])
    assert excinfo.value.status_code == 400


def test_batch_code_longer_than_column_is_rejected(client):
    response = client.post("/api/batches", json={
        "batchId": "B" * 101,
        "description": "Too long",
        "demoDates": ["2024-05-01"],
    })
    assert response.status_code == 400
    assert response.json()["message"] == "batchId must be at most 100 characters"

    ok = client.post("/api/batches", json={
        "batchId": "B" * 100,
        "description": "Longest allowed",
        "demoDates": ["2024-05-01"],
    })
    assert ok.status_code == 201
