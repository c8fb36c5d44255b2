import json
import logging

from fastapi.testclient import TestClient

from demopass.database import get_db
from demopass.logging_config import StructuredJsonFormatter, get_logger, request_id_var
from demopass.main import app
from demopass.services import batches as batch_service


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_header(client):
    response = client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 36


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_malformed_body_is_a_validation_error(client):
    response = client.post("/api/batches", json={"batchId": "B1", "description": "x", "demoDates": "soon"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Invalid request"
    assert "demoDates" in body["error"]


def test_formatter_emits_channel_and_request_id():
    logger = get_logger("attendance")
    record = logger.makeRecord(
        logger.name, logging.INFO, __file__, 1, "Attendance marked", None, None,
        extra={"context": {"enrollment_id": "e1"}, "extra_data": {"count": 1}, "channel": "attendance"},
    )
    token = request_id_var.set("req-1")
    try:
        entry = json.loads(StructuredJsonFormatter().format(record))
    finally:
        request_id_var.reset(token)

    assert entry["channel"] == "attendance"
    assert entry["message"] == "Attendance marked"
    assert entry["context"] == {"request_id": "req-1", "enrollment_id": "e1"}
    assert entry["extra"] == {"count": 1}


def test_unexpected_error_returns_opaque_500(session_factory, monkeypatch, caplog):
    def broken_list(db):
        raise RuntimeError("connection reset by peer")

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(batch_service, "list_batches", broken_list)
    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            with caplog.at_level(logging.ERROR, logger="demopass.http"):
                response = client.get("/api/batches")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}
    assert "connection reset" not in response.text

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors and errors[-1].exc_info is not None
    assert "RuntimeError" in StructuredJsonFormatter().format(errors[-1])
