import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event, insert
from sqlalchemy.exc import IntegrityError

from demopass.errors import ConflictError, NotFoundError, ValidationError
from demopass.models import Attendance
from demopass.services import attendance as attendance_service
from demopass.services import batches as batch_service
from demopass.services import enrollment as enrollment_service

MORNING = datetime(2024, 5, 1, 9, 30)


@pytest.fixture
def enrollment(db):
    batch_service.create_batch(db, "B1", "Python demo week", ["2024-05-01", "2024-05-02"])
    return enrollment_service.enroll(db, "B1", "Asha Verma", "9876543210", "asha@example.com")


def test_mark_with_raw_token(db, enrollment):
    record = attendance_service.mark_attendance(db, enrollment.qr_code_data, now=MORNING)

    assert record.attendance_date == datetime(2024, 5, 1)
    assert record.scan_time == MORNING
    assert record.batch_id == enrollment.batch_id
    assert record.student_id == enrollment.student_id
    assert record.enrollment.batch.batch_code == "B1"
    assert record.enrollment.student.name == "Asha Verma"


def test_second_scan_same_day_conflicts(db, enrollment):
    attendance_service.mark_attendance(db, enrollment.qr_code_data, now=MORNING)
    with pytest.raises(ConflictError) as excinfo:
        attendance_service.mark_attendance(db, enrollment.qr_code_data,
                                           now=datetime(2024, 5, 1, 23, 59, 59))
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Attendance already marked for today"
    assert db.query(Attendance).count() == 1


def test_scans_on_two_days_create_two_records(db, enrollment):
    first = attendance_service.mark_attendance(db, enrollment.qr_code_data, now=MORNING)
    second = attendance_service.mark_attendance(db, enrollment.qr_code_data,
                                                now=MORNING + timedelta(days=1))
    assert first.id != second.id
    assert second.attendance_date == datetime(2024, 5, 2)
    assert db.query(Attendance).count() == 2


def test_day_is_computed_in_utc(db, enrollment):
    # 23:30 in UTC-5 is already the next day in UTC
    evening = datetime(2024, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    record = attendance_service.mark_attendance(db, enrollment.qr_code_data, now=evening)
    assert record.attendance_date == datetime(2024, 5, 2)
    assert record.scan_time == datetime(2024, 5, 2, 4, 30)


def test_mark_with_structured_payload(db, enrollment):
    payload = {"enrollmentId": enrollment.id, "batchId": enrollment.batch_id, "studentName": "Asha Verma"}
    record = attendance_service.mark_attendance(db, payload, now=MORNING)
    assert record.enrollment_id == enrollment.id


def test_mark_with_structured_payload_as_json_text(db, enrollment):
    payload = json.dumps({"enrollmentId": enrollment.id})
    record = attendance_service.mark_attendance(db, payload, now=MORNING)
    assert record.enrollment_id == enrollment.id


@pytest.mark.parametrize("payload", ["0" * 32, {"enrollmentId": "missing"}, {"studentName": "x"}, "{not json"])
def test_unrecognized_payload_is_not_found(db, enrollment, payload):
    with pytest.raises(NotFoundError) as excinfo:
        attendance_service.mark_attendance(db, payload, now=MORNING)
    assert excinfo.value.message == "Invalid QR code. Enrollment not found."


@pytest.mark.parametrize("payload", [None, "", "   ", 42])
def test_empty_or_unsupported_payload(db, payload):
    with pytest.raises(ValidationError):
        attendance_service.mark_attendance(db, payload, now=MORNING)


def test_enrollment_day_uniqueness_is_enforced_by_database(db, enrollment):
    attendance_service.mark_attendance(db, enrollment.qr_code_data, now=MORNING)
    db.add(Attendance(
        enrollment_id=enrollment.id,
        batch_id=enrollment.batch_id,
        student_id=enrollment.student_id,
        attendance_date=datetime(2024, 5, 1),
        scan_time=MORNING + timedelta(minutes=1)
    ))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_scan_that_loses_the_insert_race_conflicts(db, enrollment):
    token = enrollment.qr_code_data
    row = {
        "enrollment_id": enrollment.id,
        "batch_id": enrollment.batch_id,
        "student_id": enrollment.student_id,
    }

    def concurrent_scan(session, flush_context, instances):
        # Lands after the existence check, before this scan's insert
        session.connection().execute(insert(Attendance).values(
            id=str(uuid.uuid4()),
            attendance_date=datetime(2024, 5, 1),
            scan_time=MORNING,
            **row
        ))

    event.listen(db, "before_flush", concurrent_scan, once=True)
    with pytest.raises(ConflictError) as excinfo:
        attendance_service.mark_attendance(db, token, now=MORNING + timedelta(seconds=1))
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Attendance already marked for today"

    record = attendance_service.mark_attendance(db, token, now=MORNING + timedelta(days=1))
    assert record.attendance_date == datetime(2024, 5, 2)
    assert db.query(Attendance).count() == 1


def test_mark_endpoint(client, db, enrollment):
    response = client.post("/api/attendance/mark", json={"qrCodeData": enrollment.qr_code_data})
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["attendanceDate"].endswith("T00:00:00.000Z")
    assert data["enrollment"]["batch"]["batchId"] == "B1"
    assert data["enrollment"]["student"]["name"] == "Asha Verma"
    assert data["student"] == enrollment.student_id

    again = client.post("/api/attendance/mark", json={"qrCodeData": enrollment.qr_code_data})
    assert again.status_code == 400
    assert again.json() == {"success": False, "message": "Attendance already marked for today"}


def test_mark_endpoint_unknown_code(client):
    response = client.post("/api/attendance/mark", json={"qrCodeData": "nope"})
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_list_batch_attendance_latest_scan_first(db, enrollment):
    other = enrollment_service.enroll(db, "B1", "Rohan Mehta", "9123456780", "rohan@example.com")
    attendance_service.mark_attendance(db, enrollment.qr_code_data, now=MORNING)
    attendance_service.mark_attendance(db, other.qr_code_data, now=MORNING + timedelta(hours=1))

    records = attendance_service.list_batch_attendance(db, enrollment.batch_id)
    assert [r.student.name for r in records] == ["Rohan Mehta", "Asha Verma"]


def test_attendance_by_batch_endpoint(client, db, enrollment):
    attendance_service.mark_attendance(db, enrollment.qr_code_data, now=MORNING)
    body = client.get("/api/attendance/batch/{}".format(enrollment.batch_id)).json()
    assert body["count"] == 1
    assert body["data"][0]["studentName"] == "Asha Verma"
    assert body["data"][0]["scanTime"] == "2024-05-01T09:30:00.000Z"

    assert client.get("/api/attendance/batch/missing").status_code == 404
