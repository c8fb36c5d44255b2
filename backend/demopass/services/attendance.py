"""
Attendance Service - records demo pass scans.

A scan payload is either the raw enrollment token printed as the QR code,
or the structured demo pass payload {"enrollmentId": ..., ...} (as a
mapping or as its JSON text). Each enrollment can be marked at most once
per UTC calendar day: the existence check gives the friendly error, the
unique constraint on (enrollment_id, attendance_date) is what holds under
concurrent scans.
"""

import json
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from demopass.errors import ConflictError, NotFoundError, ValidationError
from demopass.logging_config import get_logger, log_with_context
from demopass.models import Attendance, Batch, DemoEnrollment
from demopass.validators import day_window, utc_now

logger = get_logger("attendance")

INVALID_QR_MESSAGE = "Invalid QR code. Enrollment not found."
ALREADY_MARKED_MESSAGE = "Attendance already marked for today"


def _structured_payload(payload) -> Optional[dict]:
    """Return the payload as a mapping if it is one, or is JSON object text."""
    if isinstance(payload, dict):
        return payload
    text = payload.strip()
    if text.startswith("{"):
        try:
            decoded = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return None
        if isinstance(decoded, dict):
            return decoded
    return None


def resolve_enrollment(db: Session, payload) -> Optional[DemoEnrollment]:
    """
    Find the enrollment a scan payload refers to.

    Returns None when nothing matches.

    Raises:
        ValidationError: the payload is empty or of an unsupported type
    """
    if payload is None or (isinstance(payload, str) and not payload.strip()):
        raise ValidationError("qrCodeData is required")
    if not isinstance(payload, (str, dict)):
        raise ValidationError("qrCodeData must be a string or an object")

    structured = _structured_payload(payload)
    if structured is not None:
        enrollment_id = structured.get("enrollmentId")
        if not enrollment_id:
            return None
        return db.get(DemoEnrollment, str(enrollment_id))

    return db.query(DemoEnrollment).filter(
        DemoEnrollment.qr_code_data == payload.strip()
    ).first()


def mark_attendance(db: Session, qr_code_data, now: datetime = None) -> Attendance:
    """
    Mark attendance for the enrollment behind a scanned demo pass.

    Args:
        db: Database session
        qr_code_data: Raw token string, or structured payload with enrollmentId
        now: Scan time, defaults to the current time; naive values are UTC

    Returns:
        The new Attendance with enrollment, batch and student loaded

    Raises:
        NotFoundError: the payload does not resolve to an enrollment
        ConflictError: already marked on this UTC day (HTTP 400)
    """
    enrollment = resolve_enrollment(db, qr_code_data)
    if not enrollment:
        log_with_context(logger, "INFO", "Scan with unknown QR code")
        raise NotFoundError(INVALID_QR_MESSAGE)

    now = now or utc_now()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    today, tomorrow = day_window(now)

    context = {
        "enrollment_id": str(enrollment.id),
        "batch_id": str(enrollment.batch_id),
        "student_id": str(enrollment.student_id)
    }

    existing = db.query(Attendance).filter(
        Attendance.enrollment_id == enrollment.id,
        Attendance.attendance_date >= today,
        Attendance.attendance_date < tomorrow
    ).first()
    if existing:
        log_with_context(logger, "INFO", "Duplicate scan for {}".format(today.date().isoformat()),
                         context=context)
        raise ConflictError(ALREADY_MARKED_MESSAGE, status_code=400)

    attendance = Attendance(
        enrollment_id=enrollment.id,
        batch_id=enrollment.batch_id,
        student_id=enrollment.student_id,
        attendance_date=today,
        scan_time=now
    )
    db.add(attendance)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent scan of the same pass won the insert
        db.rollback()
        log_with_context(logger, "WARNING", "Concurrent duplicate scan rejected by constraint",
                         context=context)
        raise ConflictError(ALREADY_MARKED_MESSAGE, status_code=400)

    log_with_context(logger, "INFO",
        "Attendance marked for {}".format(today.date().isoformat()),
        context=context,
        extra_data={"scan_time": now.isoformat()})

    return db.query(Attendance).options(
        joinedload(Attendance.enrollment).joinedload(DemoEnrollment.batch),
        joinedload(Attendance.enrollment).joinedload(DemoEnrollment.student)
    ).filter(Attendance.id == attendance.id).one()


def list_batch_attendance(db: Session, batch_id: str) -> list:
    """
    Attendance records of a batch with their students, latest scan first.

    Raises:
        NotFoundError: no batch has this id
    """
    if not db.get(Batch, batch_id):
        raise NotFoundError("Batch not found")

    return db.query(Attendance).options(
        joinedload(Attendance.student)
    ).filter(
        Attendance.batch_id == batch_id
    ).order_by(Attendance.scan_time.desc()).all()
