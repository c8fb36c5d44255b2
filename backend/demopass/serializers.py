"""
Serialization of ORM objects into API response dicts.

Field names follow the JSON API (camelCase). Timestamps are ISO 8601 UTC
with a Z suffix; demo dates and attendance days are plain YYYY-MM-DD.
"""

from demopass.models import Attendance, Batch, DemoEnrollment, Student
from demopass.validators import isoformat_utc


def serialize_batch(batch: Batch) -> dict:
    return {
        "id": str(batch.id),
        "batchId": batch.batch_code,
        "description": batch.description,
        "demoDates": [d.isoformat() for d in batch.demo_date_list],
        "createdAt": isoformat_utc(batch.created_at),
    }


def serialize_student(student: Student) -> dict:
    return {
        "id": str(student.id),
        "name": student.name,
        "mobileNumber": student.mobile_number,
        "email": student.email,
        "createdAt": isoformat_utc(student.created_at),
    }


def serialize_enrollment(enrollment: DemoEnrollment) -> dict:
    """Serialize an enrollment with its batch and student populated."""
    return {
        "id": str(enrollment.id),
        "batch": serialize_batch(enrollment.batch) if enrollment.batch else None,
        "student": serialize_student(enrollment.student) if enrollment.student else None,
        "qrCodeData": enrollment.qr_code_data,
        "isWalkIn": bool(enrollment.is_walk_in),
        "createdAt": isoformat_utc(enrollment.created_at),
    }


def serialize_attendance(attendance: Attendance) -> dict:
    """
    Serialize an attendance record.

    The enrollment is populated (with its batch and student); the copied
    batch and student references are returned as ids.
    """
    return {
        "id": str(attendance.id),
        "enrollment": serialize_enrollment(attendance.enrollment) if attendance.enrollment else None,
        "batch": str(attendance.batch_id),
        "student": str(attendance.student_id),
        "attendanceDate": isoformat_utc(attendance.attendance_date),
        "scanTime": isoformat_utc(attendance.scan_time),
    }


def serialize_attendance_entry(attendance: Attendance) -> dict:
    """Flat row for batch attendance listings."""
    return {
        "id": str(attendance.id),
        "studentId": str(attendance.student_id),
        "studentName": attendance.student.name if attendance.student else "Unknown",
        "attendanceDate": isoformat_utc(attendance.attendance_date),
        "scanTime": isoformat_utc(attendance.scan_time),
    }
