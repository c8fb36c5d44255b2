"""
Reporting Service - read-only attendance aggregations for charts and tables.

Percentages are computed as:
    attendance records / (enrolled students x scheduled demo dates) x 100
rounded half up to an integer, and reported as 0 when either factor of the
denominator is 0. Attendance days are compared as UTC calendar dates.
"""

import math
from collections import OrderedDict
from sqlalchemy.orm import Session, joinedload

from demopass.errors import NotFoundError
from demopass.logging_config import get_logger, log_with_context
from demopass.models import Attendance, Batch, DemoEnrollment
from demopass.serializers import serialize_batch
from demopass.validators import isoformat_utc

logger = get_logger("reports")


def attendance_percentage(attended: int, possible: int) -> int:
    """Integer percentage rounded half up; 0 when nothing was possible."""
    if possible <= 0:
        return 0
    return int(math.floor(attended / possible * 100 + 0.5))


def date_label(day) -> str:
    """Short chart label such as 'May 1'."""
    return "{} {}".format(day.strftime("%b"), day.day)


def _get_batch(db: Session, batch_id: str) -> Batch:
    batch = db.get(Batch, batch_id)
    if not batch:
        raise NotFoundError("Batch not found")
    return batch


def _get_batch_by_code(db: Session, batch_code: str) -> Batch:
    batch = db.query(Batch).filter(Batch.batch_code == batch_code).first()
    if not batch:
        raise NotFoundError("Batch not found")
    return batch


def _batch_totals(db: Session, batch: Batch) -> dict:
    total_students = db.query(DemoEnrollment).filter(DemoEnrollment.batch_id == batch.id).count()
    total_attendance = db.query(Attendance).filter(Attendance.batch_id == batch.id).count()
    possible = total_students * len(batch.demo_date_list)
    return {
        "totalStudents": total_students,
        "totalAttendance": total_attendance,
        "possibleAttendance": possible,
        "attendancePercentage": attendance_percentage(total_attendance, possible),
    }


def batch_histogram(db: Session, batch_id: str) -> dict:
    """
    Attendance count for each scheduled demo date of a batch.

    Counts follow the order of the batch's demo dates. The average covers
    every attendance record of the batch, including scans on days that are
    not scheduled demo dates.
    """
    batch = _get_batch(db, batch_id)
    demo_dates = batch.demo_date_list

    per_day = {}
    records = db.query(Attendance.attendance_date).filter(Attendance.batch_id == batch.id).all()
    for (attendance_date,) in records:
        day = attendance_date.date()
        per_day[day] = per_day.get(day, 0) + 1

    totals = _batch_totals(db, batch)

    log_with_context(logger, "INFO", "Batch histogram for {}".format(batch.batch_code),
                     context={"batch_id": batch.id},
                     extra_data={"average": totals["attendancePercentage"]})

    return {
        "batchId": batch.batch_code,
        "totalStudents": totals["totalStudents"],
        "demoDates": [d.isoformat() for d in demo_dates],
        "demoDateLabels": [date_label(d) for d in demo_dates],
        "attendanceCounts": [per_day.get(d, 0) for d in demo_dates],
        "totalAttendance": totals["totalAttendance"],
        "possibleAttendance": totals["possibleAttendance"],
        "averageAttendance": totals["attendancePercentage"],
    }


def student_report(db: Session, batch_code: str) -> list:
    """
    Every student enrolled in a batch with the distinct days they attended.

    Students with no attendance are included with an empty list.
    """
    batch = _get_batch_by_code(db, batch_code)

    enrollments = db.query(DemoEnrollment).options(
        joinedload(DemoEnrollment.student)
    ).filter(
        DemoEnrollment.batch_id == batch.id
    ).order_by(DemoEnrollment.created_at).all()

    report = OrderedDict()
    for enrollment in enrollments:
        report[enrollment.id] = {
            "student": {
                "id": str(enrollment.student.id),
                "name": enrollment.student.name,
                "mobileNumber": enrollment.student.mobile_number
            },
            "enrollmentId": str(enrollment.id),
            "enrollmentDate": isoformat_utc(enrollment.created_at),
            "isWalkIn": bool(enrollment.is_walk_in),
            "daysAttended": [],
            "totalDaysAttended": 0
        }

    records = db.query(Attendance).filter(
        Attendance.enrollment_id.in_(list(report.keys()))
    ).order_by(Attendance.attendance_date).all() if report else []

    for record in records:
        entry = report.get(record.enrollment_id)
        day = record.attendance_date.date().isoformat()
        if entry is not None and day not in entry["daysAttended"]:
            entry["daysAttended"].append(day)
            entry["totalDaysAttended"] += 1

    log_with_context(logger, "INFO",
        "Student report for {}: {} students".format(batch_code, len(report)),
        context={"batch_id": batch.id})

    return list(report.values())


def attendance_stats(db: Session, batch_code: str) -> list:
    """Attendance per calendar day of a batch, oldest day first."""
    batch = _get_batch_by_code(db, batch_code)

    records = db.query(Attendance).filter(
        Attendance.batch_id == batch.id
    ).order_by(Attendance.attendance_date, Attendance.scan_time).all()

    days = OrderedDict()
    for record in records:
        day = record.attendance_date.date().isoformat()
        bucket = days.setdefault(day, {"date": day, "count": 0, "students": []})
        bucket["count"] += 1
        bucket["students"].append(str(record.student_id))

    return list(days.values())


def enrollment_details(db: Session, enrollment_id: str) -> dict:
    """Attendance history and percentage for one enrollment."""
    enrollment = db.query(DemoEnrollment).options(
        joinedload(DemoEnrollment.student),
        joinedload(DemoEnrollment.batch)
    ).filter(DemoEnrollment.id == enrollment_id).first()
    if not enrollment:
        raise NotFoundError("Enrollment not found")

    records = db.query(Attendance).filter(
        Attendance.enrollment_id == enrollment.id
    ).order_by(Attendance.attendance_date).all()

    total_possible = len(enrollment.batch.demo_date_list)
    student = enrollment.student
    return {
        "student": {
            "id": str(student.id),
            "name": student.name,
            "mobileNumber": student.mobile_number,
            "email": student.email
        },
        "batch": serialize_batch(enrollment.batch),
        "attendanceDates": [r.attendance_date.date().isoformat() for r in records],
        "percentAttended": attendance_percentage(len(records), total_possible),
        "totalAttended": len(records),
        "totalPossibleDates": total_possible
    }


def all_batches_summary(db: Session) -> dict:
    """
    Attendance percentage of every batch, newest batch first.

    batchIds and averageAttendancePercentages are parallel arrays for
    charting; detailedStats carries the per-batch breakdown.
    """
    batches = db.query(Batch).order_by(Batch.created_at.desc()).all()

    detailed = []
    for batch in batches:
        totals = _batch_totals(db, batch)
        detailed.append({
            "batchId": batch.batch_code,
            "description": batch.description,
            **totals
        })

    log_with_context(logger, "INFO", "Summary for {} batches".format(len(detailed)))

    return {
        "batchIds": [stat["batchId"] for stat in detailed],
        "averageAttendancePercentages": [stat["attendancePercentage"] for stat in detailed],
        "detailedStats": detailed
    }
