"""
Report API routes - chart data for the attendance dashboard.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from demopass.database import get_db
from demopass.services import reporting

router = APIRouter(prefix="/api")


@router.get("/reports/batch/{batch_id}")
def get_batch_attendance_stats(batch_id: str, db: Session = Depends(get_db)):
    """Attendance per demo date and average percentage for one batch."""
    return {"success": True, "data": reporting.batch_histogram(db, batch_id)}


@router.get("/reports/student/{enrollment_id}")
def get_student_attendance_details(enrollment_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": reporting.enrollment_details(db, enrollment_id)}


@router.get("/reports/batches")
def get_all_batches_stats(db: Session = Depends(get_db)):
    """Attendance percentage of every batch."""
    return {"success": True, "data": reporting.all_batches_summary(db)}
