"""
Attendance API routes - scanning passes and batch attendance views.

Provides endpoints for:
- Marking attendance from a scanned QR payload
- Per-day attendance stats and per-student report for a batch code
- Listing the attendance records of a batch
"""

from typing import Any
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from demopass.database import get_db
from demopass.serializers import serialize_attendance, serialize_attendance_entry
from demopass.services import attendance as attendance_service
from demopass.services import reporting

router = APIRouter(prefix="/api")


# ── Pydantic schemas ─────────────────────────────────────────

class MarkAttendanceRequest(BaseModel):
    """Scan payload: the raw token, or {"enrollmentId": ...}."""
    qr_code_data: Any = Field(None, alias="qrCodeData", description="Decoded QR content")


@router.post("/attendance/mark", status_code=201)
def mark_attendance(request: MarkAttendanceRequest, db: Session = Depends(get_db)):
    """Mark today's attendance for the scanned demo pass."""
    attendance = attendance_service.mark_attendance(db, request.qr_code_data)
    return {"success": True, "data": serialize_attendance(attendance)}


@router.get("/attendance/stats/{batch_code}")
def get_attendance_stats(batch_code: str, db: Session = Depends(get_db)):
    """Attendance count per day for a batch code."""
    return {"success": True, "data": reporting.attendance_stats(db, batch_code)}


@router.get("/attendance/report/{batch_code}")
def get_student_attendance_report(batch_code: str, db: Session = Depends(get_db)):
    """Days attended by each student enrolled in a batch code."""
    return {"success": True, "data": reporting.student_report(db, batch_code)}


@router.get("/attendance/batch/{batch_id}")
def get_attendance_by_batch(batch_id: str, db: Session = Depends(get_db)):
    """Attendance records of a batch, latest scan first."""
    records = attendance_service.list_batch_attendance(db, batch_id)
    return {
        "success": True,
        "count": len(records),
        "data": [serialize_attendance_entry(r) for r in records]
    }
