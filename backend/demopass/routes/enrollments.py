"""
Enrollment API routes - student sign-up and demo pass lookup.

Provides endpoints for:
- Enrolling a student (walk-in or pre-registered) in a batch
- Looking up an enrollment by id or by its QR token
- Rendering the demo pass QR code as a PNG
"""

from typing import Optional
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from demopass.database import get_db
from demopass.serializers import serialize_enrollment
from demopass.services import enrollment as enrollment_service
from demopass.services.passes import render_pass_png

router = APIRouter(prefix="/api")


# ── Pydantic schemas ─────────────────────────────────────────

class EnrollmentRequest(BaseModel):
    """Schema for the enrollment form."""
    batch_id: Optional[str] = Field(None, alias="batchId", description="Batch code")
    name: Optional[str] = Field(None, description="Student name, 3-50 characters")
    mobile_number: Optional[str] = Field(None, alias="mobileNumber", description="10 digit mobile number")
    email: Optional[str] = Field(None, description="Student email")
    is_walk_in: Optional[bool] = Field(False, alias="isWalkIn", description="On-site registration")

    @field_validator("mobile_number", mode="before")
    @classmethod
    def mobile_number_as_text(cls, value):
        # Forms posting JSON often send the number itself
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


@router.post("/enrollments", status_code=201)
def enroll_student(request: EnrollmentRequest, db: Session = Depends(get_db)):
    """Enroll a student in a batch and issue the demo pass token."""
    enrollment = enrollment_service.enroll(
        db,
        request.batch_id,
        request.name,
        request.mobile_number,
        request.email,
        request.is_walk_in
    )
    return {
        "success": True,
        "data": serialize_enrollment(enrollment),
        "message": "Enrollment successful"
    }


# Must stay ahead of /enrollments/{enrollment_id}/pass.png, which has the same shape
@router.get("/enrollments/qr/{token}")
def get_enrollment_by_token(token: str, db: Session = Depends(get_db)):
    enrollment = enrollment_service.get_enrollment_by_token(db, token)
    return {"success": True, "data": serialize_enrollment(enrollment)}


@router.get("/enrollments/{enrollment_id}")
def get_enrollment(enrollment_id: str, db: Session = Depends(get_db)):
    enrollment = enrollment_service.get_enrollment(db, enrollment_id)
    return {"success": True, "data": serialize_enrollment(enrollment)}


@router.get("/enrollments/{enrollment_id}/pass.png")
def get_demo_pass(enrollment_id: str, db: Session = Depends(get_db)):
    """Demo pass QR code for printing or display."""
    enrollment = enrollment_service.get_enrollment(db, enrollment_id)
    return Response(content=render_pass_png(enrollment), media_type="image/png")
