"""
Enrollment Service - binds students to demo batches and issues demo passes.

Enrolling:
1. Validate the form fields (name, 10 digit mobile number, email)
2. Resolve the batch by its human readable code
3. Find the student by mobile number, or create one
4. Refuse a second enrollment of the same student in the same batch
5. Issue a random token that the demo pass QR code carries

Steps 3 and 4 are check-then-insert sequences. The unique constraints on
students (mobile_number, email) and demo_enrollments (batch_id, student_id,
qr_code_data) decide concurrent requests; the losing request gets a
ConflictError.
"""

import secrets
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from demopass.errors import ConflictError, NotFoundError, ValidationError
from demopass.logging_config import get_logger, log_with_context
from demopass.models import Batch, DemoEnrollment, Student
from demopass.validators import clean_text, validate_email, validate_mobile_number, validate_name

logger = get_logger("enrollment")
db_logger = get_logger("db")

TOKEN_BYTES = 16


def generate_token() -> str:
    """32 hex characters from a cryptographically secure source."""
    return secrets.token_hex(TOKEN_BYTES)


def find_or_create_student(db: Session, name: str, mobile_number: str, email: str) -> Student:
    """
    Find a student by mobile number or create a new one.

    An existing student keeps the name and email already on record.
    The new row is flushed immediately so a uniqueness violation surfaces
    here rather than at commit time.
    """
    student = db.query(Student).filter(Student.mobile_number == mobile_number).first()
    if student:
        log_with_context(db_logger, "DEBUG", "Found existing student: {}".format(student.name),
                         context={"student_id": str(student.id)})
        return student

    student = Student(name=name, mobile_number=mobile_number, email=email)
    db.add(student)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        log_with_context(db_logger, "WARNING", "Student uniqueness violation on create",
                         extra_data={"mobile_number": mobile_number})
        raise ConflictError("A student with this mobile number or email already exists")

    log_with_context(db_logger, "INFO", "Created new student: {}".format(name),
                     context={"student_id": str(student.id)})
    return student


def enroll(db: Session, batch_code, name, mobile_number, email, is_walk_in=False) -> DemoEnrollment:
    """
    Enroll a student in the batch identified by batch_code.

    Returns:
        The new DemoEnrollment with batch and student loaded

    Raises:
        ValidationError: missing or malformed fields
        NotFoundError: no batch has this code
        ConflictError: already enrolled, or student uniqueness violated
    """
    batch_code = clean_text(batch_code)
    if not batch_code or not clean_text(name) or not clean_text(mobile_number):
        raise ValidationError("Missing required fields: batchId, name, or mobileNumber")

    name = validate_name(name)
    mobile_number = validate_mobile_number(mobile_number)
    email = validate_email(email)

    batch = db.query(Batch).filter(Batch.batch_code == batch_code).first()
    if not batch:
        log_with_context(logger, "INFO", "Enrollment for unknown batch {}".format(batch_code))
        raise NotFoundError("Batch {} not found".format(batch_code))

    student = find_or_create_student(db, name, mobile_number, email)

    existing = db.query(DemoEnrollment).filter(
        DemoEnrollment.batch_id == batch.id,
        DemoEnrollment.student_id == student.id
    ).first()
    if existing:
        raise ConflictError("Student is already enrolled in this batch")

    enrollment = DemoEnrollment(
        batch_id=batch.id,
        student_id=student.id,
        qr_code_data=generate_token(),
        is_walk_in=bool(is_walk_in)
    )
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Student is already enrolled in this batch")

    log_with_context(logger, "INFO",
        "Enrolled {} in batch {}".format(name, batch_code),
        context={
            "enrollment_id": str(enrollment.id),
            "batch_id": str(batch.id),
            "student_id": str(student.id)
        },
        extra_data={"is_walk_in": bool(is_walk_in)})

    return get_enrollment(db, enrollment.id)


def _enrollment_query(db: Session):
    return db.query(DemoEnrollment).options(
        joinedload(DemoEnrollment.batch),
        joinedload(DemoEnrollment.student)
    )


def get_enrollment(db: Session, enrollment_id: str) -> DemoEnrollment:
    enrollment = _enrollment_query(db).filter(DemoEnrollment.id == enrollment_id).first()
    if not enrollment:
        raise NotFoundError("Enrollment not found")
    return enrollment


def get_enrollment_by_token(db: Session, token: str) -> DemoEnrollment:
    enrollment = _enrollment_query(db).filter(DemoEnrollment.qr_code_data == token).first()
    if not enrollment:
        raise NotFoundError("Enrollment not found")
    return enrollment
