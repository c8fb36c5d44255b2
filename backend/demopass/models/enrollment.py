"""
DemoEnrollment model - binds one student to one batch.

The enrollment carries the opaque random token printed on the student's
demo pass (qr_code_data). Enrollments are never edited after creation.
"""

import uuid
from sqlalchemy import Column, Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from demopass.database import Base
from demopass.validators import utc_now


class DemoEnrollment(Base):
    """
    SQLAlchemy model for the demo_enrollments table.

    A student can be enrolled in a batch only once, and every token is
    unique across all batches.
    """
    __tablename__ = "demo_enrollments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique enrollment identifier")
    batch_id = Column(String(36), ForeignKey("batches.id", ondelete="CASCADE"), nullable=False,
                      doc="Reference to the batch")
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False,
                        doc="Reference to the enrolled student")
    qr_code_data = Column(String(64), nullable=False, unique=True,
                          doc="Random hex token encoded in the demo pass QR code")
    is_walk_in = Column(Boolean, nullable=False, default=False,
                        doc="True for on-site self registration")
    created_at = Column(DateTime, nullable=False, default=utc_now,
                        doc="Timestamp when the student enrolled")

    batch = relationship("Batch", back_populates="enrollments")
    student = relationship("Student", back_populates="enrollments")
    attendance_records = relationship("Attendance", back_populates="enrollment",
                                      cascade="save-update, merge, delete")

    __table_args__ = (
        UniqueConstraint("batch_id", "student_id", name="uq_enrollment_batch_student"),
    )

    def __repr__(self):
        return f"<DemoEnrollment(id={self.id}, batch={self.batch_id}, student={self.student_id})>"
