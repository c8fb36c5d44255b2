"""
Attendance model - one scan of a demo pass on one day.

batch_id and student_id are copied from the enrollment when the record is
created so reports can filter without a join; they are never re-synced.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship
from demopass.database import Base
from demopass.validators import utc_now


class Attendance(Base):
    """
    SQLAlchemy model for the attendance table.

    attendance_date is always UTC midnight, so the unique constraint on
    (enrollment_id, attendance_date) allows one record per enrollment per
    calendar day even when two scans race past the existence check.
    """
    __tablename__ = "attendance"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique attendance identifier")
    enrollment_id = Column(String(36), ForeignKey("demo_enrollments.id", ondelete="CASCADE"),
                           nullable=False, doc="Reference to the scanned enrollment")
    batch_id = Column(String(36), ForeignKey("batches.id", ondelete="CASCADE"), nullable=False,
                      doc="Copied from the enrollment")
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False,
                        doc="Copied from the enrollment")
    attendance_date = Column(DateTime, nullable=False,
                             doc="UTC midnight of the day attended")
    scan_time = Column(DateTime, nullable=False, default=utc_now,
                       doc="Exact UTC time of the scan")

    enrollment = relationship("DemoEnrollment", back_populates="attendance_records")
    batch = relationship("Batch", back_populates="attendance_records")
    student = relationship("Student")

    __table_args__ = (
        UniqueConstraint("enrollment_id", "attendance_date", name="uq_attendance_enrollment_date"),
        Index("ix_attendance_batch_id", "batch_id"),
        Index("ix_attendance_attendance_date", "attendance_date"),
    )

    def __repr__(self):
        return f"<Attendance(id={self.id}, enrollment={self.enrollment_id}, date={self.attendance_date})>"
