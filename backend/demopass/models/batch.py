"""
Batch model - a scheduled cohort of demo classes.

Each batch is identified by a human readable code (batch_code, exposed as
"batchId" in the API) and carries its ordered list of demo dates as a JSON
array of YYYY-MM-DD strings.
"""

import uuid
import json
from datetime import date
from sqlalchemy import Column, Text, DateTime, String
from sqlalchemy.orm import relationship
from demopass.database import Base
from demopass.validators import utc_now

BATCH_CODE_MAX_LENGTH = 100


class Batch(Base):
    """
    SQLAlchemy model for the batches table.

    Deleting a batch removes its enrollments and, through them, their
    attendance records.
    """
    __tablename__ = "batches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique batch identifier")
    batch_code = Column(String(BATCH_CODE_MAX_LENGTH), nullable=False, unique=True,
                        doc="Human readable batch code, unique and immutable")
    description = Column(Text, nullable=False,
                         doc="Free text description shown on the demo pass")
    demo_dates = Column(Text, nullable=False, default="[]",
                        doc="Scheduled demo dates as a JSON array of YYYY-MM-DD strings")
    created_at = Column(DateTime, nullable=False, default=utc_now,
                        doc="Timestamp when batch was created")

    enrollments = relationship("DemoEnrollment", back_populates="batch",
                               cascade="save-update, merge, delete")
    attendance_records = relationship("Attendance", back_populates="batch",
                                      cascade="save-update, merge, delete")

    @property
    def demo_date_list(self):
        """Parse the demo_dates JSON string into a list of dates, in order."""
        try:
            raw = json.loads(self.demo_dates) if self.demo_dates else []
        except (json.JSONDecodeError, TypeError):
            return []
        return [date.fromisoformat(d) for d in raw]

    @demo_date_list.setter
    def demo_date_list(self, dates):
        self.demo_dates = json.dumps([d.isoformat() for d in dates])

    def __repr__(self):
        return f"<Batch(id={self.id}, code='{self.batch_code}', dates={self.demo_dates})>"
