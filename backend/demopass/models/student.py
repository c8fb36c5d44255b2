"""
Student model - a person who has enrolled in at least one demo batch.

A student is created the first time a new mobile number enrolls and is
reused for every later enrollment with that number.
"""

import uuid
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from demopass.database import Base
from demopass.validators import utc_now


class Student(Base):
    """
    SQLAlchemy model for the students table.

    Mobile number and email are each unique; the database constraints are
    what settles two concurrent first enrollments with the same number.
    """
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier")
    name = Column(String(50), nullable=False,
                  doc="Student's name, 3 to 50 characters")
    mobile_number = Column(String(10), nullable=False, unique=True,
                           doc="Exactly 10 digits")
    email = Column(String(255), nullable=False, unique=True,
                   doc="Lowercased email address")
    created_at = Column(DateTime, nullable=False, default=utc_now,
                        doc="When the student was first seen; never updated")

    enrollments = relationship("DemoEnrollment", back_populates="student")

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', mobile='{self.mobile_number}')>"
