from demopass.models.student import Student
from demopass.models.batch import Batch
from demopass.models.enrollment import DemoEnrollment
from demopass.models.attendance import Attendance

__all__ = ["Student", "Batch", "DemoEnrollment", "Attendance"]
