"""
Demo pass rendering - the QR code a student shows at the door.

The QR content is the structured scan payload understood by the attendance
service, so a scanner can post the decoded text straight back to
/api/attendance/mark.
"""

import io
import json

import qrcode

from demopass.config import QR_BORDER, QR_BOX_SIZE
from demopass.models import DemoEnrollment


def pass_payload(enrollment: DemoEnrollment) -> str:
    return json.dumps({
        "enrollmentId": str(enrollment.id),
        "batchId": str(enrollment.batch_id),
        "studentName": enrollment.student.name if enrollment.student else None
    })


def render_pass_png(enrollment: DemoEnrollment) -> bytes:
    """Render the demo pass QR code of an enrollment as PNG bytes."""
    qr = qrcode.QRCode(version=None, box_size=QR_BOX_SIZE, border=QR_BORDER)
    qr.add_data(pass_payload(enrollment))
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
