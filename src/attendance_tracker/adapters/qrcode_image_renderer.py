"""QR image rendering with the qrcode library."""

from dataclasses import dataclass
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_H

from attendance_tracker.services.sessions import QrImageRenderer


@dataclass
class QrcodeImageRenderer(QrImageRenderer):
    """Renders QR text to PNG bytes."""

    box_size: int = 10
    border: int = 4

    def render_png(self, text: str) -> bytes:
        """Return a PNG image encoding ``text``."""
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_H,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(text)
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
