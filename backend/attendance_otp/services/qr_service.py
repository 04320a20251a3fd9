"""QR rendering of the currently displayed attendance code."""
import base64
import io
import json

import qrcode


class QRService:
    """Service for QR code operations."""

    @staticmethod
    def render_code_qr(class_id: str, code: str) -> str:
        """Render {class_id, code} as a PNG data URI for projection."""
        payload = json.dumps({'class_id': class_id, 'code': code}, separators=(',', ':'))

        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
