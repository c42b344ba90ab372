from __future__ import annotations

from io import BytesIO
from urllib.parse import urlencode

import qrcode


def build_alert_url(base_url: str, item: str, qty: str, location: str = "") -> str:
    """Absolute intake URL that a shelf QR code points at."""
    params = {"item": item, "qty": qty}
    if location:
        params["location"] = location
    return f"{base_url.rstrip('/')}/alert?{urlencode(params)}"


def render_qr_png(data: str, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
