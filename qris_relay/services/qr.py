"""Render QRIS payloads as PNG data URLs."""

import base64
import io

import qrcode
from PIL import Image
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from qris_relay.core.exceptions import EncodingError

QR_IMAGE_WIDTH = 300
DATA_URL_PREFIX = "data:image/png;base64,"


def generate_qr_png(data: str, width: int = QR_IMAGE_WIDTH) -> bytes:
    """Encode ``data`` at error-correction level H into a ``width`` x ``width`` PNG."""
    if not isinstance(data, str) or not data:
        raise EncodingError("QR payload must be a non-empty string")
    qr = qrcode.QRCode(
        version=None,  # auto-size
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
        image_factory=PilImage,
    )
    try:
        qr.add_data(data)
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        raise EncodingError(f"Failed to encode QR image: {exc}") from exc
    img = qr.make_image(fill_color="black", back_color="white").get_image()
    # Nearest keeps module edges sharp for scanners.
    img = img.resize((width, width), Image.Resampling.NEAREST)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(data: str) -> str:
    """QR image for ``data`` as ``data:image/png;base64,...``; same input, same bytes."""
    png = generate_qr_png(data)
    return DATA_URL_PREFIX + base64.b64encode(png).decode("ascii")
