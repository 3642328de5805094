"""QR code rendering for the certificate verification link."""

import base64
import logging
from io import BytesIO

import qrcode
from PIL import Image
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

logger = logging.getLogger(__name__)

QR_DARK = "#000"
QR_LIGHT = "#fff"


def qr_code_png(payload: str, *, size: int = 90, margin: int = 1) -> bytes:
    """Encode ``payload`` as a square PNG QR code of ``size`` pixels.

    Args:
        payload: Text to encode (the verification link, as plain text)
        size: Output width and height in pixels
        margin: Quiet zone width, in modules

    Returns:
        PNG content as bytes

    Raises:
        DataOverflowError: If the payload does not fit in any QR version
    """
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=margin,
        image_factory=PilImage,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    image = qr.make_image(fill_color=QR_DARK, back_color=QR_LIGHT).get_image()
    # Nearest-neighbour keeps module edges sharp for scanners.
    image = image.resize((size, size), Image.Resampling.NEAREST)

    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def qr_code_data_uri(payload: str, *, size: int = 90, margin: int = 1) -> str | None:
    """Render ``payload`` as a PNG data URI, or None if encoding fails.

    A failed QR code is not fatal: the certificate renders with a blank
    QR area.
    """
    try:
        png = qr_code_png(payload, size=size, margin=margin)
    except (DataOverflowError, ValueError, OSError) as e:
        logger.warning(
            "qr.render.failed",
            extra={"error": str(e), "payload_length": len(payload)},
        )
        return None

    encoded = base64.b64encode(png).decode("ascii")
    return f"data:image/png;base64,{encoded}"
