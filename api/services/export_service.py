"""Certificate export: SVG, PNG, PDF and share metadata.

Routes should call this instead of the rendering module directly. Every
export starts from a CertificateRecord decoded from the request URL; the
database is never consulted.
"""

import asyncio
import re

from core.config import Settings, get_settings
from rendering.certificates import (
    generate_certificate_svg as _render_certificate_svg,
)
from rendering.certificates import svg_to_pdf as _svg_to_pdf
from rendering.certificates import svg_to_png as _svg_to_png
from rendering.qr import qr_code_data_uri
from schemas import CertificateRecord, SharePayload
from services.transport_service import certificate_url

SHARE_TITLE = "Certificate of Achievement"
DOWNLOAD_PATH = "/certificate/download"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def export_filename(record: CertificateRecord, extension: str) -> str:
    """``certificate-{registrationNumber}.{extension}``, header-safe."""
    slug = _UNSAFE_FILENAME_CHARS.sub("-", record.registration_number).strip("-")
    return f"certificate-{slug or record.id}.{extension}"


def generate_certificate_svg(
    record: CertificateRecord,
    settings: Settings | None = None,
) -> str:
    """Generate SVG content for a certificate, including its QR code."""
    settings = settings or get_settings()
    qr_data_uri = qr_code_data_uri(
        record.qr_code, size=settings.qr_size, margin=settings.qr_margin
    )
    return _render_certificate_svg(
        record,
        qr_data_uri=qr_data_uri,
        issuer_name=settings.issuer_name,
        accent_color=settings.accent_color,
    )


async def generate_certificate_png(
    record: CertificateRecord, *, scale: float | None = None
) -> bytes:
    """Generate PNG content for a certificate.

    Runs in a thread pool to avoid blocking the async event loop since
    CairoSVG rendering is CPU-bound.

    Args:
        record: The certificate to render
        scale: Output scale factor (defaults to Settings.png_scale)

    Returns:
        PNG content as bytes
    """
    settings = get_settings()
    svg_content = generate_certificate_svg(record, settings)
    png_scale = scale if scale is not None else settings.png_scale
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, lambda: _svg_to_png(svg_content, scale=png_scale)
    )


async def generate_certificate_pdf(record: CertificateRecord) -> bytes:
    """Generate PDF content for a certificate (thread pool, see PNG)."""
    svg_content = generate_certificate_svg(record)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _svg_to_pdf, svg_content)


def build_share_payload(record: CertificateRecord) -> SharePayload:
    """What the share button hands to the Web Share API."""
    return SharePayload(
        title=SHARE_TITLE,
        text=f"I've completed {record.course_completed}!",
        filename=export_filename(record, "png"),
        url=certificate_url(record, DOWNLOAD_PATH),
    )
