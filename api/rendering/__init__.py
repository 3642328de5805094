"""Rendering module for presentation concerns.

This module handles all presentation/rendering logic:
- Certificate SVG generation
- QR code images
- PNG and PDF conversion

This separates presentation concerns from business logic in services.
"""

from rendering.certificates import (
    generate_certificate_svg,
    sanitize_unsupported_colors,
    svg_to_base64_data_uri,
    svg_to_pdf,
    svg_to_png,
)
from rendering.qr import qr_code_data_uri, qr_code_png

__all__ = [
    "generate_certificate_svg",
    "qr_code_data_uri",
    "qr_code_png",
    "sanitize_unsupported_colors",
    "svg_to_base64_data_uri",
    "svg_to_pdf",
    "svg_to_png",
]
