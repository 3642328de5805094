"""Certificate rendering - SVG, PNG and PDF generation.

This module handles the visual/presentation aspects of certificates:
- SVG template rendering
- Colour fixups the rasterizer needs
- PNG and PDF conversion

It knows nothing about where a record came from; services decide that.
"""

import base64
import html
import re

from schemas import CertificateRecord

CERTIFICATE_TITLE = "Certificate of Achievement"
DEFAULT_ISSUER_NAME = "Spatial and Data Science Association of Nigeria."
DEFAULT_ACCENT_COLOR = "#7c3aed"

# Colour used in place of any colour CairoSVG cannot paint.
FALLBACK_COLOR = "#000"

SVG_WIDTH = 800
SVG_HEIGHT = 600

_IMAGE_DATA_URI_RE = re.compile(r"^data:image/png;base64,[A-Za-z0-9+/=\s]+$")

# Wide-gamut CSS colour notations. CairoSVG only understands sRGB forms.
_UNSUPPORTED_COLOR_RE = re.compile(
    r"\b(?:oklch|oklab|lch|lab|color)\([^)]*\)",
    flags=re.IGNORECASE,
)

# Only attribute values that hold paint are rewritten, never text content.
_COLOR_ATTRIBUTE_RE = re.compile(
    r'\b(fill|stroke|stop-color|flood-color|lighting-color|color|style)="([^"]*)"'
)


def _embeddable_image(data_uri: str | None) -> str | None:
    """Return ``data_uri`` if it is an inline PNG, else None.

    Anything else (remote URLs, file paths, other schemes) would make the
    rasterizer fetch it, so it is dropped.
    """
    if data_uri and _IMAGE_DATA_URI_RE.match(data_uri):
        return data_uri
    return None


def sanitize_unsupported_colors(svg_content: str) -> str:
    """Replace wide-gamut colours (oklch, lab, ...) with a plain fallback.

    CairoSVG cannot represent these colour spaces, so every paint attribute
    and inline style using one is rewritten to ``FALLBACK_COLOR`` before
    rasterizing. Text content is left alone.
    """

    def _fix_attribute(match: re.Match[str]) -> str:
        name, value = match.group(1), match.group(2)
        return f'{name}="{_UNSUPPORTED_COLOR_RE.sub(FALLBACK_COLOR, value)}"'

    return _COLOR_ATTRIBUTE_RE.sub(_fix_attribute, svg_content)


def generate_certificate_svg(
    record: CertificateRecord,
    *,
    qr_data_uri: str | None = None,
    issuer_name: str = DEFAULT_ISSUER_NAME,
    accent_color: str = DEFAULT_ACCENT_COLOR,
) -> str:
    """Generate an SVG certificate.

    Args:
        record: The certificate to render
        qr_data_uri: PNG data URI of the QR code; the QR area is left blank
            when None
        issuer_name: Organisation shown in the header
        accent_color: Border and heading colour (any CSS colour)

    Returns:
        SVG content as a string
    """

    def esc(value: str) -> str:
        return html.escape(value, quote=True)

    sans_font = "Helvetica, Arial, sans-serif"
    serif_font = "Times, 'Times New Roman', Georgia, serif"
    mono_font = "Courier, 'Courier New', monospace"
    accent = esc(accent_color)

    signature = _embeddable_image(record.signature)
    signature_block = ""
    if signature:
        signature_block = (
            f'<image x="90" y="440" width="200" height="50" '
            f'preserveAspectRatio="xMidYMid meet" xlink:href="{esc(signature)}"/>'
        )

    qr_image = _embeddable_image(qr_data_uri)
    qr_block = ""
    if qr_image:
        qr_block = (
            f'<image x="640" y="415" width="90" height="90" '
            f'xlink:href="{esc(qr_image)}"/>'
        )

    svg = f"""<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" viewBox="0 0 {SVG_WIDTH} {SVG_HEIGHT}" width="{SVG_WIDTH}" height="{SVG_HEIGHT}">
  <rect width="{SVG_WIDTH}" height="{SVG_HEIGHT}" fill="#ffffff"/>

  <!-- Double border -->
  <rect x="16" y="16" width="768" height="568" fill="none" stroke="{accent}" stroke-width="6" rx="6"/>
  <rect x="30" y="30" width="740" height="540" fill="none" stroke="{accent}" stroke-width="1" rx="4" opacity="0.5"/>

  <!-- Issuer -->
  <text x="400" y="80" font-family="{sans_font}" font-size="16" fill="#1f2937" text-anchor="middle" font-weight="bold">
    {esc(issuer_name)}
  </text>

  <!-- Title -->
  <text x="400" y="135" font-family="{serif_font}" font-size="38" fill="{accent}" text-anchor="middle" font-weight="bold">
    {CERTIFICATE_TITLE}
  </text>

  <text x="400" y="180" font-family="{sans_font}" font-size="13" fill="#6b7280" text-anchor="middle" letter-spacing="3">
    THIS IS TO CERTIFY THAT
  </text>

  <!-- Recipient -->
  <text x="400" y="240" font-family="{serif_font}" font-size="40" fill="#111827" text-anchor="middle" font-style="italic">
    {esc(record.full_name)}
  </text>
  <line x1="180" y1="258" x2="620" y2="258" stroke="#d1d5db" stroke-width="1"/>

  <text x="400" y="295" font-family="{sans_font}" font-size="14" fill="#4b5563" text-anchor="middle">
    has successfully completed
  </text>

  <!-- Course and level -->
  <text x="400" y="335" font-family="{sans_font}" font-size="24" fill="#111827" text-anchor="middle" font-weight="bold">
    {esc(record.course_completed)}
  </text>
  <text x="400" y="365" font-family="{sans_font}" font-size="14" fill="{accent}" text-anchor="middle" font-weight="600">
    Level {esc(record.level_completed)}
  </text>

  <!-- Registration number -->
  <text x="400" y="400" font-family="{sans_font}" font-size="11" fill="#6b7280" text-anchor="middle" letter-spacing="2">
    REGISTRATION NO. {esc(record.registration_number)}
  </text>

  <!-- Signature -->
  {signature_block}
  <line x1="90" y1="495" x2="290" y2="495" stroke="#9ca3af" stroke-width="1"/>
  <text x="190" y="512" font-family="{sans_font}" font-size="10" fill="#6b7280" text-anchor="middle" letter-spacing="2">
    SIGNATURE
  </text>

  <!-- Dates -->
  <g transform="translate(465, 450)">
    <text x="0" y="0" font-family="{sans_font}" font-size="9" fill="#6b7280" text-anchor="middle" letter-spacing="2">
      ISSUED
    </text>
    <text x="0" y="18" font-family="{serif_font}" font-size="14" fill="#111827" text-anchor="middle">
      {esc(record.date)}
    </text>
    <text x="0" y="42" font-family="{sans_font}" font-size="9" fill="#6b7280" text-anchor="middle" letter-spacing="2">
      EXPIRES
    </text>
    <text x="0" y="60" font-family="{serif_font}" font-size="14" fill="#111827" text-anchor="middle">
      {esc(record.expiry_date)}
    </text>
  </g>

  <!-- QR code -->
  {qr_block}

  <!-- Footer -->
  <text x="400" y="555" font-family="{mono_font}" font-size="9" fill="#9ca3af" text-anchor="middle">
    Certificate ID {esc(record.id)}
  </text>
</svg>"""

    return svg


def svg_to_base64_data_uri(svg_content: str) -> str:
    """Convert SVG string to base64 data URI for embedding."""
    encoded = base64.b64encode(svg_content.encode("utf-8")).decode("utf-8")
    return f"data:image/svg+xml;base64,{encoded}"


def _import_cairosvg(output: str):
    try:
        import cairosvg
    except OSError as e:
        if "cairo" in str(e).lower():
            raise RuntimeError(
                f"{output} generation requires the Cairo library. "
                "On macOS: brew install cairo. "
                "On Ubuntu/Debian: apt-get install libcairo2-dev. "
                "On Alpine: apk add cairo-dev."
            ) from e
        raise
    return cairosvg


def svg_to_pdf(svg_content: str) -> bytes:
    """Convert SVG string to PDF bytes using CairoSVG.

    Raises:
        RuntimeError: If cairo library is not installed on the system
    """
    cairosvg = _import_cairosvg("PDF")
    svg_content = sanitize_unsupported_colors(svg_content)
    return cairosvg.svg2pdf(bytestring=svg_content.encode("utf-8"))


def svg_to_png(svg_content: str, *, scale: float = 2.0) -> bytes:
    """Convert SVG string to PNG bytes using CairoSVG.

    Args:
        svg_content: SVG string to convert
        scale: Output scale factor (2.0 for high-DPI)

    Raises:
        RuntimeError: If cairo library is not installed on the system
    """
    cairosvg = _import_cairosvg("PNG")
    svg_content = sanitize_unsupported_colors(svg_content)
    return cairosvg.svg2png(bytestring=svg_content.encode("utf-8"), scale=scale)
