"""Tests for certificate rendering module."""

import base64
import sys
from unittest.mock import MagicMock, patch

import pytest

from rendering.certificates import (
    CERTIFICATE_TITLE,
    DEFAULT_ISSUER_NAME,
    FALLBACK_COLOR,
    generate_certificate_svg,
    sanitize_unsupported_colors,
    svg_to_base64_data_uri,
    svg_to_pdf,
    svg_to_png,
)
from tests.factories import CertificateRecordFactory

pytestmark = pytest.mark.unit

QR_DATA_URI = "data:image/png;base64,iVBORw0KGgo="


class TestGenerateCertificateSvg:
    def test_contains_certificate_fields(self):
        record = CertificateRecordFactory.build(
            full_name="Ada Lovelace",
            course_completed="Remote Sensing",
            level_completed="4",
            registration_number="SDSAN/2026/0042",
            date="3/14/2026",
            expiry_date="3/14/2028",
        )

        svg = generate_certificate_svg(record)

        assert svg.startswith("<?xml")
        assert CERTIFICATE_TITLE in svg
        assert DEFAULT_ISSUER_NAME in svg
        for text in (
            "Ada Lovelace",
            "Remote Sensing",
            "Level 4",
            "SDSAN/2026/0042",
            "3/14/2026",
            "3/14/2028",
            record.id,
        ):
            assert text in svg

    def test_escapes_text(self):
        record = CertificateRecordFactory.build(
            full_name='<script>alert("x")</script>', course_completed="R&D"
        )

        svg = generate_certificate_svg(record)

        assert "<script>" not in svg
        assert "&lt;script&gt;" in svg
        assert "R&amp;D" in svg

    def test_embeds_signature_and_qr(self):
        record = CertificateRecordFactory.build()

        svg = generate_certificate_svg(record, qr_data_uri=QR_DATA_URI)

        assert f'xlink:href="{record.signature}"' in svg
        assert f'xlink:href="{QR_DATA_URI}"' in svg

    def test_without_qr_code(self):
        record = CertificateRecordFactory.build()
        svg = generate_certificate_svg(record, qr_data_uri=None)
        assert svg.count("<image") == 1

    @pytest.mark.parametrize(
        "signature",
        [
            "https://evil.example.org/track.png",
            "file:///etc/passwd",
            "data:image/svg+xml;base64,PHN2Zy8+",
        ],
    )
    def test_non_png_images_are_not_embedded(self, signature):
        record = CertificateRecordFactory.build(signature=signature)
        svg = generate_certificate_svg(record)
        assert signature not in svg
        assert "<image" not in svg

    def test_custom_issuer_and_accent(self):
        record = CertificateRecordFactory.build()
        svg = generate_certificate_svg(
            record, issuer_name="Geo Guild", accent_color="#0f766e"
        )
        assert "Geo Guild" in svg
        assert 'stroke="#0f766e"' in svg


class TestSanitizeUnsupportedColors:
    def test_replaces_wide_gamut_colors(self):
        svg = (
            '<rect fill="oklch(0.7 0.1 200)" stroke="lab(50% 40 59)"/>'
            '<stop stop-color="color(display-p3 1 0 0)"/>'
            '<text style="fill: oklab(0.5 0.1 0.1); font-size: 12px">x</text>'
        )

        result = sanitize_unsupported_colors(svg)

        for notation in ("oklch(", "lab(", "oklab(", "color("):
            assert notation not in result
        assert f'fill="{FALLBACK_COLOR}"' in result
        assert f'stroke="{FALLBACK_COLOR}"' in result
        assert "font-size: 12px" in result

    def test_leaves_srgb_colors_alone(self):
        svg = '<rect fill="#7c3aed" stroke="rgb(1, 2, 3)"/>'
        assert sanitize_unsupported_colors(svg) == svg

    def test_leaves_text_content_alone(self):
        svg = "<text>Course: color(theory) and lab(work)</text>"
        assert sanitize_unsupported_colors(svg) == svg

    def test_accent_in_wide_gamut_is_flattened(self):
        record = CertificateRecordFactory.build()
        svg = generate_certificate_svg(record, accent_color="oklch(0.6 0.2 290)")
        assert "oklch(" not in sanitize_unsupported_colors(svg)


class TestSvgToBase64DataUri:
    def test_round_trips(self):
        svg = "<svg>é</svg>"
        uri = svg_to_base64_data_uri(svg)
        assert uri.startswith("data:image/svg+xml;base64,")
        decoded = base64.b64decode(uri.split(",", 1)[1]).decode("utf-8")
        assert decoded == svg


class TestRasterization:
    def test_svg_to_png_sanitizes_and_scales(self):
        fake_cairosvg = MagicMock()
        fake_cairosvg.svg2png.return_value = b"\x89PNG"

        with patch.dict(sys.modules, {"cairosvg": fake_cairosvg}):
            result = svg_to_png('<svg><rect fill="oklch(1 0 0)"/></svg>', scale=3.0)

        assert result == b"\x89PNG"
        kwargs = fake_cairosvg.svg2png.call_args.kwargs
        assert kwargs["scale"] == 3.0
        assert b"oklch" not in kwargs["bytestring"]

    def test_svg_to_pdf(self):
        fake_cairosvg = MagicMock()
        fake_cairosvg.svg2pdf.return_value = b"%PDF"

        with patch.dict(sys.modules, {"cairosvg": fake_cairosvg}):
            assert svg_to_pdf("<svg/>") == b"%PDF"

    def test_missing_cairo_raises_runtime_error(self):
        def _raise_import(name, *args, **kwargs):
            if name == "cairosvg":
                raise OSError("no library called 'cairo-2' was found")
            return original_import(name, *args, **kwargs)

        original_import = __import__
        with patch("builtins.__import__", side_effect=_raise_import):
            with pytest.raises(RuntimeError, match="Cairo library"):
                svg_to_png("<svg/>")
