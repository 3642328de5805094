"""Certificate export endpoints (PNG and PDF).

Every route here is driven by the same ten query parameters as the
certificate page. Missing or empty parameters mean "not found"; nothing is
read from the database.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, Response

from core.config import get_settings
from core.ratelimit import EXPORT_LIMIT, limiter
from schemas import CertificateRecord
from services.export_service import (
    export_filename,
    generate_certificate_pdf,
    generate_certificate_png,
)
from services.transport_service import decode_certificate_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/certificate", tags=["certificates"])

RENDER_FAILED_MESSAGE = "Failed to render the certificate."


def _get_cache_control() -> str:
    """Get appropriate Cache-Control header value based on environment."""
    settings = get_settings()
    if settings.environment.lower() == "development":
        return "no-store"
    # The URL carries the whole certificate, so a response never changes.
    return "private, max-age=3600"


def _record_or_404(request: Request) -> CertificateRecord:
    record = decode_certificate_query(request.query_params)
    if record is None:
        raise HTTPException(status_code=404, detail="Certificate not found")
    return record


async def _render_png(record: CertificateRecord) -> bytes:
    try:
        return await generate_certificate_png(record)
    except RuntimeError as e:
        raise HTTPException(status_code=501, detail=str(e)) from e
    except Exception as e:
        logger.exception(
            "certificate.export.failed",
            extra={"format": "png", "certificate_id": record.id},
        )
        raise HTTPException(status_code=500, detail=RENDER_FAILED_MESSAGE) from e


@router.get(
    "/png",
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG certificate image"},
        404: {"description": "Certificate not found"},
        501: {"description": "PNG generation not available"},
    },
)
@limiter.limit(EXPORT_LIMIT)
async def get_certificate_png_endpoint(request: Request) -> Response:
    """Rasterized certificate, for display, printing and sharing."""
    record = _record_or_404(request)
    png_content = await _render_png(record)

    return Response(
        content=png_content,
        media_type="image/png",
        headers={
            "Content-Disposition": (
                f'inline; filename="{export_filename(record, "png")}"'
            ),
            "Cache-Control": _get_cache_control(),
        },
    )


@router.get(
    "/download",
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG certificate download"},
        404: {"description": "Certificate not found"},
        501: {"description": "PNG generation not available"},
    },
)
@limiter.limit(EXPORT_LIMIT)
async def download_certificate_endpoint(request: Request) -> Response:
    """Download the rasterized certificate as a PNG attachment."""
    record = _record_or_404(request)
    png_content = await _render_png(record)

    logger.info("certificate.downloaded", extra={"certificate_id": record.id})

    return Response(
        content=png_content,
        media_type="image/png",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{export_filename(record, "png")}"'
            ),
            "Cache-Control": _get_cache_control(),
        },
    )


@router.get(
    "/pdf",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "PDF certificate"},
        404: {"description": "Certificate not found"},
        501: {"description": "PDF generation not available"},
    },
)
@limiter.limit(EXPORT_LIMIT)
async def download_certificate_pdf_endpoint(request: Request) -> Response:
    """Download the certificate as a PDF attachment."""
    record = _record_or_404(request)

    try:
        pdf_content = await generate_certificate_pdf(record)
    except RuntimeError as e:
        raise HTTPException(status_code=501, detail=str(e)) from e
    except Exception as e:
        logger.exception(
            "certificate.export.failed",
            extra={"format": "pdf", "certificate_id": record.id},
        )
        raise HTTPException(status_code=500, detail=RENDER_FAILED_MESSAGE) from e

    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{export_filename(record, "pdf")}"'
            ),
            "Cache-Control": _get_cache_control(),
        },
    )
