"""Page routes: server-side rendered HTML pages.

The registration form posts here, and a valid submission is redirected to
``/certificate`` carrying the whole record in its query string. The
certificate pages never touch the database; only ``/verify`` does.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from core.config import get_settings
from core.database import DbSession
from core.templates import templates
from rendering.certificates import svg_to_base64_data_uri
from schemas import CertificateRecord, RegistrationForm
from services.certificates_service import verify_registration_number
from services.export_service import build_share_payload, generate_certificate_svg
from services.registration_service import (
    RegistrationIncompleteError,
    assemble_certificate,
)
from services.transport_service import certificate_url, decode_certificate_query

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], include_in_schema=False)

PNG_PATH = "/certificate/png"
DOWNLOAD_PATH = "/certificate/download"
PDF_PATH = "/certificate/pdf"
PRINT_PATH = "/certificate/print"


def _template_context(**kwargs) -> dict:
    """Build common template context."""
    return {
        "now": datetime.now(UTC),
        **kwargs,
    }


def _not_found(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "pages/certificate_not_found.html",
        _template_context(),
        status_code=404,
    )


def _certificate_links(record: CertificateRecord) -> dict[str, str]:
    return {
        "png_url": certificate_url(record, PNG_PATH),
        "download_url": certificate_url(record, DOWNLOAD_PATH),
        "pdf_url": certificate_url(record, PDF_PATH),
        "print_url": certificate_url(record, PRINT_PATH),
    }


@router.get("/", response_class=HTMLResponse)
async def registration_page(request: Request) -> HTMLResponse:
    """Registration form with the signature pad."""
    return templates.TemplateResponse(
        request,
        "pages/register.html",
        _template_context(form=RegistrationForm(), error=None),
    )


@router.post("/", response_class=HTMLResponse)
async def submit_registration(request: Request) -> Response:
    """Validate the form and show the generated certificate."""
    submitted = await request.form()
    form = RegistrationForm.model_validate(
        {key: value for key, value in submitted.items() if isinstance(value, str)}
    )

    try:
        record = assemble_certificate(form)
    except RegistrationIncompleteError as e:
        logger.info("registration.rejected")
        return templates.TemplateResponse(
            request,
            "pages/register.html",
            _template_context(form=form, error=str(e)),
            status_code=400,
        )

    return RedirectResponse(url=certificate_url(record), status_code=303)


@router.get("/certificate", response_class=HTMLResponse)
async def certificate_page(request: Request) -> HTMLResponse:
    """Render a certificate from its query parameters."""
    record = decode_certificate_query(request.query_params)
    if record is None:
        return _not_found(request)

    svg_content = generate_certificate_svg(record)

    return templates.TemplateResponse(
        request,
        "pages/certificate.html",
        _template_context(
            certificate=record,
            certificate_image=svg_to_base64_data_uri(svg_content),
            share=build_share_payload(record),
            **_certificate_links(record),
        ),
    )


@router.get("/certificate/print", response_class=HTMLResponse)
async def print_certificate_page(request: Request) -> HTMLResponse:
    """Bare page holding the rasterized certificate; prints itself on load."""
    record = decode_certificate_query(request.query_params)
    if record is None:
        return _not_found(request)

    return templates.TemplateResponse(
        request,
        "pages/print.html",
        _template_context(certificate=record, **_certificate_links(record)),
    )


@router.get("/verify", response_class=HTMLResponse)
async def verify_page(
    request: Request,
    db: DbSession,
    reg: str = "",
) -> HTMLResponse:
    """Target of the certificate QR code."""
    result = await verify_registration_number(db, reg.strip())

    return templates.TemplateResponse(
        request,
        "pages/verify.html",
        _template_context(
            result=result,
            issuer_name=get_settings().issuer_name,
        ),
        status_code=200 if result.is_valid else 404,
    )
