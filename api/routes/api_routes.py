"""Certificate persistence endpoints.

Errors from this router use the ``{"error": "..."}`` body shape rather than
FastAPI's ``{"detail": ...}``; see CertificateApiError.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.database import DbSession
from core.ratelimit import CREATE_LIMIT, limiter
from schemas import (
    CertificateCreatedResponse,
    CertificatePayload,
    CertificateResponse,
    ErrorResponse,
)
from services.certificates_service import (
    REQUIRED_FIELDS,
    CertificateAlreadyExistsError,
    MissingFieldsError,
    create_certificate,
    get_certificate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["certificates"])

DEFAULT_SAVE_ERROR = "Failed to save user"
INVALID_BODY_ERROR = "Request body must be a JSON object"


class CertificateApiError(Exception):
    """An error response for the certificate API."""

    def __init__(self, status_code: int, error: str):
        self.status_code = status_code
        self.error = error
        super().__init__(error)


async def certificate_api_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Render CertificateApiError as ``{"error": ...}``."""
    if not isinstance(exc, CertificateApiError):
        return JSONResponse(status_code=500, content={"error": DEFAULT_SAVE_ERROR})
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error).model_dump(),
    )


async def _read_payload(request: Request) -> CertificatePayload:
    """Parse the request body here so every failure keeps the ``{"error"}`` shape.

    Raises:
        CertificateApiError: 400 for a body that is not a JSON object, or for
            fields whose values cannot be read as text
    """
    try:
        data = await request.json()
    except ValueError as e:
        raise CertificateApiError(400, INVALID_BODY_ERROR) from e

    if not isinstance(data, dict):
        raise CertificateApiError(400, INVALID_BODY_ERROR)

    try:
        return CertificatePayload.model_validate(data)
    except ValidationError as e:
        invalid = {str(error["loc"][0]) for error in e.errors() if error["loc"]}
        fields = [field for field in REQUIRED_FIELDS if field in invalid]
        if not fields:
            raise CertificateApiError(400, INVALID_BODY_ERROR) from e
        raise CertificateApiError(
            400, f"Invalid values for fields: {', '.join(fields)}"
        ) from e


@router.post(
    "",
    response_model=CertificateCreatedResponse,
    status_code=201,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Certificate id already exists"},
        500: {"model": ErrorResponse, "description": "Failed to save certificate"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": CertificatePayload.model_json_schema(by_alias=True)
                }
            },
        }
    },
)
@limiter.limit(CREATE_LIMIT)
async def create_certificate_endpoint(
    request: Request,
    db: DbSession,
) -> CertificateCreatedResponse:
    """Store a certificate record."""
    body = await _read_payload(request)

    try:
        certificate_id = await create_certificate(db, body)
    except MissingFieldsError as e:
        raise CertificateApiError(400, str(e)) from e
    except CertificateAlreadyExistsError as e:
        raise CertificateApiError(409, str(e)) from e
    except Exception as e:
        logger.exception(
            "certificate.save.failed",
            extra={"exc_type": type(e).__name__, "certificate_id": body.id},
        )
        raise CertificateApiError(500, str(e) or DEFAULT_SAVE_ERROR) from e

    return CertificateCreatedResponse(id=certificate_id)


@router.get(
    "/{certificate_id}",
    response_model=CertificateResponse,
    responses={404: {"model": ErrorResponse, "description": "Certificate not found"}},
)
async def get_certificate_endpoint(
    certificate_id: str,
    db: DbSession,
) -> CertificateResponse:
    """Get a stored certificate by id."""
    certificate = await get_certificate(db, certificate_id)
    if certificate is None:
        raise CertificateApiError(404, "Certificate not found")
    return certificate
