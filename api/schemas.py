"""Pydantic schemas for API request/response validation.

Two spellings of a certificate exist on purpose:

- ``CertificateRecord`` travels in the certificate page URL and uses the
  registration form's names (``emailAddress``, ``courseCompleted``,
  ``levelCompleted``).
- ``CertificatePayload`` / ``CertificateResponse`` are the persisted shape
  used by ``POST /api`` (``email``, ``course``, ``level``).

The two paths never exchange data, so the names are not unified.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# ============ Transport (URL) Schemas ============


class CertificateRecord(BaseModel):
    """One issued certificate as carried by the certificate page URL.

    All ten fields are required and non-empty; see
    ``services.transport_service.decode_certificate_query``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    date: str
    expiry_date: str
    registration_number: str
    full_name: str
    email_address: str
    course_completed: str
    level_completed: str
    signature: str
    qr_code: str


class RegistrationForm(BaseModel):
    """Raw registration form input.

    ``signature`` is the PNG data URI exported from the signature canvas,
    or an empty string when nothing was drawn.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    registration_number: str = ""
    full_name: str = ""
    email_address: str = ""
    course_completed: str = ""
    level_completed: str = ""
    signature: str = ""


class SharePayload(BaseModel):
    """Data handed to the browser's Web Share API."""

    title: str
    text: str
    filename: str
    url: str


# ============ Persistence (API) Schemas ============


def _is_falsy_scalar(value: Any) -> bool:
    return isinstance(value, (bool, int, float, str)) and not value


class CertificatePayload(BaseModel):
    """Request body for POST /api.

    Every field is optional here so the service can report all missing
    fields at once instead of failing on the first.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    id: str | None = None
    full_name: str | None = None
    email: str | None = None
    course: str | None = None
    level: str | None = None
    signature: str | None = None
    registration_number: str | None = None
    date: str | None = None
    qr_code: str | None = None
    expiry_date: str | None = None

    @model_validator(mode="before")
    @classmethod
    def falsy_scalars_are_missing(cls, data: Any) -> Any:
        # 0, 0.0, false and "" count as missing before numbers become strings
        if not isinstance(data, dict):
            return data
        return {
            key: None if _is_falsy_scalar(value) else value
            for key, value in data.items()
        }


class CertificateCreatedResponse(BaseModel):
    """Response for a newly stored certificate."""

    id: str


class CertificateResponse(BaseModel):
    """A stored certificate, in the persisted field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    full_name: str
    email: str
    course: str
    level: str
    signature: str
    registration_number: str
    date: str
    qr_code: str
    expiry_date: str


class ErrorResponse(BaseModel):
    """Error body used by the certificate API."""

    error: str


class CertificateVerificationResult(BaseModel):
    """Outcome of looking up a registration number."""

    is_valid: bool
    registration_number: str
    certificate: CertificateResponse | None = None
    message: str


# ============ Health Schemas ============


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class PoolStatusResponse(BaseModel):
    """Connection pool metrics."""

    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class DetailedHealthResponse(BaseModel):
    """Detailed health check response with component status."""

    status: str
    service: str
    database: bool
    pool: PoolStatusResponse | None = None
