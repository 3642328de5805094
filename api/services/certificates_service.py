"""Certificate persistence and verification logic.

This module handles certificate business logic for the create endpoint:
- Required-field checking (all ten persisted fields, reported together)
- Certificate creation (duplicate ids rejected by the storage constraint)
- Lookup by id and by registration number for the /verify page

Routes should delegate all certificate persistence logic to this module.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from models import Certificate
from repositories.certificate_repository import (
    CertificateRepository,
    DuplicateCertificateIdError,
)
from schemas import (
    CertificatePayload,
    CertificateRecord,
    CertificateResponse,
    CertificateVerificationResult,
)

logger = logging.getLogger(__name__)

# Persisted names, in the order they are reported when missing.
REQUIRED_FIELDS: tuple[str, ...] = (
    "id",
    "fullName",
    "email",
    "course",
    "level",
    "signature",
    "registrationNumber",
    "date",
    "qrCode",
    "expiryDate",
)


class MissingFieldsError(Exception):
    """Raised when required certificate fields are absent or empty."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        super().__init__(f"Missing required fields: {', '.join(missing_fields)}")


class CertificateAlreadyExistsError(Exception):
    """Raised when a certificate with the same id is already stored."""

    def __init__(self, certificate_id: str):
        self.certificate_id = certificate_id
        super().__init__("User with this ID already exists")


def _to_certificate_response(certificate: Certificate) -> CertificateResponse:
    return CertificateResponse.model_validate(certificate)


def find_missing_fields(payload: CertificatePayload) -> list[str]:
    """Return the required persisted fields that are missing or empty."""
    data = payload.model_dump(by_alias=True)
    return [field for field in REQUIRED_FIELDS if not data.get(field)]


def to_persisted_payload(record: CertificateRecord) -> CertificatePayload:
    """Map a transported record onto the persisted field names.

    The certificate page and the create endpoint use different names for
    three fields (emailAddress/email, courseCompleted/course,
    levelCompleted/level); this is the single place that mapping lives.
    """
    return CertificatePayload(
        id=record.id,
        full_name=record.full_name,
        email=record.email_address,
        course=record.course_completed,
        level=record.level_completed,
        signature=record.signature,
        registration_number=record.registration_number,
        date=record.date,
        qr_code=record.qr_code,
        expiry_date=record.expiry_date,
    )


async def create_certificate(
    db: AsyncSession,
    payload: CertificatePayload,
) -> str:
    """Validate and store a certificate.

    Args:
        db: Database session
        payload: Request body in persisted field names

    Returns:
        The stored certificate's id

    Raises:
        MissingFieldsError: If any required field is missing or empty
        CertificateAlreadyExistsError: If the id is already stored
    """
    missing = find_missing_fields(payload)
    if missing:
        raise MissingFieldsError(missing)

    # find_missing_fields guarantees every value below is a non-empty str
    cert_repo = CertificateRepository(db)
    try:
        certificate = await cert_repo.create(
            certificate_id=payload.id,
            full_name=payload.full_name,
            email=payload.email,
            course=payload.course,
            level=payload.level,
            signature=payload.signature,
            registration_number=payload.registration_number,
            date=payload.date,
            qr_code=payload.qr_code,
            expiry_date=payload.expiry_date,
        )
    except DuplicateCertificateIdError as e:
        raise CertificateAlreadyExistsError(e.certificate_id) from e

    logger.info(
        "certificate.created",
        extra={
            "certificate_id": certificate.id,
            "registration_number": certificate.registration_number,
        },
    )
    return certificate.id


async def get_certificate(
    db: AsyncSession,
    certificate_id: str,
) -> CertificateResponse | None:
    """Get a stored certificate by id.

    Returns:
        Certificate if found, else None
    """
    cert_repo = CertificateRepository(db)
    certificate = await cert_repo.get_by_id(certificate_id)
    return _to_certificate_response(certificate) if certificate else None


async def verify_registration_number(
    db: AsyncSession,
    registration_number: str,
) -> CertificateVerificationResult:
    """Verify a registration number against stored certificates.

    This is the target of the QR code link. The newest certificate stored
    under the registration number wins.

    Args:
        db: Database session
        registration_number: Value of the ``reg`` query parameter

    Returns:
        CertificateVerificationResult with validation status and message
    """
    if not registration_number:
        return CertificateVerificationResult(
            is_valid=False,
            registration_number="",
            message="No registration number provided.",
        )

    cert_repo = CertificateRepository(db)
    matches = await cert_repo.get_by_registration_number(registration_number, limit=1)

    if not matches:
        return CertificateVerificationResult(
            is_valid=False,
            registration_number=registration_number,
            message="Certificate not found. Please check the registration number.",
        )

    certificate = _to_certificate_response(matches[0])
    return CertificateVerificationResult(
        is_valid=True,
        registration_number=registration_number,
        certificate=certificate,
        message=(
            f"Valid certificate for {certificate.full_name}, "
            f"issued on {certificate.date} and valid until {certificate.expiry_date}"
        ),
    )
