"""Registration form validation and certificate assembly.

This module turns a submitted registration form into a complete
CertificateRecord:
- Aggregate validation (five text fields plus a drawn signature)
- Signature emptiness check on the canvas PNG
- Issue/expiry date synthesis
- Verification link for the QR code
- Unique id generation
"""

import base64
import binascii
import logging
from collections.abc import Callable
from datetime import UTC, date, datetime
from io import BytesIO
from urllib.parse import quote, urlencode
from uuid import uuid4

from PIL import Image, ImageOps

from core.config import Settings, get_settings
from schemas import CertificateRecord, RegistrationForm

logger = logging.getLogger(__name__)

PNG_DATA_URI_PREFIX = "data:image/png;base64,"

REGISTRATION_ERROR_MESSAGE = "Please fill in all fields and draw your signature."

TEXT_FIELDS: tuple[str, ...] = (
    "registration_number",
    "full_name",
    "email_address",
    "course_completed",
    "level_completed",
)


class RegistrationIncompleteError(Exception):
    """Raised when any form field is empty or no signature was drawn.

    Deliberately carries no per-field detail; the form shows one message.
    """

    def __init__(self) -> None:
        super().__init__(REGISTRATION_ERROR_MESSAGE)


def is_signature_empty(data_uri: str) -> bool:
    """Return True unless ``data_uri`` is a PNG with at least one inked pixel.

    Transparent and pure white pixels count as blank, which is what an
    untouched signature canvas exports.
    """
    if not data_uri or not data_uri.startswith(PNG_DATA_URI_PREFIX):
        return True

    try:
        raw = base64.b64decode(data_uri[len(PNG_DATA_URI_PREFIX) :], validate=True)
        with Image.open(BytesIO(raw)) as image:
            rgba = image.convert("RGBA")
    except (binascii.Error, OSError, ValueError):
        logger.info("signature.undecodable")
        return True

    flattened = Image.alpha_composite(Image.new("RGBA", rgba.size, "white"), rgba)
    ink = ImageOps.invert(flattened.convert("L"))
    return ink.getbbox() is None


def validate_registration(form: RegistrationForm) -> None:
    """Reject the form as a whole if anything is missing.

    Raises:
        RegistrationIncompleteError: If a text field is empty or the
            signature is blank
    """
    if any(not getattr(form, field) for field in TEXT_FIELDS):
        raise RegistrationIncompleteError()
    if is_signature_empty(form.signature):
        raise RegistrationIncompleteError()


def add_years(day: date, years: int) -> date:
    """Same month and day ``years`` later; Feb 29 rolls over to Mar 1."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return date(day.year + years, 3, 1)


def format_locale_date(day: date, date_format: str) -> str:
    """Format like toLocaleDateString(); ``date_format`` uses {month}/{day}/{year}."""
    return date_format.format(month=day.month, day=day.day, year=day.year)


def issue_dates(
    issued_on: date,
    *,
    validity_years: int = 2,
    date_format: str = "{month}/{day}/{year}",
) -> tuple[str, str]:
    """Return the (issue date, expiry date) display strings."""
    expires_on = add_years(issued_on, validity_years)
    return (
        format_locale_date(issued_on, date_format),
        format_locale_date(expires_on, date_format),
    )


def build_verification_link(registration_number: str, base_url: str) -> str:
    """Verification URL for the QR code, e.g. https://host/verify?reg=ABC%2F1."""
    separator = "&" if "?" in base_url else "?"
    query = urlencode({"reg": registration_number}, quote_via=quote)
    return f"{base_url}{separator}{query}"


def assemble_certificate(
    form: RegistrationForm,
    settings: Settings | None = None,
    *,
    issued_on: date | None = None,
    id_factory: Callable[[], str] = lambda: str(uuid4()),
) -> CertificateRecord:
    """Validate a registration form and synthesize the full record.

    Args:
        form: Raw form input
        settings: Settings to read certificate options from (defaults to
            the cached application settings)
        issued_on: Issue date (defaults to today, UTC)
        id_factory: Source of the certificate id (defaults to a UUID4)

    Returns:
        A complete CertificateRecord with plain-text field values

    Raises:
        RegistrationIncompleteError: If validation fails
    """
    validate_registration(form)

    settings = settings or get_settings()
    issued_on = issued_on or datetime.now(UTC).date()
    issue_date, expiry_date = issue_dates(
        issued_on,
        validity_years=settings.certificate_validity_years,
        date_format=settings.date_format,
    )

    record = CertificateRecord(
        id=id_factory(),
        date=issue_date,
        expiry_date=expiry_date,
        registration_number=form.registration_number,
        full_name=form.full_name,
        email_address=form.email_address,
        course_completed=form.course_completed,
        level_completed=form.level_completed,
        signature=form.signature,
        qr_code=build_verification_link(
            form.registration_number, settings.verification_base_url
        ),
    )

    logger.info(
        "certificate.assembled",
        extra={
            "certificate_id": record.id,
            "registration_number": record.registration_number,
        },
    )
    return record
