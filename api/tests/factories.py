"""Factory Boy factories for generating test data.

Usage:
    # A persisted certificate row
    cert = await create_async(CertificateFactory, db_session)

    # A record as carried by the certificate page URL (never persisted)
    record = CertificateRecordFactory.build(full_name="Ada Lovelace")

    # A signature pad export
    signature = signature_data_uri()          # inked
    blank = signature_data_uri(blank=True)    # untouched pad
"""

import base64
from datetime import UTC, datetime
from io import BytesIO

import factory
from faker import Faker
from PIL import Image, ImageDraw
from sqlalchemy.ext.asyncio import AsyncSession

from models import Certificate
from schemas import CertificateRecord, RegistrationForm

fake = Faker()

VERIFY_BASE_URL = "https://certs.example.org/verify"


def signature_data_uri(
    *, blank: bool = False, size: tuple[int, int] = (400, 100)
) -> str:
    """PNG data URI like the signature canvas exports (transparent background)."""
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    if not blank:
        draw = ImageDraw.Draw(image)
        draw.line([(20, 70), (120, 30), (220, 75), (360, 25)], fill="black", width=3)
    buf = BytesIO()
    image.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _registration_number() -> str:
    return f"SDSAN/{fake.random_int(2020, 2030)}/{fake.random_int(1, 9999):04d}"


# =============================================================================
# Async Factory Helpers
# =============================================================================


async def create_async(
    factory_class: type[factory.Factory], db: AsyncSession, **kwargs
):
    """Create an instance using a factory and persist to database.

    Usage:
        cert = await create_async(CertificateFactory, db_session, level="3")
    """
    instance = factory_class.build(**kwargs)
    db.add(instance)
    await db.flush()
    await db.refresh(instance)
    return instance


# =============================================================================
# Certificate Factories
# =============================================================================


class CertificateFactory(factory.Factory):
    """Factory for creating persisted Certificate rows."""

    class Meta:
        model = Certificate

    id = factory.LazyFunction(lambda: str(fake.uuid4()))
    full_name = factory.LazyAttribute(
        lambda _: f"{fake.first_name()} {fake.last_name()}"
    )
    email = factory.LazyAttribute(lambda _: fake.email())
    course = factory.LazyAttribute(lambda _: fake.catch_phrase())
    level = factory.LazyAttribute(lambda _: str(fake.random_int(1, 5)))
    signature = factory.LazyFunction(signature_data_uri)
    registration_number = factory.LazyFunction(_registration_number)
    date = "3/14/2026"
    qr_code = factory.LazyAttribute(
        lambda obj: f"{VERIFY_BASE_URL}?reg={obj.registration_number}"
    )
    expiry_date = "3/14/2028"
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))


class CertificateRecordFactory(factory.Factory):
    """Factory for CertificateRecord, the URL-carried certificate."""

    class Meta:
        model = CertificateRecord

    id = factory.LazyFunction(lambda: str(fake.uuid4()))
    date = "3/14/2026"
    expiry_date = "3/14/2028"
    registration_number = factory.LazyFunction(_registration_number)
    full_name = factory.LazyAttribute(
        lambda _: f"{fake.first_name()} {fake.last_name()}"
    )
    email_address = factory.LazyAttribute(lambda _: fake.email())
    course_completed = factory.LazyAttribute(lambda _: fake.catch_phrase())
    level_completed = factory.LazyAttribute(lambda _: str(fake.random_int(1, 5)))
    signature = factory.LazyFunction(signature_data_uri)
    qr_code = factory.LazyAttribute(
        lambda obj: f"{VERIFY_BASE_URL}?reg={obj.registration_number}"
    )


class RegistrationFormFactory(factory.Factory):
    """Factory for a complete, valid registration form submission."""

    class Meta:
        model = RegistrationForm

    registration_number = factory.LazyFunction(_registration_number)
    full_name = factory.LazyAttribute(
        lambda _: f"{fake.first_name()} {fake.last_name()}"
    )
    email_address = factory.LazyAttribute(lambda _: fake.email())
    course_completed = factory.LazyAttribute(lambda _: fake.catch_phrase())
    level_completed = factory.LazyAttribute(lambda _: str(fake.random_int(1, 5)))
    signature = factory.LazyFunction(signature_data_uri)


def persisted_payload(**overrides) -> dict[str, str]:
    """A complete POST /api body in persisted field names."""
    registration_number = _registration_number()
    body = {
        "id": str(fake.uuid4()),
        "fullName": f"{fake.first_name()} {fake.last_name()}",
        "email": fake.email(),
        "course": fake.catch_phrase(),
        "level": "3",
        "signature": signature_data_uri(),
        "registrationNumber": registration_number,
        "date": "3/14/2026",
        "qrCode": f"{VERIFY_BASE_URL}?reg={registration_number}",
        "expiryDate": "3/14/2028",
    }
    body.update(overrides)
    return body
