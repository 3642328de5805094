"""Repository for certificate operations."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import Certificate


class DuplicateCertificateIdError(Exception):
    """Raised when a certificate with the same primary key already exists."""

    def __init__(self, certificate_id: str):
        self.certificate_id = certificate_id
        super().__init__(f"Certificate {certificate_id!r} already exists")


class CertificateRepository:
    """Repository for certificate CRUD operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, certificate_id: str) -> Certificate | None:
        """Get a certificate by its primary key."""
        return await self.db.get(Certificate, certificate_id)

    async def get_by_registration_number(
        self,
        registration_number: str,
        *,
        limit: int = 100,
    ) -> Sequence[Certificate]:
        """Get certificates issued under a registration number, newest first."""
        result = await self.db.execute(
            select(Certificate)
            .where(Certificate.registration_number == registration_number)
            .order_by(Certificate.created_at.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def create(
        self,
        *,
        certificate_id: str,
        full_name: str,
        email: str,
        course: str,
        level: str,
        signature: str,
        registration_number: str,
        date: str,
        qr_code: str,
        expiry_date: str,
    ) -> Certificate:
        """Insert a new certificate.

        Calls flush() but does NOT commit; the caller is responsible for
        transaction management. The primary key constraint is the duplicate
        check, so there is no read-before-write race.

        Raises:
            DuplicateCertificateIdError: If ``certificate_id`` is already stored.
        """
        certificate = Certificate(
            id=certificate_id,
            full_name=full_name,
            email=email,
            course=course,
            level=level,
            signature=signature,
            registration_number=registration_number,
            date=date,
            qr_code=qr_code,
            expiry_date=expiry_date,
        )
        self.db.add(certificate)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Only the primary key is unique on this table.
            raise DuplicateCertificateIdError(certificate_id) from e
        return certificate
