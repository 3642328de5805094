"""SQLAlchemy models for persisted certificates."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from core.database import Base


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin that adds a created_at audit column."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)


class Certificate(TimestampMixin, Base):
    """A certificate record saved through the create endpoint.

    ``id`` is generated by the client and is the only uniqueness guarantee;
    duplicate inserts fail on the primary key rather than on a prior lookup.
    ``date`` and ``expiry_date`` keep the display strings exactly as issued.
    """

    __tablename__ = "certificates"
    __table_args__ = (
        Index("ix_certificates_registration_number", "registration_number"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    course: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[str] = mapped_column(Text, nullable=False)
    signature: Mapped[str] = mapped_column(Text, nullable=False)
    registration_number: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[str] = mapped_column(String, nullable=False)
    qr_code: Mapped[str] = mapped_column(Text, nullable=False)
    expiry_date: Mapped[str] = mapped_column(String, nullable=False)
