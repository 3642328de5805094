"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping routes thin and focused
on HTTP handling. This separation provides:
- Single source of truth for database operations
- Easier testing (repositories can be mocked)
- Cleaner route code focused on request/response handling
"""

from repositories.certificate_repository import (
    CertificateRepository,
    DuplicateCertificateIdError,
)

__all__ = [
    "CertificateRepository",
    "DuplicateCertificateIdError",
]
