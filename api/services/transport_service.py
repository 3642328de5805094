"""Certificate <-> query string transport.

The certificate page is driven entirely by its URL, so a record is carried
as ten query parameters. Values are URL-component-encoded exactly once, here,
at the transport boundary. Callers hand in and get back plain text; nothing
upstream (including the QR link) is pre-encoded.
"""

from collections.abc import Mapping
from urllib.parse import quote, urlencode

from schemas import CertificateRecord

# Navigation contract, in the order the keys appear in the URL.
TRANSPORT_KEYS: tuple[str, ...] = (
    "id",
    "date",
    "expiryDate",
    "registrationNumber",
    "fullName",
    "emailAddress",
    "courseCompleted",
    "levelCompleted",
    "signature",
    "qrCode",
)

CERTIFICATE_PATH = "/certificate"


def encode_certificate_query(record: CertificateRecord) -> str:
    """Encode a record as a query string (without the leading ``?``).

    Uses percent-encoding for every reserved character, including ``/``,
    ``+`` and spaces, matching encodeURIComponent.
    """
    values = record.model_dump(by_alias=True)
    return urlencode([(key, values[key]) for key in TRANSPORT_KEYS], quote_via=quote)


def decode_certificate_query(params: Mapping[str, str]) -> CertificateRecord | None:
    """Rebuild a record from already-parsed query parameters.

    ``params`` is whatever the framework parsed (Starlette ``QueryParams``,
    a ``dict`` from ``parse_qsl``); its values are decoded once by that
    parser and are not decoded again here.

    Returns None when any of the ten keys is missing or empty. A record is
    all-or-nothing; there is no partial certificate.
    """
    values = {key: params.get(key) for key in TRANSPORT_KEYS}
    if not all(values.values()):
        return None
    return CertificateRecord.model_validate(values)


def certificate_url(record: CertificateRecord, path: str = CERTIFICATE_PATH) -> str:
    """Relative URL of ``path`` carrying ``record``."""
    return f"{path}?{encode_certificate_query(record)}"
