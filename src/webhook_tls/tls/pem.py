"""PEM helpers for signing requests and certificates.

Private key encoding lives in keys.py next to key generation.
"""

from datetime import datetime

from cryptography import x509
from cryptography.hazmat.primitives import serialization

PEM_BEGIN_MARKER = b"-----BEGIN "
CERTIFICATE_PEM_HEADER = b"-----BEGIN CERTIFICATE-----"


class CertificateReadError(Exception):
    """Raised when certificate bytes cannot be turned into a certificate."""

    pass


class CertificateDecodeError(CertificateReadError):
    """No CERTIFICATE PEM block could be decoded."""

    pass


class CertificateParseError(CertificateReadError):
    """The PEM block decoded but its contents are not a valid certificate."""

    pass


def csr_to_pem(csr: x509.CertificateSigningRequest) -> bytes:
    """Encode a signing request as a CERTIFICATE REQUEST PEM block."""
    return csr.public_bytes(serialization.Encoding.PEM)


def load_certificate(data: bytes) -> x509.Certificate:
    """Decode the first PEM block in ``data``, which must be a CERTIFICATE.

    Text before the first block is ignored. Later blocks are never searched: a
    key or request ahead of the certificate makes the data unreadable.

    Raises:
        CertificateDecodeError: If the first PEM block is missing or is not a
            CERTIFICATE block.
        CertificateParseError: If the block does not hold a valid certificate.
    """
    start = data.find(PEM_BEGIN_MARKER) if data else -1
    if start < 0:
        raise CertificateDecodeError("Failed to decode PEM: no PEM block found")
    if not data.startswith(CERTIFICATE_PEM_HEADER, start):
        raise CertificateDecodeError("Failed to decode PEM: first block is not a CERTIFICATE")

    try:
        return x509.load_pem_x509_certificate(data[start:])
    except ValueError as e:
        raise CertificateParseError(f"Failed to parse certificate: {e}") from e


def certificate_expiration_date(data: bytes) -> datetime:
    """Return the certificate's notAfter as an aware UTC datetime."""
    return load_certificate(data).not_valid_after_utc
