"""Shared fixtures: keys and self-signed certificates with a chosen notAfter."""

import base64
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from webhook_tls.domain.models import CertPemPair, ServiceIdentity
from webhook_tls.tls.keys import private_key_to_pem

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """One 2048-bit key for the whole run; generation is slow."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def identity() -> ServiceIdentity:
    return ServiceIdentity(service="webhook", namespace="kube-system", api_server_host="10.0.0.1")


@pytest.fixture
def make_pair(rsa_key) -> Callable[[datetime], CertPemPair]:
    """Build a self-signed webhook certificate pair expiring at ``not_after``."""

    def _make(not_after: datetime) -> CertPemPair:
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "webhook")])
        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(rsa_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_after - timedelta(days=365))
            .not_valid_after(not_after)
            .sign(rsa_key, hashes.SHA256())
        )
        return CertPemPair(
            certificate=cert.public_bytes(serialization.Encoding.PEM),
            private_key=private_key_to_pem(rsa_key),
        )

    return _make


@pytest.fixture
def private_key_payload() -> Callable[[bytes], bytes]:
    """DER bytes inside a single PEM block."""

    def _payload(pem: bytes) -> bytes:
        lines = pem.decode("ascii").strip().splitlines()
        return base64.b64decode("".join(lines[1:-1]))

    return _payload


@pytest.fixture
def load_private_key(private_key_payload) -> Callable[[bytes], rsa.RSAPrivateKey]:
    """Load a PRIVATE KEY block whose payload is PKCS#1 DER."""

    def _load(pem: bytes) -> rsa.RSAPrivateKey:
        return serialization.load_der_private_key(private_key_payload(pem), password=None)

    return _load
