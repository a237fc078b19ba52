"""Private key generation and PEM encoding."""

import base64
import textwrap
import time

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from webhook_tls.metrics import webhook_tls_metrics

DEFAULT_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

PRIVATE_KEY_PEM_TYPE = "PRIVATE KEY"
PEM_LINE_LENGTH = 64


class KeyGenerationError(Exception):
    """Raised when the RSA key cannot be generated."""

    pass


def generate_private_key(key_size: int = DEFAULT_KEY_SIZE) -> rsa.RSAPrivateKey:
    """Generate a fresh RSA key from the OS random source.

    Args:
        key_size: Modulus size in bits.

    Raises:
        KeyGenerationError: If the backend or random source fails.
    """
    start_time = time.perf_counter()
    try:
        key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=key_size)
    except Exception as e:
        raise KeyGenerationError(f"Failed to generate {key_size}-bit RSA key: {e}") from e

    webhook_tls_metrics.record_key_generated(key_size, time.perf_counter() - start_time)
    return key


def private_key_der(key: rsa.RSAPrivateKey) -> bytes:
    """PKCS#1 RSAPrivateKey DER of ``key``."""
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def private_key_to_pem(key: rsa.RSAPrivateKey) -> bytes:
    """Encode a private key as a PRIVATE KEY PEM block with a PKCS#1 payload.

    Consumers of the webhook secret decode the block and parse its bytes as
    PKCS#1, so the payload is not PKCS#8 despite the block type.
    """
    body = base64.b64encode(private_key_der(key)).decode("ascii")
    lines = textwrap.wrap(body, PEM_LINE_LENGTH)
    pem = "\n".join(
        [f"-----BEGIN {PRIVATE_KEY_PEM_TYPE}-----", *lines, f"-----END {PRIVATE_KEY_PEM_TYPE}-----"]
    )
    return f"{pem}\n".encode("ascii")
