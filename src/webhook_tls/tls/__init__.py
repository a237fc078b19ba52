"""TLS module for webhook serving certificates.

This module provides:
- RSA key generation and PEM encoding
- Certificate signing request construction for in-cluster services
- Expiry-based rotation decisions for existing certificate pairs
"""

from webhook_tls.tls.expiry import ExpiryPolicy, RotationDecision, should_rotate
from webhook_tls.tls.keys import KeyGenerationError, generate_private_key, private_key_to_pem
from webhook_tls.tls.request_builder import (
    CsrBuildError,
    SigningRequestBuilder,
    build_signing_request,
    in_cluster_service_name,
)

__all__ = [
    "CsrBuildError",
    "ExpiryPolicy",
    "KeyGenerationError",
    "RotationDecision",
    "SigningRequestBuilder",
    "build_signing_request",
    "generate_private_key",
    "in_cluster_service_name",
    "private_key_to_pem",
    "should_rotate",
]
