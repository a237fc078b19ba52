"""Pydantic schemas for the certificate API."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class CertificatePairBody(BaseModel):
    """An existing certificate pair, PEM text. Omit the certificate if none exists."""

    certificate_pem: str | None = None
    private_key_pem: str | None = None


class RenewalRequest(CertificatePairBody):
    """Request body for a renewal decision."""

    service: str = Field(..., min_length=1, max_length=63)
    namespace: str = Field(..., min_length=1, max_length=63)
    api_server_host: str = Field("", max_length=253)
    use_fqdn_as_common_name: bool | None = None
    force: bool = False

    @field_validator("service", "namespace")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class RotationCheckResponse(BaseModel):
    """Expiry policy decision for a certificate pair."""

    rotate: bool
    reason: str
    not_after: str | None = None
    remaining_seconds: float | None = None


class RenewalResponse(RotationCheckResponse):
    """Decision plus the material the caller must persist and submit."""

    private_key_pem: str | None = None
    certificate_signing_request: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    detail: str | None = None
