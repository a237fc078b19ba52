"""Certificate lifecycle API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from opentelemetry import trace
from starlette.concurrency import run_in_threadpool

from webhook_tls.api.schemas import (
    CertificatePairBody,
    ErrorResponse,
    RenewalRequest,
    RenewalResponse,
    RotationCheckResponse,
)
from webhook_tls.domain.models import CertPemPair, ServiceIdentity
from webhook_tls.services.lifecycle_service import CertificateLifecycleService
from webhook_tls.tls.expiry import RotationDecision
from webhook_tls.tls.keys import KeyGenerationError
from webhook_tls.tls.request_builder import CsrBuildError

tracer = trace.get_tracer(__name__)

router = APIRouter(prefix="/api/certificates", tags=["certificates"])

# Global lifecycle service instance, installed at startup
_lifecycle_service: CertificateLifecycleService | None = None


def set_lifecycle_service(service: CertificateLifecycleService) -> None:
    """Set the global lifecycle service instance."""
    global _lifecycle_service
    _lifecycle_service = service


def get_lifecycle_service() -> CertificateLifecycleService:
    """Dependency to get the lifecycle service."""
    if _lifecycle_service is None:
        raise RuntimeError("CertificateLifecycleService not initialized")
    return _lifecycle_service


def _pair_from_body(body: CertificatePairBody) -> CertPemPair | None:
    if body.certificate_pem is None:
        return None
    return CertPemPair(
        certificate=body.certificate_pem.encode("utf-8"),
        private_key=(body.private_key_pem or "").encode("utf-8"),
    )


def _decision_fields(decision: RotationDecision) -> dict[str, object]:
    return {
        "rotate": decision.rotate,
        "reason": decision.reason.value,
        "not_after": decision.not_after.isoformat() if decision.not_after else None,
        "remaining_seconds": (
            decision.remaining.total_seconds() if decision.remaining is not None else None
        ),
    }


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/rotation-check", response_model=RotationCheckResponse)
async def rotation_check(
    body: CertificatePairBody,
    service: CertificateLifecycleService = Depends(get_lifecycle_service),
) -> RotationCheckResponse:
    """
    Decide whether the given certificate pair must be rotated.

    - Missing or unreadable certificates always rotate
    - Otherwise rotate once less than the reserve window is left
    """
    decision = service.check(_pair_from_body(body))
    return RotationCheckResponse(**_decision_fields(decision))


@router.post(
    "/renewal",
    response_model=RenewalResponse,
    responses={500: {"model": ErrorResponse}},
)
async def renewal(
    body: RenewalRequest,
    service: CertificateLifecycleService = Depends(get_lifecycle_service),
) -> RenewalResponse:
    """
    Return the rotation decision and, when rotating, a new key and CSR object.

    - Returns: private key PEM and a CertificateSigningRequest manifest to submit
    - Errors: 422 (validation), 500 KEY_GENERATION_FAILED | CSR_BUILD_FAILED
    """
    with tracer.start_as_current_span("api.renewal") as span:
        span.set_attribute("service", body.service)
        span.set_attribute("namespace", body.namespace)

        identity = ServiceIdentity(
            service=body.service,
            namespace=body.namespace,
            api_server_host=body.api_server_host,
        )

        try:
            # Key generation is CPU bound; keep it off the event loop
            outcome = await run_in_threadpool(
                service.renew_if_needed,
                identity,
                _pair_from_body(body),
                force=body.force,
                use_fqdn_as_common_name=body.use_fqdn_as_common_name,
            )
        except KeyGenerationError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=ErrorResponse(
                    error="Key generation failed", code="KEY_GENERATION_FAILED", detail=str(e)
                ).model_dump(),
            ) from None
        except CsrBuildError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=ErrorResponse(
                    error="Signing request build failed", code="CSR_BUILD_FAILED", detail=str(e)
                ).model_dump(),
            ) from None

        span.set_attribute("rotate", outcome.decision.rotate)
        span.set_attribute("issued", outcome.issued)

        response = RenewalResponse(**_decision_fields(outcome.decision))
        if outcome.bundle is not None:
            response.private_key_pem = outcome.bundle.private_key_pem.decode("utf-8")
            response.certificate_signing_request = outcome.bundle.signing_request.to_manifest()
        return response
