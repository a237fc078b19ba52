"""Certificate lifecycle service: rotation decisions and renewal bundles.

The controller that owns the certificate secret calls this service to find out
whether its pair must be replaced and, if so, to get a new private key and the
signing request to submit. Submission, approval and persistence stay with the
controller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from opentelemetry import trace

from webhook_tls.domain.models import CertPemPair, ServiceIdentity, SigningRequest
from webhook_tls.metrics import webhook_tls_metrics
from webhook_tls.tls.expiry import ExpiryPolicy, RotationDecision
from webhook_tls.tls.keys import (
    DEFAULT_KEY_SIZE,
    KeyGenerationError,
    generate_private_key,
    private_key_to_pem,
)
from webhook_tls.tls.request_builder import CsrBuildError, SigningRequestBuilder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class RenewalBundle:
    """A fresh private key and the signing request built from it."""

    private_key_pem: bytes
    signing_request: SigningRequest


@dataclass(frozen=True)
class RenewalOutcome:
    """Rotation decision plus the bundle to persist when rotation is needed."""

    decision: RotationDecision
    bundle: RenewalBundle | None = None

    @property
    def issued(self) -> bool:
        return self.bundle is not None


class CertificateLifecycleService:
    """Combines the expiry policy with key and signing request generation."""

    def __init__(
        self,
        policy: ExpiryPolicy | None = None,
        builder: SigningRequestBuilder | None = None,
        key_size: int = DEFAULT_KEY_SIZE,
        use_fqdn_as_common_name: bool = False,
    ) -> None:
        self.policy = policy or ExpiryPolicy()
        self.builder = builder or SigningRequestBuilder()
        self.key_size = key_size
        self.use_fqdn_as_common_name = use_fqdn_as_common_name

    def check(self, pair: CertPemPair | None, now: datetime | None = None) -> RotationDecision:
        """Evaluate the current pair against the expiry policy."""
        decision = self.policy.evaluate(pair, now)

        logger.debug(
            "rotation_checked",
            extra={
                "rotate": decision.rotate,
                "reason": decision.reason.value,
                "not_after": decision.not_after.isoformat() if decision.not_after else None,
            },
        )
        return decision

    def issue(
        self,
        identity: ServiceIdentity,
        use_fqdn_as_common_name: bool | None = None,
    ) -> RenewalBundle:
        """Generate a new key and build the signing request for ``identity``.

        Raises:
            KeyGenerationError: If key generation fails.
            CsrBuildError: If the signing request cannot be built.
        """
        if use_fqdn_as_common_name is None:
            use_fqdn_as_common_name = self.use_fqdn_as_common_name

        with tracer.start_as_current_span("CertificateLifecycleService.issue") as span:
            span.set_attribute("service", identity.service)
            span.set_attribute("namespace", identity.namespace)

            try:
                key = generate_private_key(self.key_size)
            except KeyGenerationError as e:
                webhook_tls_metrics.record_signing_request_failed("key")
                logger.error(
                    "private_key_generation_failed",
                    extra={"service": identity.in_cluster_name, "error": str(e)},
                )
                raise

            try:
                signing_request = self.builder.build(key, identity, use_fqdn_as_common_name)
            except CsrBuildError as e:
                webhook_tls_metrics.record_signing_request_failed("csr")
                logger.error(
                    "signing_request_failed",
                    extra={"service": identity.in_cluster_name, "error": str(e)},
                )
                raise

            span.set_attribute("request_name", signing_request.name)

            logger.info(
                "signing_request_built",
                extra={
                    "request_name": signing_request.name,
                    "common_name": signing_request.common_name,
                    "dns_names": list(signing_request.dns_names),
                    "ip_addresses": [str(ip) for ip in signing_request.ip_addresses],
                },
            )

            return RenewalBundle(
                private_key_pem=private_key_to_pem(key),
                signing_request=signing_request,
            )

    def renew_if_needed(
        self,
        identity: ServiceIdentity,
        pair: CertPemPair | None,
        now: datetime | None = None,
        force: bool = False,
        use_fqdn_as_common_name: bool | None = None,
    ) -> RenewalOutcome:
        """Return the rotation decision and, when rotating, a new bundle.

        ``force`` issues a new bundle even when the current pair is still valid.
        """
        decision = self.check(pair, now)
        if not (decision.rotate or force):
            return RenewalOutcome(decision=decision)

        bundle = self.issue(identity, use_fqdn_as_common_name)
        return RenewalOutcome(decision=decision, bundle=bundle)
