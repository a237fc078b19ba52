"""Rotation policy for webhook serving certificates.

Certificates are assumed to be valid for a year. A long-running controller
renews once less than the reserve window is left, so it never serves an
expired certificate.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from opentelemetry import trace

from webhook_tls.domain.models import CertPemPair
from webhook_tls.domain.usages import RotationReason
from webhook_tls.metrics import webhook_tls_metrics
from webhook_tls.tls.pem import CertificateReadError, certificate_expiration_date

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_RESERVE_WINDOW = timedelta(days=180)


@dataclass(frozen=True)
class RotationDecision:
    """Outcome of evaluating a certificate pair at a point in time."""

    rotate: bool
    reason: RotationReason
    not_after: datetime | None = None
    remaining: timedelta | None = None


def _as_utc(moment: datetime | None) -> datetime:
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class ExpiryPolicy:
    """Decides whether a certificate pair must be replaced.

    Stateless: the decision depends only on the pair, ``now`` and the
    reserve window.
    """

    def __init__(self, reserve_window: timedelta = DEFAULT_RESERVE_WINDOW) -> None:
        if reserve_window < timedelta(0):
            raise ValueError("reserve_window must not be negative")
        self.reserve_window = reserve_window

    def evaluate(self, pair: CertPemPair | None, now: datetime | None = None) -> RotationDecision:
        """Evaluate ``pair`` at ``now`` (UTC; defaults to the current time)."""
        with tracer.start_as_current_span("ExpiryPolicy.evaluate") as span:
            decision = self._decide(pair, _as_utc(now))

            span.set_attribute("rotate", decision.rotate)
            span.set_attribute("reason", decision.reason.value)
            webhook_tls_metrics.record_rotation_decision(decision.reason.value, decision.rotate)
            return decision

    def should_rotate(self, pair: CertPemPair | None, now: datetime | None = None) -> bool:
        return self.evaluate(pair, now).rotate

    def _decide(self, pair: CertPemPair | None, now: datetime) -> RotationDecision:
        if pair is None:
            return RotationDecision(rotate=True, reason=RotationReason.NOT_PROVISIONED)

        try:
            not_after = certificate_expiration_date(pair.certificate)
        except CertificateReadError as e:
            # Unreadable certificates are renewed, never used
            logger.warning(
                "certificate_unreadable",
                extra={"error_type": type(e).__name__, "error": str(e)},
            )
            return RotationDecision(rotate=True, reason=RotationReason.UNREADABLE)

        remaining = not_after - now
        if remaining < self.reserve_window:
            return RotationDecision(
                rotate=True,
                reason=RotationReason.WITHIN_RESERVE_WINDOW,
                not_after=not_after,
                remaining=remaining,
            )
        return RotationDecision(
            rotate=False,
            reason=RotationReason.VALID,
            not_after=not_after,
            remaining=remaining,
        )


def should_rotate(
    pair: CertPemPair | None,
    now: datetime | None = None,
    reserve_window: timedelta = DEFAULT_RESERVE_WINDOW,
) -> bool:
    """True when ``pair`` is missing, unreadable, or inside the reserve window."""
    return ExpiryPolicy(reserve_window).should_rotate(pair, now)
