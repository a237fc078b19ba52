"""OpenTelemetry metrics for the certificate lifecycle."""

from opentelemetry import metrics

meter = metrics.get_meter("webhook_tls")

# Key generation
keys_generated_total = meter.create_counter(
    name="webhook_tls_keys_generated_total",
    description="Total private keys generated",
    unit="1",
)

key_generation_duration = meter.create_histogram(
    name="webhook_tls_key_generation_duration_seconds",
    description="Private key generation duration in seconds",
    unit="s",
)

# Signing requests
signing_requests_built_total = meter.create_counter(
    name="webhook_tls_signing_requests_built_total",
    description="Total certificate signing requests built",
    unit="1",
)

signing_request_failures_total = meter.create_counter(
    name="webhook_tls_signing_request_failures_total",
    description="Total failures while generating keys or building signing requests",
    unit="1",
)

# Rotation decisions
rotation_decisions_total = meter.create_counter(
    name="webhook_tls_rotation_decisions_total",
    description="Total rotation decisions by outcome",
    unit="1",
)


class WebhookTlsMetrics:
    """Facade for certificate lifecycle metrics with proper labels."""

    def record_key_generated(self, key_size: int, duration_seconds: float) -> None:
        keys_generated_total.add(1, {"key_size": key_size})
        key_generation_duration.record(duration_seconds)

    def record_signing_request_built(self, host_kind: str) -> None:
        """Record a built CSR. Labels: host_kind=ip|dns|none"""
        signing_requests_built_total.add(1, {"host_kind": host_kind})

    def record_signing_request_failed(self, stage: str) -> None:
        """Record a generation failure. Labels: stage=key|csr"""
        signing_request_failures_total.add(1, {"stage": stage})

    def record_rotation_decision(self, reason: str, rotate: bool) -> None:
        """Record an expiry evaluation. Labels: reason=<RotationReason>, rotate=true|false"""
        rotation_decisions_total.add(1, {"reason": reason, "rotate": str(rotate).lower()})


# Singleton instance
webhook_tls_metrics = WebhookTlsMetrics()
