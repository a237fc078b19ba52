"""Certificate signing request construction for in-cluster webhook services."""

from collections.abc import Iterable

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from opentelemetry import trace

from webhook_tls.domain.models import (
    DnsName,
    HostSpecifier,
    IpAddress,
    IpLiteral,
    ServiceIdentity,
    SigningRequest,
)
from webhook_tls.domain.usages import (
    DEFAULT_API_VERSION,
    DEFAULT_SIGNER_GROUPS,
    DEFAULT_USAGES,
    KeyUsage,
)
from webhook_tls.metrics import webhook_tls_metrics
from webhook_tls.tls.pem import csr_to_pem

tracer = trace.get_tracer(__name__)


class CsrBuildError(Exception):
    """Raised when the X.509 signing request cannot be built or signed."""

    pass


def in_cluster_service_name(identity: ServiceIdentity) -> str:
    """The FQDN clients inside the cluster use: <service>.<namespace>.svc."""
    return identity.in_cluster_name


def dns_sans(identity: ServiceIdentity, host: HostSpecifier | None) -> list[str]:
    names = [
        identity.service,
        f"{identity.service}.{identity.namespace}",
        in_cluster_service_name(identity),
    ]
    if isinstance(host, DnsName):
        names.append(host.name)
    return names


def ip_sans(host: HostSpecifier | None) -> list[IpLiteral]:
    if isinstance(host, IpAddress):
        return [host.ip]
    return []


def _host_kind(host: HostSpecifier | None) -> str:
    if isinstance(host, IpAddress):
        return "ip"
    if isinstance(host, DnsName):
        return "dns"
    return "none"


class SigningRequestBuilder:
    """Builds the CSR and submission metadata for a service identity.

    Request attributes:
    - Subject: CN=<service>, or CN=<service>.<namespace>.svc when requested
    - DNS SANs: service, service.namespace, service.namespace.svc, and the
      API server host when it is a hostname
    - IP SANs: the API server host when it is an IP literal
    - Signature: SHA-256 with RSA
    """

    def __init__(
        self,
        groups: Iterable[str] = DEFAULT_SIGNER_GROUPS,
        usages: Iterable[KeyUsage] = DEFAULT_USAGES,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        self.groups = tuple(groups)
        self.usages = tuple(usages)
        self.api_version = api_version

    def build(
        self,
        key: rsa.RSAPrivateKey,
        identity: ServiceIdentity,
        use_fqdn_as_common_name: bool = False,
    ) -> SigningRequest:
        """Build a signed CSR for ``identity``.

        Args:
            key: Private key the request is signed with.
            identity: Service the certificate is for.
            use_fqdn_as_common_name: Put the FQDN in the CN, for validators
                that ignore SANs and match only the common name.

        Raises:
            CsrBuildError: If the subject is malformed or signing fails.
        """
        with tracer.start_as_current_span("SigningRequestBuilder.build") as span:
            span.set_attribute("service", identity.service)
            span.set_attribute("namespace", identity.namespace)

            host = identity.host
            dns_names = dns_sans(identity, host)
            ip_addresses = ip_sans(host)
            common_name = (
                in_cluster_service_name(identity) if use_fqdn_as_common_name else identity.service
            )

            span.set_attribute("common_name", common_name)
            span.set_attribute("host_kind", _host_kind(host))

            try:
                san_entries: list[x509.GeneralName] = [x509.DNSName(n) for n in dns_names]
                san_entries.extend(x509.IPAddress(ip) for ip in ip_addresses)

                csr = (
                    x509.CertificateSigningRequestBuilder()
                    .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)]))
                    .add_extension(x509.SubjectAlternativeName(san_entries), critical=False)
                    .sign(key, hashes.SHA256())
                )
            except Exception as e:
                raise CsrBuildError(
                    f"Failed to build signing request for {identity.in_cluster_name}: {e}"
                ) from e

            webhook_tls_metrics.record_signing_request_built(_host_kind(host))

            return SigningRequest(
                name=identity.request_name,
                csr_pem=csr_to_pem(csr),
                common_name=common_name,
                dns_names=tuple(dns_names),
                ip_addresses=tuple(ip_addresses),
                usages=self.usages,
                groups=self.groups,
                api_version=self.api_version,
            )


def build_signing_request(
    key: rsa.RSAPrivateKey,
    identity: ServiceIdentity,
    use_fqdn_as_common_name: bool = False,
) -> SigningRequest:
    """Build a signing request with the default groups, usages and API version."""
    return SigningRequestBuilder().build(key, identity, use_fqdn_as_common_name)
