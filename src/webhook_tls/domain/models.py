"""Value objects shared by the key/CSR builder and the expiry policy.

All of them are immutable; a new certificate pair always replaces the old one
as a whole in the caller's store.
"""

import base64
import ipaddress
from dataclasses import dataclass, field
from typing import Any

from webhook_tls.domain.usages import CSR_KIND, DEFAULT_API_VERSION, KeyUsage

IpLiteral = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class IpAddress:
    """API server host given as an IP literal; goes to the IP SAN set."""

    ip: IpLiteral

    def __str__(self) -> str:
        return str(self.ip)


@dataclass(frozen=True)
class DnsName:
    """API server host given as a hostname; goes to the DNS SAN set."""

    name: str

    def __str__(self) -> str:
        return self.name


HostSpecifier = IpAddress | DnsName


def parse_host(host: str) -> HostSpecifier | None:
    """Classify an API server host once, as an IP literal or a DNS name.

    Returns None for an empty host so that no extra SAN is added.
    """
    host = host.strip()
    if not host:
        return None
    try:
        return IpAddress(ipaddress.ip_address(host))
    except ValueError:
        return DnsName(host)


@dataclass(frozen=True)
class ServiceIdentity:
    """The in-cluster service a webhook certificate is issued for."""

    service: str
    namespace: str
    api_server_host: str = ""

    def __post_init__(self) -> None:
        if not self.service.strip():
            raise ValueError("service must not be empty")
        if not self.namespace.strip():
            raise ValueError("namespace must not be empty")

    @property
    def in_cluster_name(self) -> str:
        return f"{self.service}.{self.namespace}.svc"

    @property
    def request_name(self) -> str:
        return f"{self.service}.{self.namespace}.cert-request"

    @property
    def host(self) -> HostSpecifier | None:
        return parse_host(self.api_server_host)


@dataclass(frozen=True)
class CertPemPair:
    """A certificate and its private key, both PEM framed."""

    certificate: bytes
    private_key: bytes


@dataclass(frozen=True)
class SigningRequest:
    """A PEM CSR plus the metadata needed to submit it for signing.

    Not persisted; the caller hands it to the certificates API and drops it.
    """

    name: str
    csr_pem: bytes
    common_name: str
    dns_names: tuple[str, ...]
    ip_addresses: tuple[IpLiteral, ...]
    usages: tuple[KeyUsage, ...]
    groups: tuple[str, ...]
    api_version: str = DEFAULT_API_VERSION
    kind: str = field(default=CSR_KIND, init=False)

    def to_manifest(self) -> dict[str, Any]:
        """Render the CertificateSigningRequest object.

        spec.request is base64 encoded, matching how the API serializes byte
        fields in JSON.
        """
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {"name": self.name},
            "spec": {
                "request": base64.b64encode(self.csr_pem).decode("ascii"),
                "groups": list(self.groups),
                "usages": [str(u) for u in self.usages],
            },
        }
