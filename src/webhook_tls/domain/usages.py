from enum import StrEnum


class KeyUsage(StrEnum):
    """Key usages understood by the Kubernetes certificates API."""

    DIGITAL_SIGNATURE = "digital signature"
    KEY_ENCIPHERMENT = "key encipherment"
    SERVER_AUTH = "server auth"
    CLIENT_AUTH = "client auth"


class RotationReason(StrEnum):
    """Why the expiry policy reached its decision."""

    NOT_PROVISIONED = "not_provisioned"
    UNREADABLE = "unreadable"  # decode or parse failure, treated like expiry
    WITHIN_RESERVE_WINDOW = "within_reserve_window"
    VALID = "valid"


DEFAULT_USAGES: tuple[KeyUsage, ...] = (
    KeyUsage.DIGITAL_SIGNATURE,
    KeyUsage.KEY_ENCIPHERMENT,
    KeyUsage.SERVER_AUTH,
    KeyUsage.CLIENT_AUTH,
)

DEFAULT_SIGNER_GROUPS: tuple[str, ...] = ("system:masters", "system:authenticated")

DEFAULT_API_VERSION = "certificates.k8s.io/v1beta1"
CSR_KIND = "CertificateSigningRequest"
