from src.main import health_check, run
from src.shared.config import Settings
from src.webhook_tls.api.certificates import renewal, rotation_check
from src.webhook_tls.api.schemas import ErrorResponse, RenewalResponse
from src.webhook_tls.domain.models import CertPemPair, SigningRequest
from src.webhook_tls.domain.usages import RotationReason
from src.webhook_tls.tls.expiry import RotationDecision

# Pydantic Settings
Settings.model_config
Settings.APP_ENV
Settings.HOST
Settings.PORT

# Response models (fields are read by FastAPI serialization)
RenewalResponse.private_key_pem
RenewalResponse.certificate_signing_request
ErrorResponse.error
ErrorResponse.code
ErrorResponse.detail

# Domain values (read by callers and the manifest)
CertPemPair.private_key
SigningRequest.kind
SigningRequest.dns_names
RotationDecision.remaining
RotationReason.WITHIN_RESERVE_WINDOW

# FastAPI routes
health_check
rotation_check
renewal

# Console script entry point
run
