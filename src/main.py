from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from shared.config import settings
from shared.logging import setup_logging
from shared.metrics import setup_metrics
from webhook_tls.api import certificates as certificates_api
from webhook_tls.services.lifecycle_service import CertificateLifecycleService
from webhook_tls.tls.expiry import ExpiryPolicy
from webhook_tls.tls.request_builder import SigningRequestBuilder


def setup_tracing() -> None:
    resource = Resource.create({"service.name": settings.APP_NAME})
    provider = TracerProvider(resource=resource)

    processor = BatchSpanProcessor(ConsoleSpanExporter())
    provider.add_span_processor(processor)

    trace.set_tracer_provider(provider)


def build_lifecycle_service() -> CertificateLifecycleService:
    """Wire the lifecycle service from settings."""
    return CertificateLifecycleService(
        policy=ExpiryPolicy(reserve_window=timedelta(days=settings.TLS_RESERVE_WINDOW_DAYS)),
        builder=SigningRequestBuilder(
            groups=settings.signer_groups,
            api_version=settings.TLS_CSR_API_VERSION,
        ),
        key_size=settings.TLS_KEY_SIZE,
        use_fqdn_as_common_name=settings.TLS_USE_FQDN_AS_COMMON_NAME,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    setup_logging(settings.APP_NAME)
    setup_tracing()
    setup_metrics(settings.APP_NAME)

    LoggingInstrumentor().instrument(set_logging_format=True)

    certificates_api.set_lifecycle_service(build_lifecycle_service())

    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

FastAPIInstrumentor.instrument_app(app)

app.include_router(certificates_api.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "service": settings.APP_NAME}


def run() -> None:
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
