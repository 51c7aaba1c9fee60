from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from shared.config import settings
from shared.logging import setup_logging
from shared.metrics import render_prometheus, setup_metrics
from signing.api import certificates as certificates_api
from signing.api import digests as digests_api
from signing.api import keys as keys_api
from signing.api import signatures as signatures_api
from signing.api import timestamps as timestamps_api
from signing.api.deps import set_services
from signing.services.workbench import build_services


# Setup OpenTelemetry Tracing
def setup_tracing() -> None:
    resource = Resource.create({"service.name": settings.APP_NAME})
    provider = TracerProvider(resource=resource)

    if settings.TRACE_CONSOLE_EXPORT:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    setup_logging()
    setup_tracing()
    setup_metrics(settings.APP_NAME, console_export=settings.METRICS_CONSOLE_EXPORT)

    LoggingInstrumentor().instrument(set_logging_format=True)

    # Core components and the caller-owned stores
    set_services(build_services(settings))

    yield
    # Shutdown
    set_services(None)


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Instrument FastAPI
FastAPIInstrumentor.instrument_app(app)

# Include routers
app.include_router(keys_api.router)
app.include_router(signatures_api.router)
app.include_router(digests_api.router)
app.include_router(certificates_api.router)
app.include_router(timestamps_api.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "service": settings.APP_NAME}


@app.get("/metrics", include_in_schema=False)
async def prometheus_metrics() -> Response:
    payload, content_type = render_prometheus()
    return Response(content=payload, media_type=content_type)
