import asyncio
import random
import sys

import asyncpg
from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .alembic_helper import run_alembic_migrations
from .clients import AccountInfoClient
from .settings import portfolio_settings


def setup_logging() -> None:
    """Configure Loguru for consistent, structured service logs."""
    logger.remove()
    logger.add(
        sink=sys.stdout,
        level=portfolio_settings().log_level.upper(),
        backtrace=False,
        diagnose=False,
        colorize=False,
        serialize=False,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level> {extra}",
    )
    logger.info("🪵 Logging configured successfully.")


def setup_instrumentation(app: FastAPI) -> None:
    """Attach OpenTelemetry tracing when an OTLP endpoint is configured. Idempotent."""
    settings = portfolio_settings()
    if not settings.otel_endpoint:
        logger.info("📈 OTLP endpoint not set; tracing disabled.")
        return
    if not isinstance(trace.get_tracer_provider(), trace.ProxyTracerProvider):
        logger.info("📈 OpenTelemetry instrumentation already initialized. Skipping reconfiguration.")
        return

    resource = Resource(attributes={SERVICE_NAME: settings.service_name})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_endpoint))
    )
    trace.set_tracer_provider(tracer_provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    app.state.tracer_provider = tracer_provider
    logger.info("📈 OpenTelemetry instrumentation configured.")


async def _check_database_ready(dsn: str, max_retries: int = 5, base_delay: int = 2) -> None:
    """Poll the database connection until ready with exponential backoff and jitter."""
    if not dsn.startswith("postgresql"):
        return
    # asyncpg expects a plain postgres DSN
    dsn = dsn.replace("postgresql+asyncpg://", "postgresql://", 1)

    for attempt in range(max_retries):
        try:
            conn = await asyncpg.connect(dsn=dsn)
            await conn.close()
            logger.info("✅ Database connection successful.")
            return
        except (OSError, asyncpg.PostgresError) as e:
            total_wait = base_delay * (2 ** attempt) + random.uniform(0, 0.5)
            logger.warning(f"Database not ready (attempt {attempt + 1}/{max_retries}): {e}. Retrying in {total_wait:.2f}s...")
            await asyncio.sleep(total_wait)
    raise RuntimeError("❌ Database not ready after multiple attempts.")


async def init_service_startup(app: FastAPI) -> None:
    """Wait for the database, apply migrations and open the Blockfrost client."""
    app.state.is_ready = False
    settings = portfolio_settings()
    tracer = trace.get_tracer(__name__)
    logger.info(f"🚀 Initializing {settings.service_name} ({settings.environment})...")

    for key, value in settings.safe_dict().items():
        logger.info(f"    {key}: {value}")

    if not settings.blockfrost_api_key.get_secret_value():
        logger.warning("⚠️ PORTFOLIO_BLOCKFROST_API_KEY is empty; account lookups will be rejected upstream.")

    with tracer.start_as_current_span("db.readiness_check"):
        await _check_database_ready(settings.async_db_url)

    if settings.run_migrations_on_startup:
        with tracer.start_as_current_span("db.run_migrations"):
            await run_alembic_migrations(settings.sync_db_url)

    app.state.account_info_client = AccountInfoClient.from_settings(settings)
    app.state.is_ready = True
    logger.info(f"✅ {settings.service_name} startup completed successfully.")


async def shutdown_service(app: FastAPI) -> None:
    """Close the Blockfrost connection pool and flush pending spans."""
    client = getattr(app.state, "account_info_client", None)
    if client is not None:
        await client.aclose()
        logger.info("🔌 Blockfrost client closed.")

    tracer_provider = getattr(app.state, "tracer_provider", None)
    if tracer_provider:
        tracer_provider.shutdown()
        logger.info("🧹 OpenTelemetry instrumentation shut down gracefully.")
