from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shared.request_context import RequestIDMiddleware

from .errors import register_exception_handlers
from .routes import register_routes
from .settings import portfolio_settings
from .startup import init_service_startup, setup_instrumentation, setup_logging, shutdown_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_service_startup(app)
    yield
    await shutdown_service(app)


def create_app() -> FastAPI:
    setup_logging()
    settings = portfolio_settings()
    app = FastAPI(
        title="Portfolio Service",
        description="Tracks user wallets and enriches them with live Cardano account data",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    register_routes(app)
    setup_instrumentation(app)
    return app


# ASGI entry point: uvicorn services.portfolio_service.app.main:app
app = create_app()
