"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from lunch_ledger.api.dependencies import build_engine
from lunch_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from lunch_ledger.api.v1 import achievements, forecast, snapshot, stream
from lunch_ledger.engine.facade import InvestmentEngine
from lunch_ledger.infrastructure.observability.logging import setup_logging
from lunch_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(engine: InvestmentEngine | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    The engine is built from settings unless one is supplied. Its lifecycle
    follows the application: cold-start recompute and scheduler on startup,
    teardown on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.engine.start()
        try:
            yield
        finally:
            await app.state.engine.shutdown()

    app = FastAPI(
        title="Lunch Ledger",
        description="Weekly dining investment capacity and achievement engine",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.engine = engine if engine is not None else build_engine()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(snapshot.router, prefix="/v1", tags=["snapshot"])
    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])
    app.include_router(achievements.router, prefix="/v1", tags=["achievements"])
    app.include_router(stream.router, prefix="/v1", tags=["stream"])

    return app


app = create_app()
