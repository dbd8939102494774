"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from autosave_ledger.api.errors import domain_exception_handler
from autosave_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from autosave_ledger.api.v1 import accounts, analysis, goals, loans, operations, withdrawals
from autosave_ledger.domain.exceptions import DomainException
from autosave_ledger.infrastructure.database.session import init_db
from autosave_ledger.infrastructure.observability.logging import setup_logging
from autosave_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="AutoSave Ledger",
        description="Goal savings, loan payments and emergency withdrawals",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(operations.router, prefix="/v1", tags=["operations"])
    app.include_router(withdrawals.router, prefix="/v1", tags=["withdrawals"])
    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])

    return app


app = create_app()
