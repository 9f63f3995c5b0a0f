"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_approval.api.dependencies import SessionRegistry
from loan_approval.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_approval.api.v1 import approval
from loan_approval.infrastructure.observability.logging import setup_logging
from loan_approval.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Pending analyses die with the process; in-flight submissions finish on their own
    app.state.sessions.close_all()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Approval",
        description="Loan analysis, installment plans and approval confirmation",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.sessions = SessionRegistry()

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

    app.include_router(approval.router, prefix="/v1", tags=["approvals"])

    return app


app = create_app()
