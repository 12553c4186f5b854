"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fundflow.api import jobs
from fundflow.api.errors import register_exception_handlers
from fundflow.api.middleware import JobCORSMiddleware, MetricsMiddleware, RequestIDMiddleware
from fundflow.api.v1 import debts, goals, incomes, reports, settings as user_settings, transfers
from fundflow.infrastructure.observability.logging import setup_logging
from fundflow.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fundflow",
        description="Personal budgeting: income distribution, fund transfers and financial milestones",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(JobCORSMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(user_settings.router, prefix="/v1", tags=["settings"])
    app.include_router(incomes.router, prefix="/v1", tags=["incomes"])
    app.include_router(transfers.router, prefix="/v1", tags=["transfers"])
    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])

    return app


app = create_app()
