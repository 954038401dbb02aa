"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from credit_optimizer.api.middleware import MetricsMiddleware, RequestIDMiddleware
from credit_optimizer.api.v1 import allocation, plan, scenario
from credit_optimizer.config import settings
from credit_optimizer.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Credit Utilization Optimizer",
        description="Payment timing, budget allocation and what-if scenarios for credit card portfolios",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(plan.router, prefix="/v1", tags=["plans"])
    app.include_router(allocation.router, prefix="/v1", tags=["allocation"])
    app.include_router(scenario.router, prefix="/v1", tags=["scenarios"])

    return app


app = create_app()
