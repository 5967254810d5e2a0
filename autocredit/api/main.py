"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from autocredit.api.middleware import RequestIDMiddleware, MetricsMiddleware
from autocredit.api.v1 import applications, installments, vehicles
from autocredit.infrastructure.database.session import init_db
from autocredit.infrastructure.observability.logging import setup_logging
from autocredit.config import settings

setup_logging(settings.log_level, settings.service_name)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        init_db()
        logger.info("Database tables ensured")
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="AutoCredit Decision Engine",
        description="Automotive loan eligibility, risk assessment, pricing and amortization",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Last added runs first: request ID is assigned before the request is timed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(applications.router, prefix="/v1", tags=["credit-applications"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(vehicles.router, prefix="/v1", tags=["vehicles"])

    return app


app = create_app()
