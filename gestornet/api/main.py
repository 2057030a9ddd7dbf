"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from gestornet.api.dependencies import Services, build_services
from gestornet.api.middleware import RequestIDMiddleware, MetricsMiddleware
from gestornet.api.v1 import auth, backup, clients, managers, reports, setup, transactions
from gestornet.infrastructure.observability.logging import setup_logging
from gestornet.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    services = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Drain queued writes before the process exits
        services.writer.stop()

    app = FastAPI(
        title="GestorNet",
        description="Client, payment and daily cash management for an ISP reseller",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "unknown")
        logging.error(f"Unexpected error: {exc}", extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(setup.router, prefix="/v1", tags=["setup"])
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(managers.router, prefix="/v1", tags=["managers"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(backup.router, prefix="/v1", tags=["backup"])

    return app


app = create_app()
