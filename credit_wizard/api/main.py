"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from credit_wizard.api.errors import register_error_handlers
from credit_wizard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from credit_wizard.api.v1 import assessments, questions
from credit_wizard.infrastructure.observability.logging import setup_logging
from credit_wizard.infrastructure.sessions import SessionStore
from credit_wizard.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Credit Wizard",
        description="Eligibility scoring, credit offer and PDF summary delivery",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Sessions live only as long as this app instance
    app.state.sessions = SessionStore(ttl_seconds=settings.session_ttl_seconds)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(questions.router, prefix="/v1", tags=["questions"])
    app.include_router(assessments.router, prefix="/v1", tags=["assessments"])

    return app


app = create_app()
