"""
mailtriage - Main Application
=============================

Relevance scoring service for email triage.

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: spaCy / scikit-learn analysis, LLM providers
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mailtriage.config import settings
from mailtriage.relevance.infrastructure import build_relevance_service
from mailtriage.relevance.interfaces import relevance_router
from mailtriage.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    global_exception_handler,
)
from mailtriage.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load the spaCy pipeline
    3. Configure the completion provider (or run with scoring disabled)
    """
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting relevance service", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "llm_provider": "mock" if settings.mock_llm else settings.llm_provider,
    })

    app.state.settings = settings
    app.state.relevance_service = build_relevance_service(settings)

    if app.state.relevance_service.disabled:
        logger.warning("Relevance scoring disabled - every request scores the neutral value")

    logger.info("Relevance service started successfully")

    yield

    logger.info("Relevance service shutdown complete")


app = FastAPI(
    title="mailtriage Relevance API",
    description="""
    ## Email Triage Relevance Scoring

    Scores inbound requests against a recipient's knowledge base.

    **Endpoints:**
    - `POST /relevance/score` - Relevance score with level and outcome
    - `POST /relevance/score/detailed` - Score with breakdown, confidence and analyses
    - `POST /relevance/overlap` - Quick word-overlap score against goals
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(relevance_router)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Reports whether relevance scoring is live or running disabled.
    """
    service = getattr(request.app.state, "relevance_service", None)
    if service is None:
        scoring = "not_initialized"
    elif service.disabled:
        scoring = "disabled"
    else:
        scoring = "available"

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {"relevance_scoring": scoring}
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
        "endpoints": [
            "POST /relevance/score - Score a request",
            "POST /relevance/score/detailed - Score with breakdown",
            "POST /relevance/overlap - Quick goal overlap",
        ]
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mailtriage.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
