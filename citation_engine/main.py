"""Citation Engine - FastAPI Application Entry Point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.v1.endpoints.citations import router as citations_router
from .api.v1.endpoints.compliance import router as compliance_router
from .api.v1.endpoints.domains import router as domains_router
from .core.config import settings
from .core.exceptions import (
    ArticleNotFoundError,
    CitationEngineError,
    CitationNotFoundError,
    CitationPolicyError,
    ReplacementVerificationError,
    RevisionNotRollbackableError,
)
from .core.logging import configure_logging
from .domains.registry import get_default_registry

logger = structlog.get_logger(__name__)

ERROR_STATUS: dict[type[CitationEngineError], tuple[int, str]] = {
    ArticleNotFoundError: (status.HTTP_404_NOT_FOUND, "article_not_found"),
    CitationNotFoundError: (status.HTTP_404_NOT_FOUND, "citation_not_found"),
    CitationPolicyError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "citation_policy_violation"),
    ReplacementVerificationError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "replacement_unreachable"),
    RevisionNotRollbackableError: (status.HTTP_409_CONFLICT, "revision_not_rollbackable"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging()
    registry = get_default_registry()
    logger.info(
        "citation_engine_starting",
        port=settings.API_PORT,
        model=settings.PERPLEXITY_MODEL,
        approved_domains=len(registry.get_all_approved_domains()),
        search_batches=len(registry.all_domains()),
    )

    yield

    logger.info("citation_engine_stopping")


app = FastAPI(
    title="Citation Engine API",
    description="Authority citation discovery, verification and compliance auditing",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CitationEngineError)
async def citation_engine_error_handler(request: Request, exc: CitationEngineError) -> JSONResponse:
    """Map domain errors onto HTTP status codes."""
    status_code, error = status.HTTP_500_INTERNAL_SERVER_ERROR, "citation_engine_error"
    for exc_type, mapped in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            status_code, error = mapped
            break
    logger.warning("request_failed", path=request.url.path, error=error, message=str(exc))
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"error": error, "message": str(exc)}},
    )


@app.get("/api/v1/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint.

    Returns:
        JSONResponse: Service health status
    """
    return JSONResponse(
        content={
            "status": "healthy",
            "service": "citation-engine",
            "version": __version__,
            "environment": "development" if settings.DEBUG else "production",
        }
    )


app.include_router(citations_router, prefix="/api")
app.include_router(compliance_router, prefix="/api")
app.include_router(domains_router, prefix="/api")
