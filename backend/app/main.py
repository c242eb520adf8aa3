"""Supply Chain Risk Backend - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.models.assessment import HealthResponse
from app.routers import assessments, security
from app.services.assessment_orchestrator import get_orchestrator
from app.services.risk_analyzer import RiskAnalyzer, get_risk_analyzer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    logger.info("Starting Supply Chain Risk Backend...")

    settings = get_settings()
    orchestrator = app.dependency_overrides.get(get_orchestrator, get_orchestrator)()
    if not settings.anthropic_api_key:
        logger.warning(
            "ANTHROPIC_API_KEY not set - all assessments will use fallback analysis"
        )
    logger.info(
        f"Analysis deadline: {orchestrator.timeout_seconds}s, "
        f"model: {settings.claude_model}"
    )

    yield

    logger.info("Shutting down Supply Chain Risk Backend...")
    if orchestrator.in_flight:
        logger.info(f"Waiting for {orchestrator.in_flight} in-flight assessments")
    await orchestrator.wait_for_pending()
    logger.info("Supply Chain Risk Backend shutdown complete")


app = FastAPI(
    title="Supply Chain Risk Backend",
    description="AI-assisted supply chain vulnerability assessment API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed submissions as 400 with field-level details."""
    logger.info(f"Rejected {request.method} {request.url.path}: {len(exc.errors())} errors")
    return JSONResponse(
        status_code=400,
        content={
            "message": "Validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


# Include routers (also served under /api for the dashboard client)
app.include_router(assessments.router)
app.include_router(assessments.router, prefix="/api")
app.include_router(security.router)
app.include_router(security.router, prefix="/api")


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse, include_in_schema=False)
async def health_check(
    analyzer: RiskAnalyzer = Depends(get_risk_analyzer),
) -> HealthResponse:
    """
    Health check endpoint for monitoring.

    ``providerConnected`` reflects whether the analysis provider answered a
    trivial request. It is advisory: assessments still complete through the
    fallback analyzer when it is down.
    """
    return HealthResponse(
        status="ok",
        provider_connected=await analyzer.health_check(),
        timestamp=datetime.now(timezone.utc),
    )
