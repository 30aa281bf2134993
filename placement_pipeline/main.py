"""
Placement Pipeline - Main Application

FastAPI backend with:
- PostgreSQL for job offers, stages and applications
- Multi-round hiring pipeline (round views + bulk transitions)
- JWT identity from the external auth service

Run: uvicorn placement_pipeline.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from placement_pipeline import __version__
from placement_pipeline.api.routes import api_router
from placement_pipeline.core.config import get_settings
from placement_pipeline.core.exceptions import PipelineError
from placement_pipeline.db.postgres import init_db, test_postgres_connection

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Placement Pipeline",
    description="""
    Placement portal backend for multi-round campus hiring.

    ## Features
    - **Jobs**: Job offers with a fixed, ordered recruitment process
    - **Applications**: One application per student per job offer
    - **Rounds**: Per-round applicant views with status counts
    - **Pipeline**: Push, reject, advance round, complete hiring
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    """Report business-rule violations with their status code and a user-facing message."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create tables and indexes on startup."""
    try:
        init_db()
    except Exception as e:
        logger.error("Schema initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if test_postgres_connection() else "disconnected"
    }
