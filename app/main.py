"""
Internship Placement Platform - Main Application

FastAPI backend with:
- PostgreSQL for all structured data (SQLite in tests)
- Status workflows for applications, interviews, jobs and internships
- Best-effort notifications and email after each committed change
- JWT authentication for administrators

Run: uvicorn app.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.db.postgres import engine, ping_database
from app.db.schema import init_schema

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    try:
        init_schema(engine)
        logger.info("Database schema ready")
    except Exception as e:
        # The API still starts; /health reports the database as disconnected
        logger.error("Schema initialization failed: %s", e)
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    Administration API for an internship and placement office.

    ## Features
    - **Students & Skills**: Profiles, availability and proficiency
    - **Companies & Jobs**: Postings with required skills and deadlines
    - **Applications & Interviews**: Status workflows with history
    - **Internships**: Intern assignment, tasks and evaluations
    - **Notifications**: In-app messages and email
    - **Analytics**: Dashboard, trends and per-entity summaries
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials="*" not in settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
def root():
    return {"status": "healthy", "app": settings.app_name, "docs": "/docs"}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    connected = ping_database()
    return {
        "status": "healthy" if connected else "degraded",
        "database": "connected" if connected else "disconnected",
    }
