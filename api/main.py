"""
Coverage Intelligence API

FastAPI application serving the coverage dashboard:
1. Coverage scores, breakdowns and recommendations (/api/coverage/intelligent)
2. Cache statistics and manual invalidation (/api/coverage/cache)
"""

import logging
import sys

from fastapi import FastAPI

from coverage_engine import __version__
from coverage_engine.database import check_db_connection, init_db
from coverage_engine.utils.config import get_settings

from . import cache, coverage

settings = get_settings()

# Configure logging to stdout
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="Coverage Intelligence",
    description="Content coverage scoring and gap analysis per country, language and platform",
    version=__version__,
)

app.include_router(coverage.router)
app.include_router(cache.router)


# ============================================================================
# STARTUP - Initialize Database
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    logger.info("Initializing database...")
    init_db()
    if check_db_connection():
        logger.info("Database connection verified")
    else:
        logger.warning("Database connection check failed - continuing anyway")


@app.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok", "version": __version__, "environment": settings.ENVIRONMENT}


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
