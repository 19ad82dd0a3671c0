"""
N-gram Analyzer - HTTP Service
==============================

Builds the shared FastAPI application and wires the analysis router.

Features:
- Per-size and merged n-gram frequency reports
- PPM, z-score and percentile statistics
- Text, range and top/bottom filtering
"""

from fastapi import FastAPI
from starlette.middleware.gzip import GZipMiddleware
import logging

from config import config
from analysis_router import router as analysis_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger(__name__)

FORCE_VERBOSE_ENV_VAR = "NGRAM_API_VERBOSE"

SERVICE_NAME = "N-gram Analyzer"
SERVICE_VERSION = "1.0.0"

app = FastAPI(
    title=SERVICE_NAME,
    description="Line-based n-gram frequency, statistics and ranking engine",
    version=SERVICE_VERSION,
)

# Reports for large inputs are big and highly repetitive
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Routers
app.include_router(analysis_router)


@app.on_event("startup")
async def startup_event():
    """Log the effective limits on startup"""
    logger.info(
        "%s ready: max n-gram size %d, max text %d chars",
        SERVICE_NAME,
        config.MAX_NGRAM_SIZE,
        config.MAX_TEXT_CHARS,
    )
