"""
Entrypoint for the n-gram analyzer HTTP service.
This file wires the FastAPI application together by importing the core package,
which initializes shared state and registers all routes.
"""

from __future__ import annotations

import argparse
import os

import core  # noqa: F401  # Ensure route modules are imported for side effects
from core.app_state import (
    FORCE_VERBOSE_ENV_VAR,
    app,
    config,
    logger,
)


if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser(description="N-gram Analyzer HTTP service")
    parser.add_argument(
        "--force-verbose",
        action="store_true",
        help="Log pipeline phases for every request",
    )
    args = parser.parse_args()

    if args.force_verbose:
        # Reload workers re-read the environment
        os.environ[FORCE_VERBOSE_ENV_VAR] = "true"
        config.API_VERBOSE = True

    logger.info("Starting with uvicorn on %s:%d", config.APP_HOST, config.APP_PORT)
    uvicorn.run(
        "main:app",
        host=config.APP_HOST,
        port=config.APP_PORT,
        reload=config.APP_RELOAD,
    )
