"""
Configuration for the N-gram Analyzer
=====================================

Central configuration for the CLI and the HTTP service. Values come from
environment variables (optionally via a .env file). Invalid numeric values are
reported on stderr and the default is kept.
"""

import logging
import os
import sys
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

TRUTHY_ENV_VALUES = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"[config] {name}={raw!r} is not an integer, using {default}", file=sys.stderr)
        return default
    if minimum is not None and value < minimum:
        print(f"[config] {name}={value} is below {minimum}, using {default}", file=sys.stderr)
        return default
    return value


def _env_log_level(name: str, default: str) -> str:
    level = os.getenv(name, default).strip().upper()
    if not isinstance(getattr(logging, level, None), int):
        print(f"[config] {name}={level!r} is not a logging level, using {default}", file=sys.stderr)
        return default
    return level


class Config(BaseModel):
    """Configuration settings for the n-gram analyzer."""

    # Counting defaults (classic "max_n min_count" behaviour)
    DEFAULT_MAX_N: int = Field(default=3, ge=1, description="Sizes 1..N are counted when none are given")
    DEFAULT_MIN_COUNT: int = Field(default=1, ge=1, description="Default minimum frequency reported")
    MAX_NGRAM_SIZE: int = Field(default=20, ge=1, description="Largest n-gram size accepted")

    # Input limits
    MAX_TEXT_CHARS: int = Field(default=5_000_000, ge=1, description="Maximum input size for the HTTP API")
    MAX_EXCLUDE_TERMS: int = Field(default=10_000, ge=1, description="Maximum terms loaded from exclude files")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")

    # FastAPI Configuration
    APP_HOST: str = Field(default="0.0.0.0", description="FastAPI host")
    APP_PORT: int = Field(default=8000, description="FastAPI port")
    APP_RELOAD: bool = Field(default=False, description="FastAPI reload mode")
    API_VERBOSE: bool = Field(default=False, description="Phase logs for every API request")

    def __init__(self):
        super().__init__()
        self.load_from_environment()

    def load_from_environment(self):
        """Load configuration from environment variables."""
        self.DEFAULT_MAX_N = _env_int("NGRAM_DEFAULT_MAX_N", self.DEFAULT_MAX_N, minimum=1)
        self.DEFAULT_MIN_COUNT = _env_int("NGRAM_DEFAULT_MIN_COUNT", self.DEFAULT_MIN_COUNT, minimum=1)
        self.MAX_NGRAM_SIZE = _env_int("NGRAM_MAX_SIZE", self.MAX_NGRAM_SIZE, minimum=1)
        self.MAX_TEXT_CHARS = _env_int("NGRAM_MAX_TEXT_CHARS", self.MAX_TEXT_CHARS, minimum=1)
        self.MAX_EXCLUDE_TERMS = _env_int("NGRAM_MAX_EXCLUDE_TERMS", self.MAX_EXCLUDE_TERMS, minimum=1)

        self.LOG_LEVEL = _env_log_level("LOG_LEVEL", self.LOG_LEVEL)

        self.APP_HOST = os.getenv("APP_HOST", self.APP_HOST)
        self.APP_PORT = _env_int("APP_PORT", self.APP_PORT, minimum=1)
        self.APP_RELOAD = os.getenv("APP_RELOAD", "false").lower() == "true"
        self.API_VERBOSE = os.getenv("NGRAM_API_VERBOSE", "false").lower() in TRUTHY_ENV_VALUES

    @property
    def default_sizes(self):
        return list(range(1, self.DEFAULT_MAX_N + 1))


# Global configuration instance
config = Config()
