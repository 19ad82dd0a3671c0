"""Shared pytest fixtures for the n-gram analyzer tests."""

import pytest
from unittest.mock import patch
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def mock_env_vars():
    """Provide test environment variables."""
    env = {
        "NGRAM_DEFAULT_MAX_N": "2",
        "NGRAM_DEFAULT_MIN_COUNT": "2",
        "NGRAM_MAX_SIZE": "8",
        "NGRAM_MAX_TEXT_CHARS": "1000",
        "APP_HOST": "127.0.0.1",
        "APP_PORT": "9000",
    }
    with patch.dict(os.environ, env, clear=False):
        yield env


@pytest.fixture
def clean_env():
    """Provide an environment without any analyzer settings."""
    keys_to_remove = [
        "NGRAM_DEFAULT_MAX_N", "NGRAM_DEFAULT_MIN_COUNT", "NGRAM_MAX_SIZE",
        "NGRAM_MAX_TEXT_CHARS", "NGRAM_MAX_EXCLUDE_TERMS", "NGRAM_API_VERBOSE",
        "LOG_LEVEL", "APP_HOST", "APP_PORT", "APP_RELOAD",
    ]
    with patch.dict(os.environ, {}, clear=False):
        for key in keys_to_remove:
            os.environ.pop(key, None)
        yield


# ============================================================================
# Text Fixtures
# ============================================================================

@pytest.fixture
def cat_text():
    """Two short lines sharing their first bigram."""
    return "the cat sat\nthe cat ran\n"


@pytest.fixture
def mixed_case_text():
    """Same phrases with different casing, CRLF line breaks and a blank line."""
    return "The Quick fox\r\n\r\nthe quick FOX jumps\rTHE QUICK dog"


@pytest.fixture
def sample_text():
    """A small paragraph with a skewed word distribution."""
    return (
        "alpha beta gamma\n"
        "alpha beta delta\n"
        "alpha beta gamma\n"
        "alpha epsilon\n"
        "zeta\n"
    )


@pytest.fixture
def exclude_file(tmp_path):
    """Exclude file with a comment, a blank line and two terms."""
    path = tmp_path / "exclude.txt"
    path.write_text("# stop words\n\nbeta\n  gamma  \n", encoding="utf-8")
    return path
