"""
Tests for config.py - Configuration management module.

Test Areas:
1. Defaults without environment overrides
2. Environment loading
3. Invalid values fall back to defaults
"""

import pytest
import os
from unittest.mock import patch

from config import Config


class TestDefaults:

    def test_defaults(self, clean_env):
        cfg = Config()
        assert cfg.DEFAULT_MAX_N == 3
        assert cfg.DEFAULT_MIN_COUNT == 1
        assert cfg.MAX_NGRAM_SIZE == 20
        assert cfg.MAX_TEXT_CHARS == 5_000_000
        assert cfg.APP_RELOAD is False
        assert cfg.API_VERBOSE is False
        assert cfg.default_sizes == [1, 2, 3]


class TestEnvironmentLoading:

    def test_values_from_environment(self, mock_env_vars):
        cfg = Config()
        assert cfg.DEFAULT_MAX_N == 2
        assert cfg.DEFAULT_MIN_COUNT == 2
        assert cfg.MAX_NGRAM_SIZE == 8
        assert cfg.MAX_TEXT_CHARS == 1000
        assert cfg.APP_HOST == "127.0.0.1"
        assert cfg.APP_PORT == 9000
        assert cfg.default_sizes == [1, 2]

    def test_log_level_is_upper_cased(self, clean_env):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
            assert Config().LOG_LEVEL == "DEBUG"

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("yes", True), ("false", False), ("0", False)])
    def test_api_verbose_flag(self, clean_env, raw, expected):
        with patch.dict(os.environ, {"NGRAM_API_VERBOSE": raw}):
            assert Config().API_VERBOSE is expected


class TestInvalidValues:

    def test_non_integer_keeps_default(self, clean_env, capsys):
        """
        Given: NGRAM_MAX_SIZE is not an integer
        When: Config is loaded
        Then: The default is kept and the problem is reported on stderr
        """
        with patch.dict(os.environ, {"NGRAM_MAX_SIZE": "lots"}):
            cfg = Config()
        assert cfg.MAX_NGRAM_SIZE == 20
        assert "NGRAM_MAX_SIZE" in capsys.readouterr().err

    def test_below_minimum_keeps_default(self, clean_env, capsys):
        with patch.dict(os.environ, {"NGRAM_DEFAULT_MAX_N": "0"}):
            cfg = Config()
        assert cfg.DEFAULT_MAX_N == 3
        assert "below" in capsys.readouterr().err

    def test_unknown_log_level_keeps_default(self, clean_env, capsys):
        """
        Given: LOG_LEVEL=verbose, which is not a logging level name
        When: Config is loaded
        Then: INFO is kept and the problem is reported on stderr
        """
        with patch.dict(os.environ, {"LOG_LEVEL": "verbose"}):
            cfg = Config()
        assert cfg.LOG_LEVEL == "INFO"
        assert "LOG_LEVEL" in capsys.readouterr().err

    def test_blank_value_keeps_default(self, clean_env):
        with patch.dict(os.environ, {"APP_PORT": "  "}):
            assert Config().APP_PORT == 8000
