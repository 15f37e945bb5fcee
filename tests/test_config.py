"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from virusquery.config import Settings, load_settings


class TestSettings:
    """Tests for Settings and load_settings."""

    def test_defaults(self):
        """Test default settings."""
        settings = load_settings(environ={})
        assert settings == Settings()
        assert settings.default_virus == "HIV1"
        assert settings.default_subtype_count == 2

    def test_prefixed_environment(self):
        """Test reading prefixed variables."""
        settings = load_settings(
            environ={
                "VIRUSQUERY_DEFAULT_VIRUS": "HIV2",
                "VIRUSQUERY_LOG_LEVEL": "debug",
                "VIRUSQUERY_MAX_CONCURRENT": "4",
                "MAX_CONCURRENT": "99",
            }
        )
        assert settings.default_virus == "HIV2"
        assert settings.log_level == "DEBUG"
        assert settings.max_concurrent == 4

    @pytest.mark.parametrize(
        "environ",
        [
            {"VIRUSQUERY_LOG_LEVEL": "LOUD"},
            {"VIRUSQUERY_MAX_CONCURRENT": "0"},
            {"VIRUSQUERY_DEFAULT_SUBTYPE_COUNT": "-1"},
        ],
    )
    def test_invalid_values(self, environ):
        """Test that invalid values are rejected."""
        with pytest.raises(ValidationError):
            load_settings(environ=environ)
