"""Unit tests for configuration management."""

import pytest

from pantry_service.utils.config import Config

CONFIG_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "TAVILY_API_KEY",
    "TAVILY_MAX_RESULTS",
    "TAVILY_SEARCH_DEPTH",
    "SEARCH_TIMEOUT_SECONDS",
    "MODEL_TIMEOUT_SECONDS",
    "MAX_QUERY_INGREDIENTS",
    "MAX_RECIPES",
    "MAX_IMAGE_SIZE_MB",
    "COMPRESS_IMG",
    "INCLUDE_MODEL_RAW",
    "INCLUDE_SEARCH_DEBUG",
    "FRONTEND_URL",
    "PORT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigInitialization:
    """Test Config class initialization and environment variable loading."""

    def test_config_loads_default_values(self, clean_env):
        """Test that Config uses default values when env vars not set."""
        config = Config()

        assert config.PORT == 3001
        assert config.TAVILY_MAX_RESULTS == 5
        assert config.TAVILY_SEARCH_DEPTH == "basic"
        assert config.SEARCH_TIMEOUT_SECONDS == 15
        assert config.MODEL_TIMEOUT_SECONDS == 60
        assert config.MAX_QUERY_INGREDIENTS == 8
        assert config.MAX_RECIPES == 3
        assert config.MAX_IMAGE_SIZE_MB == 5
        assert config.COMPRESS_IMG is True
        assert config.INCLUDE_MODEL_RAW is False
        assert config.INCLUDE_SEARCH_DEBUG is False
        assert config.FRONTEND_URL == "http://localhost:3000"
        assert config.GEMINI_MODEL is None

    def test_config_loads_from_environment(self, clean_env):
        """Test that Config loads values from environment variables."""
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("GEMINI_API_KEY", "test_gemini_key")
        clean_env.setenv("GEMINI_MODEL", "gemini-custom")
        clean_env.setenv("TAVILY_API_KEY", "test_tavily_key")
        clean_env.setenv("TAVILY_SEARCH_DEPTH", "advanced")
        clean_env.setenv("INCLUDE_SEARCH_DEBUG", "true")

        config = Config()

        assert config.PORT == 8080
        assert config.GEMINI_API_KEY == "test_gemini_key"
        assert config.GEMINI_MODEL == "gemini-custom"
        assert config.TAVILY_API_KEY == "test_tavily_key"
        assert config.TAVILY_SEARCH_DEPTH == "advanced"
        assert config.INCLUDE_SEARCH_DEBUG is True

    def test_blank_model_override_is_none(self, clean_env):
        clean_env.setenv("GEMINI_MODEL", "   ")
        assert Config().GEMINI_MODEL is None


class TestConfigValidation:
    """Test Config validation logic."""

    def test_missing_api_keys_are_not_errors(self, clean_env):
        """Both pipelines degrade without keys, so validate() must not fail."""
        clean_env.setenv("GEMINI_API_KEY", "")
        clean_env.setenv("TAVILY_API_KEY", "")

        Config().validate()

    def test_invalid_search_depth(self, clean_env):
        clean_env.setenv("TAVILY_SEARCH_DEPTH", "deep")

        with pytest.raises(ValueError, match="TAVILY_SEARCH_DEPTH"):
            Config().validate()

    @pytest.mark.parametrize(
        "name,value",
        [
            ("TAVILY_MAX_RESULTS", "0"),
            ("TAVILY_MAX_RESULTS", "21"),
            ("SEARCH_TIMEOUT_SECONDS", "0"),
            ("MODEL_TIMEOUT_SECONDS", "-1"),
            ("MAX_QUERY_INGREDIENTS", "0"),
            ("MAX_RECIPES", "0"),
            ("MAX_IMAGE_SIZE_MB", "0"),
        ],
    )
    def test_out_of_range_values(self, clean_env, name, value):
        clean_env.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            Config().validate()
