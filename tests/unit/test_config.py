"""Tests for gemini_image_mcp.core.config: configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides.
- API key requirement.
- Pydantic validation constraints.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gemini_image_mcp.core.config import DEFAULT_MODEL, GatewayConfig
from gemini_image_mcp.core.exceptions import ConfigurationError

_ENV_VARS = ("GEMINI_API_KEY", "GEMINI_MODEL", "SAFETY_LEVEL", "MAX_REQUESTS_PER_MINUTE")


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that GatewayConfig provides sensible defaults."""

    def test_defaults(self, clean_env):
        cfg = GatewayConfig(_env_file=None)
        assert cfg.gemini_api_key is None
        assert cfg.gemini_model == DEFAULT_MODEL
        assert cfg.safety_level == "MEDIUM"
        assert cfg.max_requests_per_minute == 10

    def test_default_model(self):
        assert DEFAULT_MODEL == "gemini-2.5-flash-image-preview"


class TestEnvironmentOverrides:
    """Verify conventional environment variable names."""

    def test_reads_environment(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "env-key")
        clean_env.setenv("GEMINI_MODEL", "gemini-custom")
        clean_env.setenv("SAFETY_LEVEL", "HIGH")
        clean_env.setenv("MAX_REQUESTS_PER_MINUTE", "3")

        cfg = GatewayConfig(_env_file=None)
        assert cfg.require_api_key() == "env-key"
        assert cfg.gemini_model == "gemini-custom"
        assert cfg.safety_level == "HIGH"
        assert cfg.max_requests_per_minute == 3

    def test_reads_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=file-key\nSAFETY_LEVEL=LOW\n")
        cfg = GatewayConfig(_env_file=env_file)
        assert cfg.require_api_key() == "file-key"
        assert cfg.safety_level == "LOW"


class TestApiKey:
    """Verify the credential requirement."""

    def test_missing_key_raises(self, clean_env):
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            GatewayConfig(_env_file=None).require_api_key()

    def test_blank_key_raises(self, clean_env):
        with pytest.raises(ConfigurationError):
            GatewayConfig(_env_file=None, gemini_api_key="  ").require_api_key()

    def test_key_is_secret(self, clean_env):
        cfg = GatewayConfig(_env_file=None, gemini_api_key="s3cret")
        assert "s3cret" not in repr(cfg)


class TestConfigValidation:
    """Verify Pydantic validation constraints on config fields."""

    def test_invalid_safety_level(self, clean_env):
        with pytest.raises(ValidationError):
            GatewayConfig(_env_file=None, safety_level="EXTREME")

    def test_rate_limit_must_be_positive(self, clean_env):
        with pytest.raises(ValidationError):
            GatewayConfig(_env_file=None, max_requests_per_minute=0)

    def test_invalid_port(self, clean_env):
        with pytest.raises(ValidationError):
            GatewayConfig(_env_file=None, server_port=80)

    def test_frozen(self, test_config):
        with pytest.raises(ValidationError):
            test_config.gemini_model = "other"
