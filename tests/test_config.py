"""
Tests for configuration validation.
"""

from unittest.mock import patch

from sickohoops import config


class TestValidateConfig:
    """validate_config reports provider problems."""

    def test_valid(self):
        """A keyless local provider is valid."""
        with patch.object(config, "GENERATIVE_PROVIDERS", ["ollama"]):
            assert config.validate_config()

    def test_missing_key(self, capsys):
        """A provider without its API key is reported."""
        with patch.object(config, "GENERATIVE_PROVIDERS", ["openai"]), \
                patch.object(config, "OPENAI_API_KEY", ""):
            assert not config.validate_config()
        assert "OPENAI_API_KEY" in capsys.readouterr().out

    def test_unknown_provider(self, capsys):
        """Unknown provider names are reported."""
        with patch.object(config, "GENERATIVE_PROVIDERS", ["mystery"]):
            assert not config.validate_config()
        assert "mystery" in capsys.readouterr().out
