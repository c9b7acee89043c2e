"""
Tests for config loading and validation.
"""

import pytest

from soap_metrics import config_loader
from soap_metrics.config_loader import get_default_config, load_config
from soap_metrics.config_validator import (
    health_check,
    validate_api_key,
    validate_config,
    validate_provider_available,
)


class TestLoadConfig:

    def test_reads_yaml(self, tmp_path, fresh_config):
        path = tmp_path / "config.yaml"
        path.write_text("embeddings:\n  provider: openai\n  timeout_seconds: 5\n")
        config = load_config(str(path))
        assert config["embeddings"] == {"provider": "openai", "timeout_seconds": 5}

    def test_cached_until_reload(self, tmp_path, fresh_config):
        path = tmp_path / "config.yaml"
        path.write_text("evaluation:\n  decimals: 2\n")
        first = load_config(str(path))
        path.write_text("evaluation:\n  decimals: 4\n")
        assert load_config(str(path)) is first

    def test_missing_file_uses_defaults(self, tmp_path, fresh_config):
        assert load_config(str(tmp_path / "nope.yaml")) == get_default_config()

    def test_env_key_overrides_file_key(self, tmp_path, fresh_config, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        path = tmp_path / "config.yaml"
        path.write_text("openai_api_key: sk-in-file\n")
        assert load_config(str(path))["openai_api_key"] == ""

    def test_file_key_warns(self, tmp_path, fresh_config, monkeypatch, capsys):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("gemini_api_key: abc\n")
        assert load_config(str(path))["gemini_api_key"] == "abc"
        assert "GEMINI_API_KEY found in config.yaml" in capsys.readouterr().out

    def test_empty_file(self, tmp_path, fresh_config):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}
        assert config_loader._config_cache == {}


class TestValidation:

    def test_local_needs_no_key(self):
        assert validate_api_key("local") == (True, "")

    def test_openai_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert validate_api_key("openai") == (True, "")

    def test_openai_key_format(self):
        valid, msg = validate_api_key("openai", "not-a-key")
        assert not valid
        assert "sk-" in msg

    def test_gemini_key_missing(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        valid, msg = validate_api_key("gemini")
        assert not valid
        assert "GEMINI_API_KEY" in msg

    def test_unknown_provider(self):
        valid, msg = validate_provider_available("word2vec")
        assert not valid
        assert "Unknown embeddings provider" in msg

    def test_unknown_provider_in_config(self):
        issues = validate_config({"embeddings": {"provider": "word2vec"}})
        assert any("word2vec" in i for i in issues)

    @pytest.mark.parametrize("section,values,fragment", [
        ("evaluation", {"decimals": -1}, "Decimals"),
        ("evaluation", {"max_workers": 0}, "max_workers"),
        ("embeddings", {"provider": "local", "timeout_seconds": -5}, "timeout"),
    ])
    def test_out_of_range_values(self, section, values, fragment, monkeypatch):
        # Keep the provider check independent of installed packages
        monkeypatch.setattr("soap_metrics.config_validator.validate_provider_available",
                            lambda provider: (True, ""))
        issues = validate_config({section: values})
        assert any(fragment in i for i in issues)

    def test_valid_config_has_no_issues(self, monkeypatch):
        monkeypatch.setattr("soap_metrics.config_validator.validate_provider_available",
                            lambda provider: (True, ""))
        assert validate_config(get_default_config()) == []


class TestHealthCheck:

    @pytest.fixture
    def config_with(self, monkeypatch):
        def _use(config):
            monkeypatch.setattr("soap_metrics.config_loader.load_config", lambda: config)
            monkeypatch.setattr("soap_metrics.config_validator.validate_provider_available",
                                lambda provider: (True, ""))
        return _use

    def test_healthy(self, config_with):
        config_with(get_default_config())
        result = health_check()
        assert result["status"] == "healthy"
        assert result["errors"] == []
        assert result["info"] == {
            "embeddings_provider": "local",
            "embeddings_model": "all-MiniLM-L6-v2",
            "timeout_seconds": 30,
        }

    def test_out_of_range_is_unhealthy(self, config_with):
        config_with({"evaluation": {"decimals": -1}})
        result = health_check()
        assert result["status"] == "unhealthy"
        assert any("Decimals" in e for e in result["errors"])
