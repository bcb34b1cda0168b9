# tests/unit/config/test_settings.py - v1
"""Tests for config/settings.py: defaults, validation, overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from codereview.config.settings import Settings, load_settings
from codereview.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """No .env file and no stray environment variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "LLM_DEFAULT_PROVIDER", "LLM_DEFAULT_MODEL", "REVIEW_FILE_PATTERN",
        "REVIEW_MAX_FILES", "BATCH_CONCURRENCY", "GATEWAY_TIMEOUT_S",
        "OPENAI_API_KEY", "OPENAI_BASE_URL", "LOG_LEVEL", "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.llm_default_provider == "ollama"
        assert s.llm_default_model == "llama3.2"
        assert s.review_file_pattern == "*.cs"
        assert s.review_max_files == 3
        assert s.batch_concurrency == 1
        assert s.gateway_timeout_s == 120.0
        assert s.batch_deadline_s is None
        assert s.telemetry_service_name == "CodeReviewAssistant"
        assert s.telemetry_spans_path is None

    def test_excluded_dirs_list(self):
        s = Settings(_env_file=None, review_excluded_dirs=" bin, obj ,,node_modules")
        assert s.review_excluded_dirs_list == ["bin", "obj", "node_modules"]

    def test_provider_normalized(self):
        assert Settings(_env_file=None, llm_default_provider=" OpenAI ").llm_default_provider == "openai"


class TestEnvironment:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("REVIEW_FILE_PATTERN", "*.py")
        monkeypatch.setenv("BATCH_CONCURRENCY", "4")
        s = Settings(_env_file=None)
        assert s.review_file_pattern == "*.py"
        assert s.batch_concurrency == 4

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("LLM_DEFAULT_MODEL=phi3\nTELEMETRY_CONSOLE=true\n", encoding="utf-8")
        s = Settings(_env_file=env_file)
        assert s.llm_default_model == "phi3"
        assert s.telemetry_console is True

    def test_paths(self):
        s = Settings(_env_file=None, telemetry_metrics_path="out/metrics.prom")
        assert s.telemetry_metrics_path == Path("out/metrics.prom")


class TestValidation:
    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("gateway_timeout_s", 0, "GATEWAY_TIMEOUT_S must be > 0"),
            ("batch_concurrency", 0, "BATCH_CONCURRENCY must be >= 1"),
            ("batch_deadline_s", -1, "BATCH_DEADLINE_S must be > 0"),
            ("review_max_files", 0, "REVIEW_MAX_FILES must be >= 1"),
            ("review_file_pattern", "  ", "REVIEW_FILE_PATTERN must not be empty"),
            ("llm_max_tokens", 0, "LLM_MAX_TOKENS must be >= 1"),
        ],
    )
    def test_invalid(self, field, value, message):
        with pytest.raises(ConfigurationError, match=message):
            Settings(_env_file=None, **{field: value})

    def test_errors_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, batch_concurrency=0, review_max_files=0)
        assert "BATCH_CONCURRENCY" in str(exc_info.value)
        assert "REVIEW_MAX_FILES" in str(exc_info.value)

    def test_no_timeout_allowed(self):
        assert Settings(_env_file=None, gateway_timeout_s=None).gateway_timeout_s is None


class TestLoadSettings:
    def test_none_overrides_ignored(self):
        s = load_settings(review_file_pattern=None, review_max_files=10)
        assert s.review_file_pattern == "*.cs"
        assert s.review_max_files == 10

    def test_override_beats_env(self, monkeypatch):
        monkeypatch.setenv("LLM_DEFAULT_MODEL", "from-env")
        assert load_settings(llm_default_model="from-cli").llm_default_model == "from-cli"

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError):
            load_settings(batch_concurrency=-2)
