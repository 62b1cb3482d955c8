"""Tests for pipeline configuration."""

import pytest

from leadintel.config import DEFAULT_MODEL, PipelineConfig

ENV_VARS = [
    "ANTHROPIC_API_KEY", "LLM_MODEL", "FIRECRAWL_API_KEY", "LEADS_DB_PATH",
    "N8N_LEAD_WEBHOOK_URL", "N8N_HIGH_SCORE_WEBHOOK_URL", "HIGH_SCORE_THRESHOLD",
    "SENDER_NAME", "EMAIL_TONE", "SCRAPE_TIMEOUT", "LLM_TIMEOUT", "WEBHOOK_TIMEOUT",
    "BULK_MAX_WORKERS", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
    return str(tmp_path / "missing.env")


class TestFromEnv:
    def test_defaults(self, clean_env):
        config = PipelineConfig.from_env(clean_env)
        assert config.anthropic_api_key == ""
        assert config.llm_model == DEFAULT_MODEL
        assert config.leads_db_path == "data/leads.json"
        assert config.log_level == "INFO"
        assert config.high_score_threshold == 8.0
        assert config.bulk_max_workers == 4
        assert config.scrape_timeout == 30.0

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("LLM_MODEL", "claude-test")
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        monkeypatch.setenv("N8N_LEAD_WEBHOOK_URL", "https://n8n/lead")
        monkeypatch.setenv("HIGH_SCORE_THRESHOLD", "7.5")
        monkeypatch.setenv("BULK_MAX_WORKERS", "8")
        monkeypatch.setenv("LLM_TIMEOUT", "20")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = PipelineConfig.from_env(clean_env)

        assert config.anthropic_api_key == "sk-test"
        assert config.llm_model == "claude-test"
        assert config.firecrawl_api_key == "fc-test"
        assert config.lead_webhook_url == "https://n8n/lead"
        assert config.high_score_threshold == 7.5
        assert config.bulk_max_workers == 8
        assert config.llm_timeout == 20.0
        assert config.log_level == "DEBUG"

    def test_invalid_number(self, clean_env, monkeypatch):
        monkeypatch.setenv("HIGH_SCORE_THRESHOLD", "high")
        with pytest.raises(ValueError, match="HIGH_SCORE_THRESHOLD"):
            PipelineConfig.from_env(clean_env)

    def test_invalid_integer(self, clean_env, monkeypatch):
        monkeypatch.setenv("BULK_MAX_WORKERS", "many")
        with pytest.raises(ValueError, match="BULK_MAX_WORKERS"):
            PipelineConfig.from_env(clean_env)
