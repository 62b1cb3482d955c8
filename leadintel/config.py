"""
Pipeline Configuration
Settings for every collaborator the pipeline talks to, read from the
environment (and a local .env file when present).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def _get_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class PipelineConfig:
    """Configuration for the lead analysis pipeline."""
    anthropic_api_key: str = ""
    llm_model: str = DEFAULT_MODEL
    firecrawl_api_key: str = ""
    leads_db_path: str = "data/leads.json"
    lead_webhook_url: str = ""
    high_score_webhook_url: str = ""
    high_score_threshold: float = 8.0
    sender_name: str = "The HubCredo Team"
    tone: str = "professional"
    scrape_timeout: float = 30.0
    llm_timeout: float = 60.0
    webhook_timeout: float = 10.0
    bulk_max_workers: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "PipelineConfig":
        """Build a config from environment variables, loading .env first."""
        load_dotenv(env_file)
        return cls(
            anthropic_api_key=_get_str("ANTHROPIC_API_KEY", ""),
            llm_model=_get_str("LLM_MODEL", DEFAULT_MODEL),
            firecrawl_api_key=_get_str("FIRECRAWL_API_KEY", ""),
            leads_db_path=_get_str("LEADS_DB_PATH", "data/leads.json"),
            lead_webhook_url=_get_str("N8N_LEAD_WEBHOOK_URL", ""),
            high_score_webhook_url=_get_str("N8N_HIGH_SCORE_WEBHOOK_URL", ""),
            high_score_threshold=_get_float("HIGH_SCORE_THRESHOLD", 8.0),
            sender_name=_get_str("SENDER_NAME", "The HubCredo Team"),
            tone=_get_str("EMAIL_TONE", "professional"),
            scrape_timeout=_get_float("SCRAPE_TIMEOUT", 30.0),
            llm_timeout=_get_float("LLM_TIMEOUT", 60.0),
            webhook_timeout=_get_float("WEBHOOK_TIMEOUT", 10.0),
            bulk_max_workers=_get_int("BULK_MAX_WORKERS", 4),
            log_level=_get_str("LOG_LEVEL", "INFO").upper(),
        )
