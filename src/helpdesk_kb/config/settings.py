"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    llm_api_key: str = ""
    openai_api_key: str = ""
    google_api_key: str = ""

    # LLM (any OpenAI-compatible endpoint)
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "google/gemini-2.0-flash-exp:free"
    llm_temperature: float = 0.1
    llm_app_title: str = "Helpdesk KB"
    answer_style: Literal["json", "tools"] = "json"

    # Embedding
    embedding_provider: Literal["openai", "gemini"] = "gemini"
    embedding_model: str = "gemini-embedding-exp-03-07"
    embedding_dimensions: int = 3072

    # Storage paths
    sqlite_db_path: str = "data/helpdesk.db"
    embedding_cache_db_path: str = "data/embedding_cache.db"

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    slack_channel_id: str = ""
    resolved_reaction: str = "white_check_mark"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Auth / JWT
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60
    api_keys: str = ""  # comma-separated list of valid API keys

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_prefix": "HELPDESK_"}

    @property
    def valid_api_keys(self) -> list[str]:
        return [k.strip() for k in self.api_keys.split(",") if k.strip()]

    @property
    def slack_enabled(self) -> bool:
        return bool(self.slack_bot_token and self.slack_signing_secret)
