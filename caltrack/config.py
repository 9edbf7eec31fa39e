from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the calorie tracker backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("CALTRACK_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("CALTRACK_DB_PATH") or (self.data_root / "caltrack.db")
        ).expanduser()
        # In production you MUST set CALTRACK_JWT_SECRET. The dev secret keeps local runs easy.
        self.jwt_secret: str = os.environ.get("CALTRACK_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("CALTRACK_TOKEN_TTL_DAYS") or "30")
        self.cookie_secure: bool = (os.environ.get("CALTRACK_COOKIE_SECURE") or "").strip() in {"1", "true", "True"}

        # Summaries
        self.timezone: str = (os.environ.get("CALTRACK_TIMEZONE") or "UTC").strip() or "UTC"
        self.daily_calorie_goal: int = int(os.environ.get("CALTRACK_DAILY_CALORIE_GOAL") or "1650")

        # Completion service (OpenAI-compatible)
        self.openai_api_key: str | None = os.environ.get("OPENAI_KEY") or os.environ.get("OPENAI_API_KEY")
        self.openai_base_url: str = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.openai_model: str = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.openai_timeout: float = float(os.environ.get("OPENAI_TIMEOUT", "30"))
        self.openai_max_tokens: int = int(os.environ.get("OPENAI_MAX_TOKENS", "500"))
        self.openai_temperature: float = float(os.environ.get("OPENAI_TEMPERATURE", "0.2"))

        self.log_level: str = (os.environ.get("CALTRACK_LOG_LEVEL") or "INFO").upper()

        cors = os.environ.get("CALTRACK_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
