"""
Centralised settings loader.

Every value can be overridden through the environment or a local `.env`.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB / secrets ─────────────────────────────────────
    env_name: str = Field("local", validation_alias="ENV_NAME")
    database_url: str = Field(
        "sqlite+aiosqlite:///./fitplan.db", validation_alias="DATABASE_URL"
    )
    jwt_secret: str = Field("changeme", validation_alias="JWT_SECRET")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # ─── text generation (Gemini) ───────────────────────────────────
    gemini_api_key: str | None = Field(None, validation_alias="GEMINI_API_KEY")
    chat_model: str = Field("models/gemini-2.0-flash", validation_alias="CHAT_MODEL")
    llm_temperature: float = Field(0.7, validation_alias="LLM_TEMPERATURE")
    llm_max_output_tokens: int = Field(2500, validation_alias="LLM_MAX_OUTPUT_TOKENS")
    llm_max_retries: int = Field(5, validation_alias="LLM_MAX_RETRIES")

    # ─── targets / plans ────────────────────────────────────────────
    calorie_floor_kcal: int = Field(1200, validation_alias="CALORIE_FLOOR_KCAL")
    plan_days: int = Field(7, validation_alias="PLAN_DAYS")

    # allow other teammates’ env-vars without crashing
    model_config = {"extra": "ignore", "env_file": ".env", "env_file_encoding": "utf-8"}


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
