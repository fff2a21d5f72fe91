from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "DEBUG"
    api_key: str = ""  # Empty = auth disabled (local dev); set to enable API key validation

    gemini_api_key: str = ""  # Empty = offline fallback, no network calls
    model_name: str = "gemini-3-pro-preview"
    thinking_budget: int = 4000
    request_timeout_ms: int | None = None
    output_language: Literal["en", "zh"] = "en"
    offline_delay_seconds: float = 1.5

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
