"""
Centralized settings (environment variables / .env).
"""
# @file purpose: Centralized settings using Pydantic Settings.

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BQ_", env_file=".env", extra="ignore")

    server_url: str = "http://localhost:4444"
    browser_name: str = "chrome"
    headless: bool = True
    request_timeout_seconds: float = 30.0

    # default session-wide poller
    query_timeout_seconds: float = 20.0
    query_interval_seconds: float = 0.5

    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
