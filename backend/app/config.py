"""
Configuration Management Module

Configures gateway parameters via environment variables or .env file.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Gateway Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "Claude Relay Gateway"
    DEBUG: bool = False
    # Log level override (e.g. "WARNING"); derived from DEBUG when unset
    LOG_LEVEL: Optional[str] = None

    # Server Config (used when started via `python -m app.main`)
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # HTTP Client Config
    # Upstream request timeout (seconds)
    HTTP_TIMEOUT: int = 600

    # Token Estimation Config
    # "heuristic" needs no extra data, "tiktoken" loads a BPE encoding on first use
    TOKEN_ESTIMATOR: Literal["heuristic", "tiktoken"] = "heuristic"
    # Encoding used when TOKEN_ESTIMATOR is "tiktoken"
    TIKTOKEN_ENCODING: str = "cl100k_base"
    # Prefer token counts reported inside the upstream stream over local estimates
    PREFER_UPSTREAM_USAGE: bool = True

    # CORS Config
    # Comma-separated list of allowed origins for CORS
    # Example: "http://localhost:3000,https://example.com"
    ALLOWED_ORIGINS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get gateway configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Gateway configuration instance
    """
    return Settings()
