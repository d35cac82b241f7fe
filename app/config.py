"""
Configuration Management

Centralized configuration management using environment variables
with proper validation and type safety.
"""

import os
from typing import Optional
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env in backend directory (resolve to absolute path)
_backend_root = Path(__file__).resolve().parent.parent
_env_path = _backend_root / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=str(_env_path))
else:
    # Also load from current working directory so "python backend_server.py" picks up .env
    load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class GeminiConfig:
    """Google Gemini configuration (résumé extraction model)"""
    api_key: Optional[str] = None
    model: str = "gemini-1.5-flash"
    timeout_seconds: float = 60.0
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"


@dataclass
class RetryConfig:
    """Retry policy for transient AI failures (overload, rate limit)"""
    max_retries: int = 3
    base_delay_seconds: float = 1.0  # doubled after every failed attempt


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    frontend_url: str = ""
    upload_rate_limit: str = "30/minute"
    rate_limit_enabled: bool = True


@dataclass
class Config:
    """Main application configuration"""

    # AI extraction (Google Gemini)
    gemini: GeminiConfig

    # Retry/backoff around the model call
    retry: RetryConfig

    # Server configuration
    server: ServerConfig

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        The Gemini API key is optional here: uploads are still accepted
        without it, only AI processing is refused.

        Returns:
            Configured Config instance

        Raises:
            ValueError: If a numeric environment variable cannot be parsed
        """
        gemini_api_key = (os.getenv("GEMINI_API_KEY") or "").strip() or None

        return cls(
            gemini=GeminiConfig(
                api_key=gemini_api_key,
                model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
                timeout_seconds=_env_float("GEMINI_TIMEOUT_SECONDS", 60.0),
                base_url=os.getenv(
                    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
                ).rstrip("/"),
            ),
            retry=RetryConfig(
                max_retries=_env_int("AI_MAX_RETRIES", 3),
                base_delay_seconds=_env_float("AI_RETRY_BASE_DELAY", 1.0),
            ),
            server=ServerConfig(
                host=os.getenv("SERVER_HOST", "0.0.0.0"),
                port=_env_int("SERVER_PORT", 8000),
                frontend_url=os.getenv("FRONTEND_URL", ""),
                upload_rate_limit=os.getenv("UPLOAD_RATE_LIMIT", "30/minute"),
                rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", True),
            ),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            LOG_FORMAT=os.getenv(
                "LOG_FORMAT",
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
        )


def get_config() -> Config:
    """
    Get configuration from environment variables.

    Returns:
        Configuration instance
    """
    return Config.from_env()
