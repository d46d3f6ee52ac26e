"""
Proxy configuration and logging setup.
"""
import logging
import sys
from pathlib import Path
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings from environment variables."""

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    anthropic_version: str = "2023-06-01"
    request_timeout: float = 120.0  # completions can be slow

    # Server - loopback only, the endpoint has no auth
    host: str = "127.0.0.1"
    port: int = Field(default=11434, ge=1, le=65535)

    # Lifecycle (seconds)
    startup_timeout: float = 5.0
    shutdown_grace_period: float = 1.0
    shutdown_timeout: float = 2.0
    port_release_delay: float = 1.0

    # Logging
    log_level: str = "info"
    log_path: str = ""  # e.g. ~/.ollama-proxy/proxy.log

    class Config:
        env_prefix = ""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # .env may hold unrelated variables


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure logging with console and optional file handlers."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.log_path:
        try:
            log_path = Path(settings.log_path).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_path)
        except OSError as e:
            root_logger.error("Failed to set up file logging: %s", e)

    return logging.getLogger("ollama_proxy")
