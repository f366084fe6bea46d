import os
from typing import Optional

from pydantic import BaseModel, Field

from .errors import ConfigurationError


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            details={"variable": name}
        )


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number of seconds, got {raw!r}",
            details={"variable": name}
        )


class Settings(BaseModel):
    service_name: str = Field(default_factory=lambda: os.getenv("SERVICE_NAME", "db-explorer"))
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "dev"))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Gateway
    gateway_host: str = Field(default_factory=lambda: os.getenv("GATEWAY_HOST", "127.0.0.1"))
    gateway_port: int = Field(default_factory=lambda: _env_int("GATEWAY_PORT", 5000))
    cors_origins: list[str] = Field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))

    # Console
    gateway_url: str = Field(default_factory=lambda: os.getenv("GATEWAY_URL", "http://localhost:5000"))
    gateway_timeout_seconds: Optional[float] = Field(
        default_factory=lambda: _env_float("GATEWAY_TIMEOUT_SECONDS")
    )  # None leaves timing to the HTTP stack

settings = Settings()
