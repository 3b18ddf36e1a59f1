"""Pydantic Settings for the favicon service.

All environment variables use the ICONFETCH_ prefix.
Example: ICONFETCH_CACHE_DIR=/var/cache/iconfetch, ICONFETCH_DEBUG=true
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_DIR = Path(__file__).resolve().parent

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class IconFetchSettings(BaseSettings):
    """Service configuration validated from environment variables."""

    # Service
    port: int = 8000
    log_level: str = "INFO"
    debug: bool = False  # Forces DEBUG logging and traces every fetch attempt

    # Cache
    cache_dir: str = "cache"
    cache_ttl_seconds: int = Field(default=2592000, ge=0)  # 30 days
    cache_placeholders: bool = True

    # Outbound fetching
    timeout_seconds: float = Field(default=5.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    max_retries: int = Field(default=2, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    verify_tls: bool = True
    probe_scheme: str = Field(default="https", pattern="^https?$")

    # Static configuration files
    domains_config_path: str = str(_CONFIG_DIR / "domains.yaml")
    proxies_config_path: str = str(_CONFIG_DIR / "proxies.yaml")

    # HTTP response caching
    response_max_age_seconds: int = Field(default=86400, ge=0)

    model_config = {"env_prefix": "ICONFETCH_"}

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
