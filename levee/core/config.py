"""
Levee SDK Configuration Module

Handles configuration priority:
  1. Explicit arguments / CLI flags (highest priority)
  2. Environment variables
  3. Default values (lowest priority)

Configuration sources:
  - API_KEY: LEVEE_API_KEY (env) → none
  - BASE_URL: LEVEE_BASE_URL (env) → https://levee.com/sdk/v1 (default)
  - TIMEOUT: LEVEE_TIMEOUT (env) → 30 (default, seconds)
  - GRPC_ADDRESS: LEVEE_GRPC_ADDRESS (env) → llm.levee.com:9889 (default)
  - GRPC_INSECURE: LEVEE_GRPC_INSECURE (env) → false (default)
  - LOG_LEVEL: LEVEE_LOG_LEVEL (env) → WARNING (default)
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "https://levee.com/sdk/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_GRPC_ADDRESS = "llm.levee.com:9889"
DEFAULT_LOG_LEVEL = "WARNING"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class LeveeConfig:
    """Resolved SDK configuration."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT  # seconds
    grpc_address: str = DEFAULT_GRPC_ADDRESS
    grpc_insecure: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    def to_dict(self) -> dict:
        """Convert to dictionary (safe for display, API key masked)."""
        return {
            "api_key": mask_secret(self.api_key),
            "base_url": self.base_url,
            "timeout": self.timeout,
            "grpc_address": self.grpc_address,
            "grpc_insecure": self.grpc_insecure,
            "log_level": self.log_level,
        }


def mask_secret(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    if len(value) <= 6:
        return "***"
    return f"{value[:3]}***{value[-2:]}"


def get_api_key_from_env() -> Optional[str]:
    return (os.getenv("LEVEE_API_KEY") or "").strip() or None


def get_base_url_from_env() -> str:
    return (os.getenv("LEVEE_BASE_URL") or "").strip() or DEFAULT_BASE_URL


def get_timeout_from_env() -> float:
    """
    Get timeout value from environment variables.

    Source: LEVEE_TIMEOUT (seconds)
    Default: 30
    """
    try:
        timeout = os.getenv("LEVEE_TIMEOUT")
        if timeout:
            value = float(timeout)
            if value > 0:
                return value
    except (ValueError, TypeError):
        pass

    return DEFAULT_TIMEOUT


def get_grpc_address_from_env() -> str:
    return (os.getenv("LEVEE_GRPC_ADDRESS") or "").strip() or DEFAULT_GRPC_ADDRESS


def get_grpc_insecure_from_env() -> bool:
    return (os.getenv("LEVEE_GRPC_INSECURE") or "").strip().lower() in _TRUE_VALUES


def get_log_level_from_env() -> str:
    return (os.getenv("LEVEE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()


def get_config(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    grpc_address: Optional[str] = None,
    grpc_insecure: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> LeveeConfig:
    """
    Build configuration with priority: explicit argument > env > default.

    Returns:
        LeveeConfig object with resolved values
    """
    return LeveeConfig(
        api_key=api_key or get_api_key_from_env(),
        base_url=base_url or get_base_url_from_env(),
        timeout=timeout or get_timeout_from_env(),
        grpc_address=grpc_address or get_grpc_address_from_env(),
        grpc_insecure=grpc_insecure if grpc_insecure is not None else get_grpc_insecure_from_env(),
        log_level=(log_level or get_log_level_from_env()).upper(),
    )
