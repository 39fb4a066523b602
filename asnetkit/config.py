"""
Configuration module for asnetkit.
"""

import os
from typing import Dict

from pydantic import BaseModel, Field, field_validator

from .__version__ import __version__


class SessionConfig(BaseModel):
    """
    Session configuration.

    Supports environment variables through ``from_env``:
    - ASNETKIT_TIMEOUT: Per-attempt transport timeout in seconds (default: 60)
    - ASNETKIT_MAX_RETRIES: Retries after transport failures (default: 2)
    - ASNETKIT_RETRY_BASE_DELAY: First retry delay in seconds (default: 0.6)
    - ASNETKIT_MAX_WORKERS: Threads running callback requests (default: 4)
    - ASNETKIT_USER_AGENT: User-Agent header value
    - ASNETKIT_DEBUG: "1", "true", "yes" or "on" enables debug logging
    """

    timeout: float = Field(60.0, description="Per-attempt transport timeout in seconds")
    max_retries: int = Field(2, description="Maximum number of retries after transport failures")
    retry_base_delay: float = Field(0.6, description="Delay before the first retry in seconds")
    max_workers: int = Field(4, description="Worker threads for callback-style requests")
    user_agent: str = Field(f"asnetkit/{__version__}", description="User-Agent header value")
    default_headers: Dict[str, str] = Field(
        default_factory=dict, description="Headers added to every request"
    )
    debug: bool = Field(False, description="Enable debug logging")

    @field_validator("timeout", "retry_base_delay")
    @classmethod
    def validate_positive(cls, v, info):
        if v < 0 or (info.field_name == "timeout" and v == 0):
            raise ValueError(f"{info.field_name} must be positive")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v):
        if v < 0:
            raise ValueError("max_retries must not be negative")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v):
        if v < 1:
            raise ValueError("max_workers must be at least 1")
        return v

    @classmethod
    def from_env(cls, **overrides) -> "SessionConfig":
        """
        Build a configuration from ``ASNETKIT_*`` environment variables.

        Explicit keyword arguments win over the environment.

        Example:
            >>> config = SessionConfig.from_env(timeout=5.0)
        """
        env = {
            "timeout": os.getenv("ASNETKIT_TIMEOUT"),
            "max_retries": os.getenv("ASNETKIT_MAX_RETRIES"),
            "retry_base_delay": os.getenv("ASNETKIT_RETRY_BASE_DELAY"),
            "max_workers": os.getenv("ASNETKIT_MAX_WORKERS"),
            "user_agent": os.getenv("ASNETKIT_USER_AGENT"),
            "debug": os.getenv("ASNETKIT_DEBUG"),
        }
        values = {k: v for k, v in env.items() if v}
        values.update(overrides)
        return cls(**values)
