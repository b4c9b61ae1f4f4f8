"""
Library configuration.

Centralized configuration management with environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Numeric tower settings"""

    model_config = SettingsConfigDict(
        env_prefix="NUMTOWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Default precision for rational and real values created without an
    # explicit MathContext (34 digits matches IEEE 754 decimal128)
    DEFAULT_PRECISION: int = 34
    DEFAULT_ROUNDING: str = "ROUND_HALF_EVEN"

    # Division by zero: "throw" or "signed_infinity"
    DIVISION_BY_ZERO_POLICY: str = "throw"

    # Digits of slack when comparing complex values across representations
    COMPLEX_EQUALITY_GUARD_DIGITS: int = 2

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "text"  # json or text
    LOG_FILE: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
