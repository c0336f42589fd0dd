"""Configuration module for Airlock.

Provides centralized configuration management with type-safe enums.

Usage:
    from airlock.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from airlock.core.config.enums import AbsentRelationPolicy, Environment
from airlock.core.config.settings import Settings

__all__ = [
    "AbsentRelationPolicy",
    "Environment",
    "Settings",
    "settings",
]

# Singleton settings instance
settings = Settings()
