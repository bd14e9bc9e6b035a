"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI and the queue loops.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from backend.configs.ai import AISettings
from backend.configs.base import BaseSettings
from backend.configs.database import DatabaseSettings
from backend.configs.mirror import MirrorSettings
from backend.configs.queue import QueueSettings
from backend.configs.storage import StorageSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    queue: QueueSettings = QueueSettings()
    ai: AISettings = AISettings()
    mirror: MirrorSettings = MirrorSettings()
    storage: StorageSettings = StorageSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from backend.configs import get_settings
        settings = get_settings()
    """
    return Settings()
