"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from backend.configs.ai import AISettings
from backend.configs.database import DatabaseSettings
from backend.configs.mirror import MirrorSettings
from backend.configs.queue import QueueSettings
from backend.configs.settings import Settings, get_settings
from backend.configs.storage import StorageSettings

__all__ = [
    "AISettings",
    "DatabaseSettings",
    "MirrorSettings",
    "QueueSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
