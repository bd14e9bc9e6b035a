"""
Mirror store configuration settings.

Settings for the Supabase (PostgREST) mirror that receives upserts of jobs,
files and knowledge-base entries after every state change.

Dependencies: pydantic_settings
System role: Real-time mirror sync configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MirrorSettings(BaseSettings):
    """Outbox drainer and mirror endpoint configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MIRROR_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        description="Base URL of the Supabase project (sync disabled when unset)",
    )
    api_key: str | None = Field(
        default=None,
        description="Service role key sent as apikey and bearer token",
    )
    timeout_seconds: float = Field(default=10.0, description="HTTP timeout per upsert")
    interval_seconds: float = Field(default=2.0, gt=0, description="Seconds between drain ticks")
    batch_size: int = Field(default=50, ge=1, description="Outbox events drained per tick")
    max_attempts: int = Field(
        default=5,
        ge=1,
        description="Delivery attempts before an event is parked as failed",
    )
    delivered_retention_seconds: float = Field(
        default=3600.0,
        ge=0,
        description="Age after which delivered events are purged from the outbox",
    )
    failed_retention_seconds: float = Field(
        default=7 * 24 * 3600.0,
        ge=0,
        description="Age after which parked events are purged from the outbox",
    )

    @property
    def enabled(self) -> bool:
        """Mirror sync runs only when an endpoint is configured."""
        return bool(self.url)
