"""
Job queue configuration settings.

Polling intervals, batch bounds, retry policy and stuck-file recovery
for the dispatcher, worker and sweeper loops.

Dependencies: pydantic, pydantic_settings
System role: Background pipeline tuning knobs
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueSettings(BaseSettings):
    """Dispatcher / worker / sweeper configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUEUE_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Start the background loops with the API process",
    )
    dispatch_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Seconds between dispatcher ticks",
    )
    worker_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Seconds between worker ticks",
    )
    worker_batch_size: int = Field(
        default=5,
        ge=1,
        description="Maximum job runs executed per worker tick",
    )
    handler_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-handler execution timeout; expiry fails the run",
    )
    default_priority: int = Field(
        default=100,
        description="Priority given to jobs created by uploads and chaining",
    )
    default_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempt ceiling stored on new jobs",
    )
    enforce_max_attempts: bool = Field(
        default=True,
        description="Fail jobs permanently once attempts reach max_attempts",
    )

    sweep_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between stuck-file sweeps",
    )
    stuck_after_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Age after which an extracted, unanalyzed file is considered stuck",
    )
    sweep_max_analysis_jobs: int = Field(
        default=3,
        ge=1,
        description="Analysis jobs allowed per file before the sweeper marks it failed",
    )
