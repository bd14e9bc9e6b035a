"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_file_service,
    get_handler_registry,
    get_job_service,
    get_kb_service,
    get_settings_dependency,
    get_stats_service,
    get_tenant_id,
)

__all__ = [
    "get_file_service",
    "get_handler_registry",
    "get_job_service",
    "get_kb_service",
    "get_settings_dependency",
    "get_stats_service",
    "get_tenant_id",
]
