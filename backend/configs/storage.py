"""
Upload storage configuration settings.

Local directory for uploaded bytes, size limit and extraction bound.

Dependencies: pydantic_settings
System role: File upload configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for uploaded file storage and text extraction."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    upload_dir: str = Field(
        default="uploads",
        description="Directory receiving uploaded files",
    )
    max_upload_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Maximum accepted upload size (100MB)",
    )
    max_extracted_chars: int = Field(
        default=50000,
        description="Extracted text is truncated to this many characters",
    )
