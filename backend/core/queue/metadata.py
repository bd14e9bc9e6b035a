"""
Job metadata schemas.

Each job kind validates its JSON metadata against a pydantic model before
the handler runs, so handlers receive typed input.

Dependencies: pydantic
System role: Per-kind job payload contracts
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FileJobMetadata(BaseModel):
    """Metadata for the file pipeline kinds (text_extract, ai_analyze)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    file_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("file_id", "fileId"),
        description="File the job operates on",
    )
