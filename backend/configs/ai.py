"""
AI analysis configuration settings.

Settings for the chat model used to title, summarize, categorize and tag
extracted file content. Gemini is the default provider; Claude and OpenAI
models can be selected with AI_PROVIDER.

Dependencies: pydantic_settings
System role: AI provider configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

AIProvider = Literal["gemini", "claude", "openai"]

DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-2.0-flash",
    "claude": "claude-3-7-sonnet-20250219",
    "openai": "gpt-4o-mini",
}


class AISettings(BaseSettings):
    """Analyzer provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AI_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: AIProvider = Field(
        default="gemini",
        description="Chat model provider used for analysis",
    )
    google_api_key: str | None = Field(
        default=None,
        validation_alias="GOOGLE_API_KEY",
        description="Google API key for Gemini access",
    )
    anthropic_api_key: str | None = Field(
        default=None,
        validation_alias="ANTHROPIC_API_KEY",
        description="Anthropic API key for Claude access",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
        description="OpenAI API key",
    )
    model_id: str | None = Field(
        default=None,
        description="Chat model name; defaults to the provider's standard model",
    )
    temperature: float = Field(default=0.2, description="Sampling temperature")
    max_output_tokens: int = Field(default=1024, description="Response token ceiling")
    max_prompt_chars: int = Field(
        default=10000,
        description="Extracted text characters included in the prompt",
    )
    fallback_on_error: bool = Field(
        default=False,
        description="Return a degraded filename-based analysis instead of failing",
    )

    def model_for(self, provider: str) -> str:
        """Model name to use for a provider."""
        if self.model_id and provider == self.provider:
            return self.model_id
        return DEFAULT_MODELS[provider]
