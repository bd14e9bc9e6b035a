"""
Chat model construction for the configured AI provider.

Dependencies: langchain_google_genai, langchain_anthropic, langchain_openai
System role: AI provider selection
"""

import logging
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from backend.configs import AISettings

logger = logging.getLogger(__name__)


def _api_key(settings: AISettings, provider: str) -> str | None:
    return {
        "gemini": settings.google_api_key,
        "claude": settings.anthropic_api_key,
        "openai": settings.openai_api_key,
    }[provider]


def resolve_provider(settings: AISettings) -> str:
    """
    Provider to build a model for.

    A provider without an API key falls back to Gemini when a Google key
    is configured.
    """
    provider = settings.provider
    if provider != "gemini" and not _api_key(settings, provider) and settings.google_api_key:
        logger.warning(
            f"No API key for {provider}, falling back to gemini",
            extra={"provider": provider},
        )
        return "gemini"
    return provider


def build_chat_model(settings: AISettings) -> Any:
    """
    Create the LangChain chat model for the configured provider.

    Args:
        settings: AI settings

    Returns:
        Chat model exposing ainvoke()
    """
    provider = resolve_provider(settings)
    model_id = settings.model_for(provider)
    api_key = _api_key(settings, provider)

    if provider == "claude":
        model = ChatAnthropic(
            model=model_id,
            temperature=settings.temperature,
            max_tokens=settings.max_output_tokens,
            api_key=api_key,
        )
    elif provider == "openai":
        model = ChatOpenAI(
            model=model_id,
            temperature=settings.temperature,
            max_tokens=settings.max_output_tokens,
            api_key=api_key,
        )
    else:
        model = ChatGoogleGenerativeAI(
            model=model_id,
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
            google_api_key=api_key,
        )

    logger.info(f"Initialized AI analyzer with {provider}/{model_id}")
    return model
