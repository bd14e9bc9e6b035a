"""AI analysis of extracted file content."""

from backend.core.ai.analyzer import (
    AIAnalyzer,
    AnalysisError,
    AnalysisParseError,
    AnalysisResult,
    fallback_analysis,
    infer_category,
)
from backend.core.ai.providers import build_chat_model, resolve_provider

__all__ = [
    "AIAnalyzer",
    "AnalysisError",
    "AnalysisParseError",
    "AnalysisResult",
    "build_chat_model",
    "fallback_analysis",
    "infer_category",
    "resolve_provider",
]
