"""
AI content analyzer.

Asks a Gemini, Claude or OpenAI chat model for a title, summary, category
and tags describing an uploaded file's extracted text, and validates the JSON answer.

Dependencies: langchain_core, pydantic, backend.core.ai.providers
System role: AI collaborator of the ai_analyze stage
"""

import json
import logging
import re
from pathlib import PurePath
from typing import Any

from langchain_core.messages import HumanMessage
from pydantic import BaseModel, Field, ValidationError, field_validator

from backend.boundary.db.models import KbCategory
from backend.configs import AISettings
from backend.core.ai.providers import build_chat_model
from backend.core.exceptions import IngestionException

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

_CATEGORY_EXTENSIONS: dict[KbCategory, tuple[str, ...]] = {
    KbCategory.CODE: (".js", ".ts", ".py", ".java", ".cpp", ".c", ".go", ".rs", ".rb"),
    KbCategory.DOCUMENTATION: (".txt", ".md", ".pdf", ".doc", ".docx"),
    KbCategory.DATA: (".json", ".csv", ".xml", ".yaml", ".yml"),
    KbCategory.IMAGE: (".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp"),
    KbCategory.ARCHIVE: (".zip", ".tar", ".gz"),
}


class AnalysisError(IngestionException):
    """Raised when the AI provider call fails."""

    pass


class AnalysisParseError(AnalysisError):
    """Raised when the provider's answer is not the expected JSON object."""

    def __init__(self, message: str, raw_response: str | None = None) -> None:
        details = {"raw_response": raw_response[:500]} if raw_response else None
        super().__init__(message, details)

    def __str__(self) -> str:
        return self.message


class AnalysisResult(BaseModel):
    """Structured analysis of one file."""

    title: str = Field(min_length=1, description="Descriptive title")
    summary: str = Field(description="Two or three sentence summary")
    category: KbCategory = Field(default=KbCategory.OTHER, description="Taxonomy category")
    tags: list[str] = Field(default_factory=list, description="Ordered tags")

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> KbCategory:
        """Match categories case-insensitively; anything outside the taxonomy is Other."""
        if isinstance(value, KbCategory):
            return value
        text = str(value or "").strip().lower()
        for category in KbCategory:
            if category.value.lower() == text:
                return category
        return KbCategory.OTHER

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(tag).strip() for tag in value if str(tag).strip()]


def infer_category(filename: str) -> KbCategory:
    """Guess a category from the file extension."""
    ext = PurePath(filename).suffix.lower()
    for category, extensions in _CATEGORY_EXTENSIONS.items():
        if ext in extensions:
            return category
    return KbCategory.OTHER


def fallback_analysis(text: str, filename: str) -> AnalysisResult:
    """Degraded analysis built from the filename and the first characters of text."""
    ext = PurePath(filename).suffix.lstrip(".")
    return AnalysisResult(
        title=filename,
        summary=f"Uploaded file: {filename}. {text[:200]}...",
        category=infer_category(filename),
        tags=[ext] if ext else [],
    )


class AIAnalyzer:
    """
    Chat-model-backed analyzer.

    Usage:
        analyzer = AIAnalyzer(settings.ai)
        result = await analyzer.analyze(text, "report.pdf")

    Any LangChain chat model exposing ainvoke() can be passed as `model`;
    otherwise the configured provider's model is created on first use.
    """

    def __init__(self, settings: AISettings, model: Any | None = None) -> None:
        self.settings = settings
        self._model = model

    @property
    def model(self) -> Any:
        if self._model is None:
            self._model = build_chat_model(self.settings)
        return self._model

    async def analyze(self, text: str, filename: str) -> AnalysisResult:
        """
        Analyze extracted text.

        Args:
            text: Extracted file text
            filename: Original client filename

        Returns:
            AnalysisResult

        Raises:
            AnalysisParseError: Answer was not valid analysis JSON
            AnalysisError: Provider call failed
        """
        prompt = self._build_prompt(text[: self.settings.max_prompt_chars], filename)
        try:
            response = await self.model.ainvoke([HumanMessage(content=prompt)])
            return self._parse_response(_response_text(response.content))
        except Exception as e:
            if self.settings.fallback_on_error:
                logger.warning(
                    f"AI analysis failed, using fallback: {type(e).__name__}: {e}",
                    extra={"filename": filename},
                )
                return fallback_analysis(text, filename)
            if isinstance(e, AnalysisError):
                raise
            raise AnalysisError(f"AI analysis failed: {e}") from e

    def _build_prompt(self, text: str, filename: str) -> str:
        """Build the analysis prompt."""
        categories = ", ".join(category.value for category in KbCategory)
        return f"""Analyze the following file content and provide a structured analysis.

Filename: {filename}

Content:
{text}

Please provide your response in this exact JSON format:
{{
  "title": "A clear, descriptive title for this content",
  "summary": "A 2-3 sentence summary of what this content is about",
  "category": "One category from: {categories}",
  "tags": ["tag1", "tag2", "tag3"]
}}"""

    def _parse_response(self, response_text: str) -> AnalysisResult:
        """Parse model JSON, tolerating markdown code fences and surrounding prose."""
        text = response_text
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif "```" in text:
            text = text.split("```")[1].split("```")[0]

        match = _JSON_OBJECT.search(text)
        if match is None:
            raise AnalysisParseError("AI response contained no JSON object", response_text)

        try:
            data = json.loads(match.group(0))
            return AnalysisResult.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise AnalysisParseError(f"Invalid AI analysis response: {e}", response_text) from e


def _response_text(content: Any) -> str:
    # Chat models may return a list of content parts
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content)
