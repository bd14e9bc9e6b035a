"""
Polling job queue.

Exports:
  - Dispatcher: Per-tenant fan-out from queued jobs to job runs
  - Worker: Executes queued job runs through registered handlers
  - StuckFileSweeper: Recovers files stalled between stages
  - HandlerRegistry, TextExtractHandler, AIAnalyzeHandler: Kind dispatch
  - build_registry(): Registry with the built-in file pipeline kinds
"""

from backend.core.ai.analyzer import AIAnalyzer
from backend.core.ingestion.text_extractor import TextExtractor
from backend.core.queue.dispatcher import Dispatcher
from backend.core.queue.handlers import AIAnalyzeHandler, TextExtractHandler
from backend.core.queue.metadata import FileJobMetadata
from backend.core.queue.registry import HandlerRegistry, StageHandler
from backend.core.queue.sweeper import StuckFileSweeper
from backend.core.queue.worker import ClaimedRun, Worker


def build_registry(
    extractor: TextExtractor,
    analyzer: AIAnalyzer,
    priority: int = 100,
    max_attempts: int = 3,
) -> HandlerRegistry:
    """Registry with text_extract and ai_analyze handlers."""
    return HandlerRegistry(
        [
            TextExtractHandler(extractor, next_priority=priority, next_max_attempts=max_attempts),
            AIAnalyzeHandler(analyzer),
        ]
    )


__all__ = [
    "AIAnalyzeHandler",
    "ClaimedRun",
    "Dispatcher",
    "FileJobMetadata",
    "HandlerRegistry",
    "StageHandler",
    "StuckFileSweeper",
    "TextExtractHandler",
    "Worker",
    "build_registry",
]
