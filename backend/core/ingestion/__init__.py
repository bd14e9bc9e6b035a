"""File ingestion helpers: text extraction from stored uploads."""

from backend.core.ingestion.text_extractor import TextExtractor

__all__ = ["TextExtractor"]
