"""
Text extraction for uploaded files.

Reads text formats directly and PDFs through LangChain PyPDFLoader; every
other format yields a descriptive placeholder so the analysis stage still
has something to categorize.

Dependencies: langchain_community.document_loaders
System role: Extraction collaborator of the text_extract stage
"""

import asyncio
import logging
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader

logger = logging.getLogger(__name__)

TEXT_MIME_TYPES = frozenset(
    {
        "application/json",
        "application/javascript",
        "application/x-javascript",
    }
)


class TextExtractor:
    """
    Extract plain text from a stored upload.

    extract() never raises: read failures come back as an
    "[Error extracting text: ...]" marker string.
    """

    def __init__(self, max_chars: int = 50_000) -> None:
        """
        Initialize extractor.

        Args:
            max_chars: Upper bound on returned text length
        """
        self.max_chars = max_chars

    async def extract(self, file_path: str, mime_type: str) -> str:
        """
        Extract text from a file.

        Args:
            file_path: Location of the stored bytes
            mime_type: Client-declared content type

        Returns:
            str: Extracted text (truncated) or a bracketed placeholder
        """
        filename = Path(file_path).name
        mime_type = (mime_type or "").lower()

        try:
            if mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES:
                content = await asyncio.to_thread(
                    Path(file_path).read_text, encoding="utf-8", errors="replace"
                )
                return content[: self.max_chars]

            if mime_type == "application/pdf":
                return await asyncio.to_thread(self._extract_pdf, file_path, filename)

            if "word" in mime_type or "document" in mime_type:
                return f"[Document file detected - text extraction would happen here. Filename: {filename}]"

            if mime_type.startswith("image/"):
                return f"[Image file detected - OCR or vision analysis would happen here. Filename: {filename}]"

            return f"[Unsupported file type: {mime_type}. Filename: {filename}]"

        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Text extraction failed",
                extra={"file_path": file_path, "mime_type": mime_type, "error": str(e)},
            )
            return f"[Error extracting text: {e}]"

    def _extract_pdf(self, file_path: str, filename: str) -> str:
        """Load PDF pages and join their text."""
        documents = PyPDFLoader(file_path).load()
        text = "\n\n".join(doc.page_content for doc in documents if doc.page_content)
        if not text.strip():
            return f"[PDF file contains no extractable text. Filename: {filename}]"
        return text[: self.max_chars]
