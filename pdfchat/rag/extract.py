"""Source text extraction and cleanup.

Handles:
- Whitespace and non-printable character normalization
- PDF page-by-page text extraction
- Plain text file reading
"""
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import List

import structlog
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from pdfchat import config
from pdfchat.errors import ExtractionFailure

logger = structlog.get_logger()

WHITESPACE_PATTERN = re.compile(r"\s+")

# Letters, numbers, punctuation and separators survive cleanup
_KEPT_CATEGORIES = ("L", "N", "P", "Z")


@dataclass
class PageText:
    """Cleaned text of one source page."""

    page_number: int  # 1-based
    text: str


def clean_text(text: str) -> str:
    """Normalize whitespace and drop non-printable characters.

    Args:
        text: Raw extracted text

    Returns:
        Text with runs of whitespace collapsed to single spaces, control
        and symbol characters replaced by spaces, and both ends trimmed
    """
    text = WHITESPACE_PATTERN.sub(" ", text)
    text = "".join(
        char if unicodedata.category(char)[0] in _KEPT_CATEGORIES else " "
        for char in text
    )
    text = WHITESPACE_PATTERN.sub(" ", text)
    return text.strip()


def extract_pdf_pages(file_path: Path, min_chars: int = None) -> List[PageText]:
    """Extract cleaned text from every page of a PDF.

    Pages whose cleaned text is not longer than ``min_chars`` are dropped,
    the remaining pages keep their real page numbers.

    Args:
        file_path: Path to the PDF file
        min_chars: Minimum page length (default config.MIN_SOURCE_CHARS)

    Returns:
        List of PageText in page order

    Raises:
        ExtractionFailure: If the file is missing or cannot be parsed
    """
    min_chars = config.MIN_SOURCE_CHARS if min_chars is None else min_chars
    file_path = Path(file_path)

    if not file_path.exists():
        raise ExtractionFailure(f"File not found: {file_path}")

    try:
        reader = PdfReader(str(file_path))
        total_pages = len(reader.pages)
    except (PyPdfError, OSError, ValueError) as e:
        logger.error("pdf_open_failed", path=str(file_path), error=str(e))
        raise ExtractionFailure(f"Cannot open PDF {file_path}: {e}") from e

    logger.info("pdf_opened", path=str(file_path), total_pages=total_pages)

    pages = []
    for page_number, page in enumerate(reader.pages, 1):
        try:
            raw = page.extract_text() or ""
        except (PyPdfError, ValueError, KeyError) as e:
            logger.warning(
                "pdf_page_extraction_failed",
                path=str(file_path),
                page=page_number,
                error=str(e),
            )
            continue

        cleaned = clean_text(raw)
        if len(cleaned) > min_chars:
            pages.append(PageText(page_number=page_number, text=cleaned))

    logger.info(
        "pdf_text_extracted",
        path=str(file_path),
        total_pages=total_pages,
        pages_kept=len(pages),
    )

    return pages


def read_text_file(file_path: Path) -> str:
    """Read a plain text file.

    Raises:
        ExtractionFailure: If the file is missing or not valid UTF-8
    """
    file_path = Path(file_path)

    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ExtractionFailure(f"File not found: {file_path}") from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error("text_file_read_failed", path=str(file_path), error=str(e))
        raise ExtractionFailure(f"Cannot read text file {file_path}: {e}") from e

    logger.info("text_file_read", path=str(file_path), char_count=len(content))
    return content
