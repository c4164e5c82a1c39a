"""Document text extraction.

PDF-family documents go through PyMuPDF (fitz), Word documents through
python-docx and plain text is read directly. HTML files that the primary
converter cannot handle fall back to BeautifulSoup.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterator

import fitz  # PyMuPDF
from bs4 import BeautifulSoup
from docx import Document

from fsindexer.errors import ExtractionError, UnsupportedFormatError
from fsindexer.utils.files import file_type_of

LOGGER = logging.getLogger(__name__)

HTML_TYPES = re.compile(r"htm?")

FITZ_TYPES = frozenset({"pdf", "xps", "oxps", "epub", "cbz", "fb2", "mobi"})
WORD_TYPES = frozenset({"docx"})
PLAIN_TYPES = frozenset({"txt", "text", "md", "rst", "csv", "tsv", "log", "json", "xml"})

DocumentConverter = Callable[[Path], str]
HtmlConverter = Callable[[bytes], str]


def iter_pdf_text(path: Path) -> Iterator[str]:
    """Yield text content from a PyMuPDF-readable document page by page."""
    try:
        doc = fitz.open(path)
    except Exception as exc:
        raise ExtractionError(f"Failed to open {path}: {exc}") from exc

    try:
        for index in range(len(doc)):
            try:
                text = doc[index].get_text() or ""
            except Exception as exc:  # pragma: no cover - defensive path
                LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
                continue
            if text.strip():
                yield text
    finally:
        doc.close()


def read_docx_text(path: Path) -> str:
    try:
        doc = Document(str(path))
    except Exception as exc:
        raise ExtractionError(f"Failed to open {path}: {exc}") from exc
    return "\n".join(paragraph.text for paragraph in doc.paragraphs if paragraph.text)


def convert_document(path: Path) -> str:
    """Convert a document on disk to plain text based on its extension."""
    file_type = file_type_of(path)
    if file_type in FITZ_TYPES:
        return "\n".join(iter_pdf_text(path))
    if file_type in WORD_TYPES:
        return read_docx_text(path)
    if file_type in PLAIN_TYPES:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ExtractionError(f"Failed to read {path}: {exc}") from exc
    raise UnsupportedFormatError(f"No converter for {path.name}", {"type": file_type})


def html_to_text(raw: bytes) -> str:
    """Render HTML markup as whitespace-separated text."""
    soup = BeautifulSoup(raw, "html.parser")
    for element in soup(["script", "style", "noscript"]):
        element.decompose()
    return soup.get_text(separator=" ", strip=True)


class TextExtractor:
    """Obtain text for a file, falling back to HTML rendering for web pages."""

    def __init__(
        self,
        converter: DocumentConverter = convert_document,
        html_converter: HtmlConverter = html_to_text,
    ) -> None:
        self.converter = converter
        self.html_converter = html_converter

    def extract(self, path: Path) -> str:
        """Return the file's text, or an empty string if nothing usable came out."""
        content = ""
        try:
            content = self.converter(path).strip()
        except Exception as exc:
            LOGGER.info("can't parse file %s, %s", path, exc)

        if not content and HTML_TYPES.search(file_type_of(path)):
            content = self._extract_html(path)
        return content

    def _extract_html(self, path: Path) -> str:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            LOGGER.warning("can't read file %s, %s", path, exc)
            return ""
        try:
            return (self.html_converter(raw) or "").strip()
        except Exception as exc:
            LOGGER.info("can't convert html %s, %s", path, exc)
            return ""
