"""
Document decoding service for uploaded PDF, Word, text and image files.

Turns raw upload bytes into the plain text the analysis pipeline consumes.
PDF pages without a text layer and image uploads go through Tesseract OCR.
Nothing is written to disk.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import fitz  # PyMuPDF
import pytesseract
from docx import Document as DocxDocument
from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.services.document_analyzer import AnalysisRequest, ContentKind

logger = logging.getLogger(__name__)

IMAGE_TYPES = frozenset({"png", "jpg", "jpeg"})


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class ParsedDocument:
    """
    Output of the DocumentParser.

    Attributes:
        text:      Extracted plain text.
        kind:      ContentKind.IMAGE when the text came from OCR of an image
                   upload, ContentKind.TEXT otherwise.
        metadata:  Dict with keys: file_type, word_count, and any
                   format-specific fields (page_count, ocr_pages, ...).
    """

    text: str
    kind: ContentKind = ContentKind.TEXT
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_request(self) -> AnalysisRequest:
        return AnalysisRequest(text=self.text, kind=self.kind)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class DocumentParser:
    """Decodes uploaded documents into ParsedDocument objects."""

    def __init__(self) -> None:
        if settings.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    async def parse_upload(self, filename: str, content: bytes) -> ParsedDocument:
        """
        Decode an uploaded file.

        Args:
            filename: Original filename; its extension selects the decoder.
            content:  Raw file bytes.

        Returns:
            ParsedDocument with text, kind and metadata.

        Raises:
            ValueError:   Unsupported file type.
            RuntimeError: Password-protected or unreadable file.
        """
        ft = Path(filename).suffix.lower().lstrip(".")
        if ft == "pdf":
            parsed = await self._parse_pdf(content)
        elif ft in ("docx", "doc"):
            parsed = await self._parse_docx(content)
        elif ft == "txt":
            parsed = await self._parse_text(content)
        elif ft in IMAGE_TYPES:
            parsed = await self._parse_image(content)
        else:
            raise ValueError(f"Unsupported file type: {ft!r}")

        parsed.metadata["file_type"] = ft
        parsed.metadata["word_count"] = len(parsed.text.split())
        logger.info(
            "Parsed %r as %s (%d words)",
            filename,
            parsed.kind.value,
            parsed.metadata["word_count"],
        )
        return parsed

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    async def _parse_pdf(self, content: bytes) -> ParsedDocument:
        """Read the PDF text layer, with OCR fallback for image-only pages."""
        try:
            doc = fitz.open(stream=content, filetype="pdf")
        except Exception as exc:
            raise RuntimeError(f"Cannot open PDF file: {exc}") from exc

        if doc.needs_pass:
            doc.close()
            raise RuntimeError(
                "PDF is password-protected. Please provide an unlocked copy."
            )

        page_texts: List[str] = []
        ocr_pages = 0
        try:
            for page in doc:
                text = page.get_text("text").strip()
                if not text and page.get_images():
                    text = (await self._ocr_page(page)).strip()
                    if text:
                        ocr_pages += 1
                if text:
                    page_texts.append(text)
            page_count = doc.page_count
        finally:
            doc.close()

        return ParsedDocument(
            text="\n\n".join(page_texts),
            metadata={"page_count": page_count, "ocr_pages": ocr_pages},
        )

    async def _ocr_page(self, page: fitz.Page) -> str:
        """Render an entire page at 2× scale and run Tesseract OCR."""
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(2, 2))
            img = Image.open(io.BytesIO(pix.tobytes("png")))
            return pytesseract.image_to_string(img)
        except Exception as exc:
            logger.warning(f"Full-page OCR failed on page {page.number + 1}: {exc}")
            return ""

    # ------------------------------------------------------------------
    # DOCX
    # ------------------------------------------------------------------

    async def _parse_docx(self, content: bytes) -> ParsedDocument:
        """Read paragraphs and tables from a Word document."""
        try:
            doc = DocxDocument(io.BytesIO(content))
        except Exception as exc:
            raise RuntimeError(f"Cannot open Word document: {exc}") from exc

        parts: List[str] = [
            para.text.strip() for para in doc.paragraphs if para.text.strip()
        ]

        for table in doc.tables:
            rows = [[cell.text for cell in row.cells] for row in table.rows]
            formatted = _format_table_rows(rows)
            if formatted:
                parts.append(formatted)

        core = doc.core_properties
        return ParsedDocument(
            text="\n\n".join(parts),
            metadata={
                "title": core.title or "",
                "author": core.author or "",
                "table_count": len(doc.tables),
            },
        )

    # ------------------------------------------------------------------
    # Plain text and images
    # ------------------------------------------------------------------

    async def _parse_text(self, content: bytes) -> ParsedDocument:
        return ParsedDocument(text=content.decode("utf-8", errors="replace"))

    async def _parse_image(self, content: bytes) -> ParsedDocument:
        """OCR an uploaded photo or scan."""
        try:
            img = Image.open(io.BytesIO(content))
            img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise RuntimeError(f"Cannot open image file: {exc}") from exc

        try:
            text = pytesseract.image_to_string(img)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise RuntimeError(f"OCR failed: {exc}") from exc

        return ParsedDocument(
            text=text.strip(),
            kind=ContentKind.IMAGE,
            metadata={"width": img.width, "height": img.height},
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

def _format_table_rows(rows: List[List[Optional[str]]]) -> str:
    """Format a list-of-lists table as pipe-delimited text, skipping blank rows."""
    lines: List[str] = []
    for row in rows:
        cells = [str(cell).strip() if cell is not None else "" for cell in row]
        non_empty = [c for c in cells if c]
        if non_empty:
            lines.append(" | ".join(non_empty))
    return "\n".join(lines)
