"""Tests for decoding uploaded documents into analysis requests."""
import io

import docx
import fitz
import pytest

from app.services.document_analyzer import ContentKind
from app.services.document_parser import DocumentParser, _format_table_rows


def _create_pdf(*pages: str) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _create_docx_with_table() -> bytes:
    document = docx.Document()
    document.add_paragraph("Schedule of payments")
    document.add_paragraph("")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Month"
    table.cell(0, 1).text = "Amount"
    table.cell(1, 0).text = "January"
    table.cell(1, 1).text = "15000"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_parse_text_file():
    parsed = await DocumentParser().parse_upload("notice.TXT", "Fin de bail — café".encode("utf-8"))
    assert parsed.text == "Fin de bail — café"
    assert parsed.kind == ContentKind.TEXT
    assert parsed.metadata["file_type"] == "txt"
    assert parsed.metadata["word_count"] == 5


@pytest.mark.asyncio
async def test_parse_text_file_invalid_utf8():
    parsed = await DocumentParser().parse_upload("a.txt", b"ok \xff\xfe")
    assert parsed.text.startswith("ok ")


@pytest.mark.asyncio
async def test_parse_pdf():
    parsed = await DocumentParser().parse_upload(
        "deed.pdf", _create_pdf("Sale deed page one", "", "Page three")
    )
    assert "Sale deed page one" in parsed.text
    assert "Page three" in parsed.text
    assert parsed.metadata["page_count"] == 3
    assert parsed.metadata["ocr_pages"] == 0


@pytest.mark.asyncio
async def test_parse_docx_with_table():
    parsed = await DocumentParser().parse_upload("terms.docx", _create_docx_with_table())
    assert parsed.text.startswith("Schedule of payments")
    assert "Month | Amount" in parsed.text
    assert "January | 15000" in parsed.text
    assert parsed.metadata["table_count"] == 1


@pytest.mark.asyncio
async def test_parse_unsupported_type():
    with pytest.raises(ValueError):
        await DocumentParser().parse_upload("slides.pptx", b"data")


@pytest.mark.asyncio
async def test_parse_corrupt_image():
    with pytest.raises(RuntimeError):
        await DocumentParser().parse_upload("scan.png", b"definitely not a png")


@pytest.mark.asyncio
async def test_parse_corrupt_docx():
    with pytest.raises(RuntimeError):
        await DocumentParser().parse_upload("letter.docx", b"not a zip archive")


def test_to_request_keeps_kind():
    from app.services.document_parser import ParsedDocument

    request = ParsedDocument(text="ocr text", kind=ContentKind.IMAGE).to_request()
    assert request.text == "ocr text"
    assert request.kind == ContentKind.IMAGE


def test_format_table_rows_skips_blank_rows():
    rows = [["a", None, "b"], ["", "  "], ["c"]]
    assert _format_table_rows(rows) == "a | b\nc"
