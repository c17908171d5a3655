"""Tests for PDF extraction into document text + page records."""

import fitz
import pytest

from docchat.context import assemble
from docchat.pdf_parser import _clean_text, _is_header_footer, parse_pdf


def _make_pdf(path, pages):
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path


def test_clean_text_fixes_ligatures_and_hyphens():
    assert _clean_text("ﬁrst algo-\nrithm “quoted”") == 'first algorithm "quoted"'


def test_header_footer_detection():
    assert _is_header_footer("Page 3")
    assert _is_header_footer("12")
    assert _is_header_footer("3 of 12")
    assert not _is_header_footer("Bots: a bot is a program")


def test_parse_pdf_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_pdf(tmp_path / "missing.pdf")


def test_parse_pdf_builds_page_records(tmp_path):
    pdf = _make_pdf(tmp_path / "doc.pdf", [
        "Intro text about the report.",
        "",
        "Bots: a bot is a program.",
    ])
    doc = parse_pdf(pdf)

    assert doc.filename == "doc.pdf"
    assert doc.total_pages == 3
    assert [p.page_number for p in doc.pages] == [1, 2, 3]
    assert "Intro text about the report." in doc.pages[0].text
    assert doc.pages[1].text == ""
    assert "Bots: a bot is a program." in doc.pages[2].text
    assert doc.text.startswith("Intro text about the report.")


def test_parsed_pdf_feeds_retrieval(tmp_path):
    pdf = _make_pdf(tmp_path / "doc.pdf", [
        "Intro text about the report.",
        "Bots: a bot is a program.",
    ])
    doc = parse_pdf(pdf)
    result = assemble("bots", doc.text, doc.pages)
    assert result.context == "Bots: a bot is a program."
    assert result.pages == [2]


def test_print_structure_shows_metadata(capsys):
    from docchat.pages import PageRecord
    from docchat.pdf_parser import ExtractedDocument, print_structure

    doc = ExtractedDocument(
        filename="doc.pdf", title="Report", total_pages=1, text="Intro.",
        pages=[PageRecord(1, "Intro.")],
        metadata={"author": "Jane Roe", "subject": "", "creator": ""},
    )
    print_structure(doc)
    out = capsys.readouterr().out
    assert "Author: Jane Roe" in out
    assert "Subject:" not in out
