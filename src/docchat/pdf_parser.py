"""
pdf_parser.py — Extract page text from an uploaded PDF
======================================================

The retrieval core only ever sees two things: the document text and one
PageRecord per page. This module produces both.

Why text blocks instead of plain page text:
  page.get_text("text") returns one line per visual line, so a whole page
  comes back with no blank lines and the segmenter would treat it as a
  single paragraph. PyMuPDF's blocks are the layout paragraphs, and
  joining them with a blank line gives the segmenter real paragraphs to
  work with.

Cleaning (per page, before anything else sees the text):
  - running headers/footers ("Page 3", "3 of 12", bare numbers)
  - ligatures and curly quotes
  - hyphenated line breaks: "algo-\\nrithm" → "algorithm"

The page text stored in each PageRecord is exactly what went into the
document text, so the page locator's substring match works.

Usage:
  docchat-parse report.pdf
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

import fitz  # PyMuPDF

from docchat.pages import PageRecord

logger = logging.getLogger("docchat.pdf_parser")


# ==================== DATA STRUCTURES ====================

@dataclass
class ExtractedDocument:
    """Everything the chat needs from one uploaded file."""
    filename: str
    title: str
    total_pages: int
    text: str
    pages: list[PageRecord] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    def __repr__(self):
        return f"ExtractedDocument(filename={self.filename!r}, pages={self.total_pages}, chars={len(self.text)})"


# ==================== CLEANING ====================

HEADER_FOOTER_PATTERNS = [
    r'^[\d]+$',                 # bare page numbers
    r'^page\s+\d+',             # "Page 3"
    r'^\d+\s+of\s+\d+',         # "3 of 12"
    r'^(confidential|draft)\s*$',
]
_header_footer_re = [re.compile(p, re.IGNORECASE) for p in HEADER_FOOTER_PATTERNS]


def _is_header_footer(line: str) -> bool:
    """Detect if a block is likely a page header or footer."""
    line = line.strip()
    if not line or len(line) > 150 or '\n' in line:
        return False
    return any(p.match(line) for p in _header_footer_re)


_REPLACEMENTS = {
    'ﬁ': 'fi', 'ﬂ': 'fl', 'ﬀ': 'ff', 'ﬃ': 'ffi', 'ﬄ': 'ffl',
    '’': "'", '‘': "'", '“': '"', '”': '"',
    '–': '-', '—': '--',
}


def _clean_text(text: str) -> str:
    """Fix common PDF extraction artifacts inside one block."""
    text = re.sub(r'(\w)-\n(\w)', r'\1\2', text)
    for old, new in _REPLACEMENTS.items():
        text = text.replace(old, new)
    # a block never contains a paragraph break of its own
    text = re.sub(r'\n{2,}', '\n', text)
    return text.strip()


def _page_text(page) -> str:
    blocks = [b for b in page.get_text("blocks") if b[6] == 0]
    kept = []
    for i, block in enumerate(blocks):
        text = block[4]
        if (i < 2 or i >= len(blocks) - 2) and _is_header_footer(text):
            continue
        text = _clean_text(text)
        if text:
            kept.append(text)
    return '\n\n'.join(kept)


# ==================== MAIN PARSER ====================

def parse_pdf(filepath: str | Path) -> ExtractedDocument:
    """
    Extract cleaned text page by page.

    Pages that yield no text (scans, blank pages) still get a PageRecord
    so page numbers stay aligned with the PDF.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"PDF not found: {filepath}")

    with fitz.open(str(filepath)) as doc:
        pages = [
            PageRecord(page_number=i + 1, text=_page_text(page))
            for i, page in enumerate(doc)
        ]
        pdf_meta = doc.metadata or {}

    text = '\n\n'.join(p.text for p in pages if p.text).strip()

    title = pdf_meta.get("title") or ""
    if not title:
        for line in text.split('\n'):
            line = line.strip()
            if len(line) > 10 and not line[0].isdigit():
                title = line
                break

    empty = [p.page_number for p in pages if not p.text]
    if empty:
        logger.info("%s: no text on page(s) %s", filepath.name, empty)

    return ExtractedDocument(
        filename=filepath.name,
        title=title,
        total_pages=len(pages),
        text=text,
        pages=pages,
        metadata={
            "author": pdf_meta.get("author") or "",
            "subject": pdf_meta.get("subject") or "",
            "creator": pdf_meta.get("creator") or "",
        },
    )


# ==================== CLI ====================

def print_structure(doc: ExtractedDocument):
    """Print a page-by-page overview."""
    print(f"Document: {doc.title}")
    print(f"File: {doc.filename} ({doc.total_pages} pages)")
    print(f"Total chars: {len(doc.text):,}")
    for key, value in doc.metadata.items():
        if value:
            print(f"{key.title()}: {value}")
    print()
    for page in doc.pages:
        paragraphs = page.text.count('\n\n') + 1 if page.text else 0
        preview = page.text[:60].replace('\n', ' ')
        print(f"  p.{page.page_number:<4} {len(page.text):>6,} chars  {paragraphs:>3} paras  {preview!r}")


def main():
    """Entry point for `docchat-parse <file.pdf>`"""
    if len(sys.argv) < 2:
        print("Usage: docchat-parse <file.pdf>")
        sys.exit(1)
    try:
        doc = parse_pdf(sys.argv[1])
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print_structure(doc)
