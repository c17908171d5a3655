"""
pages.py — Map selected paragraphs back to page numbers
=======================================================

The extractor gives us one PageRecord per page. A paragraph belongs to
the first page whose raw text contains the paragraph's first 100
characters. Matching on a prefix instead of the whole paragraph keeps
attribution working when a paragraph runs over a page break, or when
whitespace later in the paragraph differs from the page text.

A paragraph is attributed to at most one page. If the same text appears
on pages 3 and 9, only page 3 is reported.
"""

from dataclasses import dataclass

from docchat.config import PAGE_MATCH_CHARS


@dataclass(frozen=True)
class PageRecord:
    """Verbatim extracted text of a single page."""
    page_number: int
    text: str

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError(f"page_number must be positive, got {self.page_number}")

    def __repr__(self):
        preview = self.text[:40].replace('\n', ' ')
        return f"PageRecord(page={self.page_number}, chars={len(self.text)}, text={preview!r}...)"


def locate_pages(paragraphs: list[str], page_records: list[PageRecord],
                 prefix_chars: int = PAGE_MATCH_CHARS) -> list[int]:
    """Page numbers (ascending, unique) where the paragraphs were found."""
    found = set()
    for paragraph in paragraphs:
        probe = paragraph[:prefix_chars]
        if not probe:
            continue
        for record in page_records:
            if probe in record.text:
                found.add(record.page_number)
                break
    return sorted(found)
