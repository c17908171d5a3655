"""
segmenter.py — Split document text into paragraphs
==================================================

A paragraph is whatever sits between blank lines. No size limits, no
merging, no sentence splitting: the ranker scores whole paragraphs and
the page locator matches them back to pages by prefix, so they must stay
verbatim slices of the source text (modulo trimming).
"""

import re


_PARAGRAPH_BREAK_RE = re.compile(r'\n{2,}')


def segment(text: str) -> list[str]:
    """Split on runs of two or more newlines, trim, drop empty pieces."""
    if not text:
        return []
    pieces = _PARAGRAPH_BREAK_RE.split(text)
    return [p.strip() for p in pieces if p.strip()]
