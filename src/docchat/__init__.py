"""
docchat
=======
Chat with a PDF: find the passages that answer a question, tell the user
which pages they came from, and let an LLM (or a local fallback) phrase
the reply.

Modules:
  1. segmenter   — document text → paragraphs
  2. query       — question → keywords and phrases
  3. ranker      — heading match, then keyword/phrase scoring
  4. pages       — paragraphs → page numbers
  5. context     — runs 1-4 for one question, returns ContextResult
  6. generator   — remote LLM answers with a local fallback
  7. pdf_parser  — PDF → document text + page records
  8. ask         — interactive CLI

Usage:
  docchat-parse report.pdf               # show extracted pages
  docchat-ask report.pdf "what are bots?"
"""

from docchat.config import DEFAULT_CONFIG, RetrievalConfig
from docchat.context import ContextResult, assemble
from docchat.pages import PageRecord, locate_pages
from docchat.query import AnalyzedQuery, analyze
from docchat.ranker import RelevanceRanker, rank
from docchat.segmenter import segment

__all__ = [
    "DEFAULT_CONFIG",
    "RetrievalConfig",
    "ContextResult",
    "assemble",
    "PageRecord",
    "locate_pages",
    "AnalyzedQuery",
    "analyze",
    "RelevanceRanker",
    "rank",
    "segment",
]
