"""
context.py — Question + document in, grounding context out
==========================================================

Runs the whole retrieval core for one question against one document:

  text ──segment──▶ paragraphs ──rank──▶ selected ──┬──▶ context string
                                                    └──▶ page numbers

Three possible outcomes, all normal:
  - blank document       → ContextResult("", [])
  - ranker found nothing → the NO_MATCH sentence, no pages
  - otherwise            → selected paragraphs joined by a blank line

Consumers need to tell the first two apart ("upload something" vs
"ask something else"), hence is_empty / is_no_match.

Usage:
  from docchat.context import assemble
  result = assemble("what are bots?", doc.text, doc.pages)
  result.context, result.pages
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from docchat.config import DEFAULT_CONFIG, RetrievalConfig
from docchat.pages import PageRecord, locate_pages
from docchat.ranker import RelevanceRanker
from docchat.segmenter import segment

logger = logging.getLogger("docchat.context")

NO_MATCH_TEMPLATE = 'No specific information found about "{question}" in the document.'


@dataclass
class ContextResult:
    """Grounding text for the answer generator plus the pages it came from."""
    context: str
    pages: list[int] = field(default_factory=list)
    question: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.context.strip()

    @property
    def is_no_match(self) -> bool:
        return self.context == NO_MATCH_TEMPLATE.format(question=self.question)

    def __repr__(self):
        preview = self.context[:60].replace('\n', ' ')
        return f"ContextResult(chars={len(self.context)}, pages={self.pages}, context={preview!r}...)"


def assemble(question: str, text: str, page_records: Sequence[PageRecord] = (),
             config: RetrievalConfig = DEFAULT_CONFIG) -> ContextResult:
    if not text or not text.strip():
        return ContextResult(context="", pages=[], question=question)

    paragraphs = segment(text)
    selected = RelevanceRanker(config).rank(paragraphs, question, document=text)

    if not selected:
        logger.debug("No paragraphs selected for %r", question)
        return ContextResult(
            context=NO_MATCH_TEMPLATE.format(question=question),
            pages=[],
            question=question,
        )

    pages = locate_pages(selected, list(page_records), config.page_match_chars)
    logger.debug("Selected %d of %d paragraphs, pages %s",
                 len(selected), len(paragraphs), pages)
    return ContextResult(context='\n\n'.join(selected), pages=pages, question=question)
