"""
ranker.py — Pick the paragraphs that answer a question
======================================================

Two stages, strictly in order. Stage 2 only runs when stage 1 finds nothing.

Stage 1 — heading match:
  Documents are full of little definition lists:

    1. Bots: automated programs that ...
    2. Crawlers: ...

  Someone asking "bots" wants exactly that entry, not the paragraph that
  mentions "bots" nine times in passing. So the whole question (lowercased,
  trimmed) is looked for in heading position: paragraph start, line start,
  after "<n>." or after a bullet, followed by ":" or whitespace. Every
  paragraph that matches is returned, in document order. No scores.

Stage 2 — keyword scoring:
  - "summarize ..." / "... summary" → first 8,000 chars of the document
  - no keywords at all ("what is the") → first 5,000 chars
  - otherwise, per paragraph:
      + occurrences of each keyword (case-insensitive)
      + 2 × number of distinct keywords present   (breadth beats repetition)
      + 3 × words in each phrase found verbatim     (if phrase bonus is on)
    stable sort, keep the top 3 with score > 0
  - nothing scored → first 5,000 chars again

Usage:
  from docchat.ranker import RelevanceRanker
  ranker = RelevanceRanker()
  best = ranker.rank(paragraphs, "what are bots?")
"""

import logging
import re
from dataclasses import dataclass

from docchat.config import DEFAULT_CONFIG, RetrievalConfig
from docchat.query import AnalyzedQuery, analyze

logger = logging.getLogger("docchat.ranker")


@dataclass
class ScoredParagraph:
    paragraph: str
    score: int = 0


def _heading_pattern(needle: str) -> re.Pattern:
    """Question text in heading position, followed by ':' or whitespace."""
    return re.compile(
        r'(?:^|\n)\s*(?:\d+\.|[•*])?\s*' + re.escape(needle) + r'(?=[:\s])'
    )


class RelevanceRanker:
    """
    Stateless two-stage ranker. Holds nothing but its config, so one
    instance can serve any number of documents and questions.
    """

    def __init__(self, config: RetrievalConfig = DEFAULT_CONFIG):
        self.config = config

    # ---------- stage 1 ----------

    def heading_matches(self, paragraphs: list[str], question: str) -> list[str]:
        needle = question.lower().strip()
        if not needle:
            return []
        pattern = _heading_pattern(needle)
        return [p for p in paragraphs if pattern.search(p.lower())]

    # ---------- stage 2 ----------

    def score(self, paragraph: str, query: AnalyzedQuery) -> int:
        text = paragraph.lower()
        score = 0
        distinct = 0

        for keyword in query.keywords:
            hits = len(re.findall(re.escape(keyword), text))
            score += hits
            if hits:
                distinct += 1
        score += distinct * self.config.keyword_overlap_bonus

        if self.config.use_phrase_bonus:
            for phrase in query.phrases:
                if phrase in text:
                    score += self.config.phrase_word_bonus * len(phrase.split())

        return score

    def _prefix(self, paragraphs: list[str], document: str | None, limit: int) -> list[str]:
        if document is None:
            document = '\n\n'.join(paragraphs)
        return [document[:limit]]

    def rank(self, paragraphs: list[str], question: str,
             document: str | None = None) -> list[str]:
        """
        Most relevant paragraphs first.

        document is the text the paragraphs were cut from. Prefix fallbacks
        slice it directly; without it they slice the re-joined paragraphs.

        Returns [] only for an empty paragraph list or a blank question.
        Every other miss degrades to a document prefix.
        """
        if not paragraphs or not question.strip():
            return []

        matched = self.heading_matches(paragraphs, question)
        if matched:
            logger.debug("Heading match: %d paragraph(s) for %r", len(matched), question)
            return matched

        cfg = self.config
        query = analyze(question, cfg)
        is_summary = cfg.is_summary_request(question)

        if cfg.summary_before_keywords and is_summary:
            logger.debug("Summary request, returning first %d chars", cfg.summary_fallback_chars)
            return self._prefix(paragraphs, document, cfg.summary_fallback_chars)
        if not query.keywords:
            logger.debug("No keywords in %r, returning document prefix", question)
            return self._prefix(paragraphs, document, cfg.prefix_fallback_chars)
        if not cfg.summary_before_keywords and is_summary:
            logger.debug("Summary request, returning first %d chars", cfg.summary_fallback_chars)
            return self._prefix(paragraphs, document, cfg.summary_fallback_chars)

        scored = [ScoredParagraph(p, self.score(p, query)) for p in paragraphs]
        # sorted() is stable, so equal scores keep document order
        scored = sorted(scored, key=lambda s: s.score, reverse=True)
        top = [s.paragraph for s in scored[:cfg.top_k_paragraphs] if s.score > 0]

        logger.debug("Scored %d paragraphs, kept %d", len(scored), len(top))
        if not top:
            return self._prefix(paragraphs, document, cfg.prefix_fallback_chars)
        return top


def rank(paragraphs: list[str], question: str,
         config: RetrievalConfig = DEFAULT_CONFIG,
         document: str | None = None) -> list[str]:
    """Functional shortcut for RelevanceRanker(config).rank(...)."""
    return RelevanceRanker(config).rank(paragraphs, question, document)
