"""
query.py — Turn a chat question into keywords and phrases
=========================================================

  "How is bot traffic detected by the firewall?"
    tokens   → how, is, bot, traffic, detected, by, the, firewall
    keywords → bot, traffic, detected, firewall
    phrases  → "bot traffic", "traffic detected", "bot traffic detected"

Phrases are windows over the ORIGINAL token sequence, so "detected
firewall" is never produced: "by the" sits between them, and a window is
dropped as soon as one of its tokens is a stopword. Short tokens that are
not stopwords ("of", "ai") never become keywords but can still sit inside
a phrase.

Usage:
  from docchat.query import analyze
  q = analyze("tell me about neural networks")
  q.keywords   # frozenset({'neural', 'networks'})
  q.phrases    # frozenset({'neural networks'})
"""

import logging
import re
from dataclasses import dataclass

from docchat.config import DEFAULT_CONFIG, RetrievalConfig

logger = logging.getLogger("docchat.query")

_NON_WORD_RE = re.compile(r'[^\w\s]')


@dataclass(frozen=True)
class AnalyzedQuery:
    """Keywords and multi-word phrases extracted from one question."""
    keywords: frozenset
    phrases: frozenset

    @property
    def terms(self) -> frozenset:
        return self.keywords | self.phrases

    def __bool__(self):
        return bool(self.keywords)


def tokenize(question: str) -> list[str]:
    """Lowercase, drop punctuation, split on whitespace."""
    return _NON_WORD_RE.sub('', question.lower()).split()


def analyze(question: str, config: RetrievalConfig = DEFAULT_CONFIG) -> AnalyzedQuery:
    tokens = tokenize(question)
    stopwords = config.stopwords

    keywords = {
        t for t in tokens
        if len(t) >= config.min_keyword_length and t not in stopwords
    }

    phrases = set()
    for size in (2, 3):
        for i in range(len(tokens) - size + 1):
            window = tokens[i:i + size]
            if not any(t in stopwords for t in window):
                phrases.add(' '.join(window))

    logger.debug("Query %r → keywords=%s phrases=%s",
                 question, sorted(keywords), sorted(phrases))
    return AnalyzedQuery(keywords=frozenset(keywords), phrases=frozenset(phrases))
