"""
config.py — Retrieval tuning knobs in one place
===============================================

Every number the ranker uses lives here, named. The analyzer, ranker and
assembler all take a RetrievalConfig, so a different trade-off is just a
different instance:

  DEFAULT_CONFIG                       # 3 paragraphs, phrase bonus on
  RetrievalConfig(top_k_paragraphs=5,  # wider context, plain keyword
                  use_phrase_bonus=False)  # scoring

The summarization shortcut and the "no keywords" shortcut are both prefix
returns. DEFAULT_CONFIG checks for a summary request first, so
"summarize" always gets the larger window. Set summary_before_keywords=False
to test the keyword count first instead.
"""

from dataclasses import dataclass


MIN_KEYWORD_LENGTH = 3          # "ai" and "of" never become keywords
KEYWORD_OVERLAP_BONUS = 2       # per distinct keyword present in a paragraph
PHRASE_WORD_BONUS = 3           # per word of a phrase found verbatim
TOP_K_PARAGRAPHS = 3
PREFIX_FALLBACK_CHARS = 5000
SUMMARY_FALLBACK_CHARS = 8000
PAGE_MATCH_CHARS = 100          # paragraph prefix used to find its page


STOPWORDS = frozenset({
    # question words
    "what", "when", "where", "which", "who", "whom", "whose", "why", "how",
    # auxiliaries and modals
    "does", "did", "do", "is", "are", "was", "were", "am", "be", "being", "been",
    "can", "could", "will", "would", "shall", "should", "may", "might", "must",
    # prepositions and conjunctions
    "about", "with", "for", "to", "from", "in", "on", "at", "by", "and", "or",
    # determiners
    "the", "a", "an", "this", "that", "these", "those",
    # request verbs
    "tell", "explain", "describe", "provide", "give", "me", "please",
    "information", "details", "regarding",
})


@dataclass(frozen=True)
class RetrievalConfig:
    """Immutable settings shared by the query analyzer, ranker and assembler."""
    stopwords: frozenset = STOPWORDS
    min_keyword_length: int = MIN_KEYWORD_LENGTH
    keyword_overlap_bonus: int = KEYWORD_OVERLAP_BONUS
    phrase_word_bonus: int = PHRASE_WORD_BONUS
    use_phrase_bonus: bool = True
    top_k_paragraphs: int = TOP_K_PARAGRAPHS
    prefix_fallback_chars: int = PREFIX_FALLBACK_CHARS
    summary_fallback_chars: int = SUMMARY_FALLBACK_CHARS
    page_match_chars: int = PAGE_MATCH_CHARS
    summary_triggers: tuple[str, ...] = ("summarize", "summary")
    summary_before_keywords: bool = True

    def __post_init__(self):
        if self.top_k_paragraphs < 1:
            raise ValueError("top_k_paragraphs must be at least 1")
        if self.min_keyword_length < 1:
            raise ValueError("min_keyword_length must be at least 1")
        if self.prefix_fallback_chars < 1 or self.summary_fallback_chars < 1:
            raise ValueError("fallback windows must be positive")
        if self.page_match_chars < 1:
            raise ValueError("page_match_chars must be positive")

    def is_summary_request(self, question: str) -> bool:
        question = question.lower()
        return any(trigger in question for trigger in self.summary_triggers)


DEFAULT_CONFIG = RetrievalConfig()
