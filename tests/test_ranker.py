"""Tests for the two-stage relevance ranker."""

from docchat.config import RetrievalConfig
from docchat.query import analyze
from docchat.ranker import RelevanceRanker, rank


PARAGRAPHS = [
    "Introduction to automation on the web.",
    "Everyone talks about bots. Bots, bots, bots keep growing.",
    "1. Bots: automated programs that perform tasks.",
    "2. Crawlers: bots that index pages.",
]


def test_rank_empty_paragraphs_returns_empty():
    assert rank([], "what are bots?") == []
    assert rank([], "") == []
    assert rank([], "summarize") == []


def test_rank_blank_question_returns_empty():
    assert rank(PARAGRAPHS, "") == []
    assert rank(PARAGRAPHS, "   ") == []


def test_heading_match_takes_precedence_over_scoring():
    """'bots' hits the numbered heading even though paragraph 2 scores higher."""
    assert rank(PARAGRAPHS, "bots") == ["1. Bots: automated programs that perform tasks."]


def test_heading_match_variants():
    ranker = RelevanceRanker()
    paragraphs = [
        "Crawlers: index pages.",
        "Overview\nCrawlers are discussed below.",
        "• crawlers: bullet entry",
        "* Crawlers\tstarred entry",
        "Webcrawlers: not a heading match.",
        "Crawlers",
    ]
    assert ranker.heading_matches(paragraphs, "  Crawlers ") == paragraphs[:4]


def test_heading_match_requires_whole_question():
    ranker = RelevanceRanker()
    assert ranker.heading_matches(["1. Bots: x"], "bot") == []
    assert ranker.heading_matches(["Bot traffic: x"], "bot traffic") == ["Bot traffic: x"]


def test_score_counts_occurrences_and_distinct_bonus():
    ranker = RelevanceRanker(RetrievalConfig(use_phrase_bonus=False))
    query = analyze("crawler index")
    # crawler x2, index x1, both distinct → 3 + 2*2
    assert ranker.score("Crawler and crawler use an INDEX.", query) == 7
    assert ranker.score("Nothing relevant.", query) == 0


def test_score_phrase_bonus():
    ranker = RelevanceRanker()
    query = analyze("search engine crawler")
    text = "A search engine crawler visits pages."
    # keywords: 3 hits + 3 distinct * 2 = 9
    # phrases: "search engine" 6, "engine crawler" 6, "search engine crawler" 9
    assert ranker.score(text, query) == 9 + 6 + 6 + 9


def test_stage_two_keeps_top_three_positive():
    paragraphs = [
        "alpha",
        "unrelated",
        "alpha alpha alpha",
        "alpha alpha",
        "alpha beta",
        "nothing",
    ]
    # alpha beta: 2 hits + 2*2 distinct + 6 phrase = 12
    # alpha alpha alpha: 3 + 2 = 5, alpha alpha: 2 + 2 = 4, alpha: 1 + 2 = 3
    result = rank(paragraphs, "alpha beta")
    assert result == ["alpha beta", "alpha alpha alpha", "alpha alpha"]


def test_stage_two_top_five_variant():
    config = RetrievalConfig(top_k_paragraphs=5, use_phrase_bonus=False)
    paragraphs = ["one gamma", "two gamma", "none", "three gamma",
                  "four gamma", "five gamma", "six gamma"]
    result = rank(paragraphs, "gamma", config)
    assert result == ["one gamma", "two gamma", "three gamma", "four gamma", "five gamma"]


def test_ties_keep_document_order():
    paragraphs = ["first delta", "other", "second delta", "third delta", "fourth delta"]
    assert rank(paragraphs, "delta") == ["first delta", "second delta", "third delta"]


def test_only_stopwords_falls_back_to_prefix():
    paragraphs = ["x" * 3000, "y" * 3000]
    result = rank(paragraphs, "what is the")
    assert len(result) == 1
    assert len(result[0]) == 5000
    assert result[0].startswith("x" * 3000 + "\n\n")


def test_no_positive_score_falls_back_to_prefix():
    paragraphs = ["short doc", "second bit"]
    assert rank(paragraphs, "zebra migration") == ["short doc\n\nsecond bit"]


def test_summary_request_returns_capped_prefix():
    paragraphs = ["a" * 6000, "b" * 6000]
    result = rank(paragraphs, "Please SUMMARIZE this document")
    assert len(result) == 1
    assert len(result[0]) == 8000


def test_summary_and_keyword_check_order():
    """A stopword-only summary trigger shows which shortcut runs first."""
    paragraphs = ["z" * 6000, "w" * 6000]
    summary_first = RetrievalConfig(summary_triggers=("tell me",))
    keywords_first = RetrievalConfig(summary_triggers=("tell me",),
                                     summary_before_keywords=False)
    assert len(rank(paragraphs, "tell me", summary_first)[0]) == 8000
    assert len(rank(paragraphs, "tell me", keywords_first)[0]) == 5000


def test_summary_with_keywords_in_either_order():
    paragraphs = ["z" * 6000, "w" * 6000]
    config = RetrievalConfig(summary_before_keywords=False)
    assert len(rank(paragraphs, "summary?")[0]) == 8000
    assert len(rank(paragraphs, "summary?", config)[0]) == 8000


def test_heading_marker_must_start_a_line():
    """Decimals and mid-sentence bullets are not heading markers."""
    paragraphs = [
        "Adoption of 5g networks is rising. Operators expand 5g networks and 5g networks.",
        "Legacy LTE and 4.5g networks were deployed in 2019.",
        "Rated 4 * 5g networks coverage in the survey.",
    ]
    ranker = RelevanceRanker()
    assert ranker.heading_matches(paragraphs, "5g networks") == []
    assert rank(paragraphs, "5g networks")[0] == paragraphs[0]


def test_heading_marker_on_later_line():
    paragraphs = ["Glossary\n3. Bots: automated programs.", "Version 2.bots: not a list"]
    assert RelevanceRanker().heading_matches(paragraphs, "bots") == [paragraphs[0]]


def test_prefix_fallback_slices_original_document():
    document = "first part\n\n\n\nsecond part"
    paragraphs = ["first part", "second part"]
    assert rank(paragraphs, "what is the", document=document) == [document]
    assert rank(paragraphs, "what is the") == ["first part\n\nsecond part"]
