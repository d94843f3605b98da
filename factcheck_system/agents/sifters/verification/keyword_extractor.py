"""Keyword extraction from fact text for search and page matching.

Keeps the distinctive tokens of a claim: numbers (prices, postcodes, years),
proper nouns and domain terms. Currency symbols and number punctuation
(. , -) stay attached to their tokens so "£8.10" and "1-2" survive intact;
a trailing full stop or comma is dropped.

Fewer than MIN_KEYWORDS keywords is a hard gate for callers: a search built
from 0-1 keywords is indistinguishable from noise.
"""

import re
from typing import Iterable

MIN_KEYWORDS = 2

STOPWORDS: frozenset[str] = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "can", "shall", "to", "of", "in", "for",
    "on", "with", "at", "by", "from", "as", "into", "through", "during",
    "before", "after", "above", "below", "between", "out", "off", "over",
    "under", "again", "further", "then", "once", "here", "there", "when",
    "where", "why", "how", "all", "each", "every", "both", "few", "more",
    "most", "other", "some", "such", "no", "nor", "not", "only", "own",
    "same", "so", "than", "too", "very", "and", "but", "or", "if", "it",
    "its", "this", "that", "these", "those", "i", "you", "he", "she", "we",
    "they", "me", "him", "her", "us", "them", "my", "your", "his",
    "per", "up", "also", "just", "about", "which", "who", "whom",
})

# Anything that is not a word character, whitespace, or number/currency punctuation
_NON_TOKEN = re.compile(r"[^\w\s£$€.,-]")
_DIGIT = re.compile(r"\d")


def extract_keywords(fact_text: str, extra_stopwords: Iterable[str] = ()) -> list[str]:
    """
    Extract distinct salient tokens from a fact, in first-seen order.

    Args:
        fact_text: Claim text
        extra_stopwords: Additional words to drop (e.g. the destination name,
            which appears on nearly every candidate page)

    Returns:
        Keywords with original case, de-duplicated case-insensitively
    """
    stopwords = STOPWORDS | {word.lower() for word in extra_stopwords}

    seen: set[str] = set()
    keywords: list[str] = []
    for raw in _NON_TOKEN.sub(" ", fact_text).split():
        # Sentence punctuation; inner "." and "," in numbers are kept
        token = raw.rstrip(".,")
        if len(token) < 2:
            continue
        lower = token.lower()
        if lower in stopwords:
            continue
        # Short tokens only survive when numeric (e.g. "E1", "£8")
        if len(token) < 3 and not _DIGIT.search(token):
            continue
        if lower in seen:
            continue
        seen.add(lower)
        keywords.append(token)

    return keywords


def has_enough_keywords(keywords: list[str]) -> bool:
    """True when there are enough keywords to build a meaningful search."""
    return len(keywords) >= MIN_KEYWORDS
