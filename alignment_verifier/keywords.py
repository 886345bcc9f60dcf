"""Keyword extraction from free-text task summaries."""

import re

STOP_WORDS = frozenset(
    {
        "the",
        "and",
        "or",
        "for",
        "with",
        "that",
        "this",
        "can",
        "you",
        "ask",
        "way",
        "called",
        "on",
        "in",
        "to",
        "a",
        "an",
    }
)

MIN_KEYWORD_LENGTH = 3
MAX_KEYWORDS = 8

_SEPARATORS = re.compile(r"[\s,.'\"()]+")


def extract_keywords(summary: str | None) -> list[str]:
    """Extract salient search terms from a task summary.

    Tokens are lowercased, split on whitespace and ``, . ' " ( )``, filtered
    by length and stop words, deduplicated in order of first appearance and
    truncated to the first eight.

    Args:
        summary: Task summary text. None is treated as empty.

    Returns:
        Ordered list of at most eight keywords. Empty for empty or
        punctuation-only summaries.

    Example:
        >>> extract_keywords("Fix the login bug (SSO login)")
        ['fix', 'login', 'bug', 'sso']
    """
    keywords: list[str] = []
    for token in _SEPARATORS.split((summary or "").lower()):
        if len(token) < MIN_KEYWORD_LENGTH or token in STOP_WORDS:
            continue
        if token in keywords:
            continue
        keywords.append(token)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords
