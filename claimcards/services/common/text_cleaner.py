"""
Text cleaning and normalization utilities for relevance scoring, prompts and excerpts.
"""

import re
from typing import List, Optional

from claimcards.constants.config import EVIDENCE_EXCERPT_MAX_CHARS, RELEVANCE_MIN_TOKEN_LENGTH

# ASCII word characters only, so tokenization doesn't depend on locale
_NON_WORD_RE = re.compile(r"\W+", re.ASCII)


def normalize_text(text: str) -> str:
    """
    Collapse internal whitespace and strip the ends.

    Args:
        text: Raw text to normalize

    Returns:
        Normalized text (stripped, single spaces)
    """
    if not isinstance(text, str):
        return ""
    return re.sub(r"\s+", " ", text).strip()


def tokenize(text: str, min_length: int = RELEVANCE_MIN_TOKEN_LENGTH) -> List[str]:
    """
    Lowercase and split on non-word runs, dropping tokens shorter than `min_length`.
    Duplicates are kept.
    """
    if not text:
        return []
    return [t for t in _NON_WORD_RE.split(text.lower()) if t and len(t) >= min_length]


def truncate_with_ellipsis(text: str, max_length: int) -> str:
    """Hard cut at `max_length` characters, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "…"


def best_snippet(abstract: Optional[str], max_length: int = EVIDENCE_EXCERPT_MAX_CHARS) -> Optional[str]:
    """Excerpt of a source abstract for an evidence item, or None when there is no abstract."""
    text = (abstract or "").strip()
    if not text:
        return None
    return truncate_with_ellipsis(text, max_length)


def remove_html_tags(text: str) -> str:
    """
    Remove HTML/JATS tags from text (Crossref abstracts arrive as JATS XML).

    Args:
        text: Text potentially containing markup

    Returns:
        Text with tags removed and whitespace collapsed
    """
    if not text:
        return ""
    text = re.sub(r"<[^>]+>", " ", text)
    text = text.replace("&amp;", "&").replace("&lt;", "<").replace("&gt;", ">")
    text = text.replace("&quot;", '"').replace("&#39;", "'")
    return normalize_text(text)
