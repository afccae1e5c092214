"""
Deduplication helpers for resolved sources.
"""

from typing import Dict, List

from claimcards.core.schemas import SourceDetails
from claimcards.services.common.text_cleaner import normalize_text


def source_key(source: SourceDetails) -> str:
    """DOI when present, otherwise the normalized lowercased title."""
    if source.doi:
        return f"doi:{source.doi.strip().lower()}"
    return f"title:{normalize_text(source.title).lower()}"


def dedupe_sources(sources: List[SourceDetails]) -> List[SourceDetails]:
    """
    Deduplicate sources by DOI, then by title, keeping the first occurrence.

    A later duplicate only fills in an abstract the kept copy is missing.

    Args:
        sources: Sources in priority order

    Returns:
        Deduplicated sources, order preserved
    """
    seen: Dict[str, int] = {}
    unique: List[SourceDetails] = []

    for source in sources:
        key = source_key(source)
        if key not in seen:
            seen[key] = len(unique)
            unique.append(source)
            continue

        kept = unique[seen[key]]
        if not kept.abstract and source.abstract:
            unique[seen[key]] = kept.model_copy(update={"abstract": source.abstract})

    return unique
