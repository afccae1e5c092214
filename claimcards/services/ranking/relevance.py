"""
Lexical relevance scoring and evidence candidate selection.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from claimcards.constants.config import (
    ANCHOR_BOOST,
    PIPELINE_EVIDENCE_TOP_K,
    RELEVANCE_DENOMINATOR_FACTOR,
    RELEVANCE_MIN_DENOMINATOR,
)
from claimcards.core.schemas import SourceDetails
from claimcards.services.common.text_cleaner import tokenize


@dataclass
class RankedSource:
    source: SourceDetails
    relevance: float  # raw lexical score
    score: float  # after anchor boost


def basic_relevance_score(claim: str, source: SourceDetails) -> float:
    """
    Share of claim tokens found in the source's title + abstract, in [0, 1].

    The denominator is max(8, floor(0.75 * tokens)): a floor so a short claim
    can't score 1.0 on one shared word, sub-linear so long claims aren't
    punished for every unmatched token.
    """
    tokens = tokenize(claim)
    if not tokens:
        return 0.0

    text = f"{source.title} {source.abstract or ''}".lower()
    hits = sum(1 for t in tokens if t in text)
    denom = max(RELEVANCE_MIN_DENOMINATOR, int(len(tokens) * RELEVANCE_DENOMINATOR_FACTOR))
    return min(1.0, hits / denom)


def _anchor_hit(title: str, anchors: List[str]) -> bool:
    low = title.lower()
    return any(a and a in low for a in anchors)


def rank_sources(
    claim: str,
    sources: Iterable[SourceDetails],
    anchors: Optional[List[str]] = None,
    top_k: int = PIPELINE_EVIDENCE_TOP_K,
) -> List[RankedSource]:
    """
    Rank every source against the claim and keep the top `top_k`.

    Sources whose title contains one of the anchors get +ANCHOR_BOOST (capped
    at 1.0) before the cut. Anchors only reorder; nothing is filtered out.
    Ties keep input order.
    """
    ranked = [RankedSource(source=s, relevance=basic_relevance_score(claim, s), score=0.0) for s in sources]
    ranked.sort(key=lambda r: r.relevance, reverse=True)

    lowered = [a.lower() for a in (anchors or []) if a]
    for r in ranked:
        boost = ANCHOR_BOOST if lowered and _anchor_hit(r.source.title, lowered) else 0.0
        r.score = min(1.0, r.relevance + boost)

    if lowered:
        ranked.sort(key=lambda r: r.score, reverse=True)

    return ranked[: max(0, int(top_k))]
