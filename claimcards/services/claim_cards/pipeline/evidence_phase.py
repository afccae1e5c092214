"""
Evidence Phase: grade each selected source against a claim.

With a judge, every source is classified concurrently. Without one, sources
are mapped heuristically as `mixed` with their lexical relevance as score,
which keeps the pipeline runnable without an LLM; such cards can only end up
`mixed` or `insufficient`.
"""

from typing import List, Optional, Sequence

from claimcards.constants.config import HEURISTIC_RATIONALE, PIPELINE_JUDGE_CONCURRENCY
from claimcards.core.logger import get_logger
from claimcards.core.schemas import EvidenceItem, EvidenceLocator, SourceDetails
from claimcards.services.claim_cards.interfaces import Judge
from claimcards.services.common.concurrency import map_with_concurrency
from claimcards.services.common.text_cleaner import best_snippet
from claimcards.services.ranking.relevance import RankedSource

logger = get_logger(__name__)


def heuristic_evidence_item(ranked: RankedSource) -> EvidenceItem:
    source = ranked.source
    return EvidenceItem(
        source=source,
        polarity="mixed",
        excerpt=best_snippet(source.abstract),
        rationale=HEURISTIC_RATIONALE,
        score=ranked.relevance,
        locator=EvidenceLocator(url=source.url),
    )


async def judge_evidence(
    claim: str,
    sources: Sequence[SourceDetails],
    judge: Judge,
    concurrency: int = PIPELINE_JUDGE_CONCURRENCY,
) -> List[EvidenceItem]:
    """
    Send every source to the judge with bounded concurrency.

    A judge call that raises drops that source (no retry). Surviving items keep
    the input rank order.
    """

    async def _judge_one(source: SourceDetails, idx: int) -> Optional[EvidenceItem]:
        try:
            result = await judge.judge(claim, source)
        except Exception as e:
            logger.warning(f"[EvidencePhase] Judge '{judge.name}' failed on source #{idx} '{source.title}': {e}")
            return None
        return EvidenceItem(
            source=source,
            polarity=result.polarity,
            excerpt=best_snippet(source.abstract),
            rationale=result.rationale,
            score=result.score,
            locator=EvidenceLocator(url=source.url),
        )

    judged = await map_with_concurrency(list(sources), concurrency, _judge_one)
    return [e for e in judged if e is not None]


async def map_evidence(
    claim: str,
    ranked: Sequence[RankedSource],
    judge: Optional[Judge] = None,
    use_judge: bool = False,
    concurrency: int = PIPELINE_JUDGE_CONCURRENCY,
) -> List[EvidenceItem]:
    if use_judge:
        if judge is None:
            raise ValueError("use_judge=True requires a judge")
        return await judge_evidence(claim, [r.source for r in ranked], judge, concurrency=concurrency)
    return [heuristic_evidence_item(r) for r in ranked]
