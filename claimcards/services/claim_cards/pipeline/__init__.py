"""
Claim Card Pipeline: main orchestrator.

Turns a parent item + its linked sources into auditable claim cards:
    1. Resolution: linked refs -> SourceDetails (bounded concurrency, best-effort)
    2. Extraction: one extractor call over the synthesis corpus
    3. Per claim, in extraction order:
       a. Rank every resolved source by lexical relevance (+ anchor boost)
       b. Judge the top-K (or map them heuristically)
       c. Aggregate verdict + confidence
       d. Assemble the card with full provenance
       e. Persist the card (optional)
    4. Bulk persist (optional, skipped when no cards were built)

Refresh reruns 1 and 3 for an existing card's claim without re-extracting.
Each phase settles completely before the next starts.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from claimcards.constants.config import (
    GENERATED_BY,
    PIPELINE_EVIDENCE_TOP_K,
    PIPELINE_JUDGE_CONCURRENCY,
    PIPELINE_MAX_CLAIMS,
    PIPELINE_MAX_SOURCES_FOR_SYNTHESIS,
    PIPELINE_MAX_SOURCES_TO_RESOLVE,
    PIPELINE_RESOLUTION_CONCURRENCY,
)
from claimcards.core.logger import get_logger
from claimcards.core.schemas import (
    ClaimCard,
    DatasetCounters,
    ExtractedClaim,
    ItemSnapshot,
    LinkedSourceRef,
    ParentItemMeta,
    Provenance,
    SourceDetails,
    timestamp_after,
    utc_now_iso,
)
from claimcards.services.claim_cards.interfaces import Extractor, Judge, Resolver, StorageAdapter
from claimcards.services.claim_cards.pipeline.evidence_phase import map_evidence
from claimcards.services.claim_cards.pipeline.resolution_phase import resolve_linked_sources_to_details
from claimcards.services.common.ids import stable_claim_id
from claimcards.services.ranking.relevance import rank_sources
from claimcards.services.verdict.aggregator import aggregate_verdict

logger = get_logger(__name__)


@dataclass(kw_only=True)
class RefreshOptions:
    resolver: Resolver

    max_sources_to_resolve: int = PIPELINE_MAX_SOURCES_TO_RESOLVE
    resolution_concurrency: int = PIPELINE_RESOLUTION_CONCURRENCY
    max_sources_for_synthesis: int = PIPELINE_MAX_SOURCES_FOR_SYNTHESIS

    evidence_top_k: int = PIPELINE_EVIDENCE_TOP_K
    evidence_judge_concurrency: int = PIPELINE_JUDGE_CONCURRENCY

    use_judge: bool = False
    judge: Optional[Judge] = None

    storage: Optional[StorageAdapter] = None
    resolution_hints: Optional[Dict[str, Any]] = None

    clock: Callable[[], str] = field(default=utc_now_iso)


@dataclass(kw_only=True)
class BuildOptions(RefreshOptions):
    extractor: Extractor

    max_claims: int = PIPELINE_MAX_CLAIMS
    # stored on every card for later search/refresh
    extra_queries: Optional[List[str]] = None


def _check_judge(options: RefreshOptions) -> None:
    if options.use_judge and options.judge is None:
        raise ValueError("use_judge=True requires options.judge")


def _judge_name(options: RefreshOptions) -> Optional[str]:
    return options.judge.name if options.use_judge and options.judge is not None else None


async def _resolve(linked_sources: Sequence[LinkedSourceRef], options: RefreshOptions) -> List[SourceDetails]:
    return await resolve_linked_sources_to_details(
        linked_sources,
        options.resolver,
        max_sources_to_resolve=options.max_sources_to_resolve,
        concurrency=options.resolution_concurrency,
        resolution_hints=options.resolution_hints,
    )


async def _build_card(
    item: ParentItemMeta,
    extracted: ExtractedClaim,
    resolved: List[SourceDetails],
    dataset: DatasetCounters,
    options: BuildOptions,
    now: str,
) -> ClaimCard:
    ranked = rank_sources(extracted.claim, resolved, anchors=extracted.anchors, top_k=options.evidence_top_k)
    evidence = await map_evidence(
        extracted.claim,
        ranked,
        judge=options.judge,
        use_judge=options.use_judge,
        concurrency=options.evidence_judge_concurrency,
    )
    result = aggregate_verdict(evidence)

    queries = [extracted.claim, *(options.extra_queries or []), f"{item.title}: {extracted.claim}"]
    judge_name = _judge_name(options)

    return ClaimCard(
        id=stable_claim_id(extracted.claim, extracted.scope, extracted.topic),
        claim=extracted.claim,
        scope=extracted.scope,
        topic=extracted.topic,
        verdict=result.verdict,
        confidence=result.confidence,
        evidence=evidence,
        queries=queries,
        created_at=now,
        updated_at=now,
        provenance=Provenance(
            generated_by=GENERATED_BY,
            model=judge_name,
            extractor=options.extractor.name,
            resolvers=[options.resolver.name],
            judge=judge_name,
            item=ItemSnapshot.from_item(item),
            dataset=dataset.model_copy(),
        ),
    )


async def build_claim_cards_from_item(
    item: ParentItemMeta,
    linked_sources: Sequence[LinkedSourceRef],
    options: BuildOptions,
) -> List[ClaimCard]:
    """
    Build one claim card per extracted claim.

    Args:
        item: Parent item being annotated
        linked_sources: Unresolved evidence refs (may be empty)
        options: Collaborators and tunables

    Returns:
        Cards in extraction order; empty when nothing resolves or nothing is extracted.
        An empty run makes no storage calls.

    Raises:
        ValueError: use_judge=True without a judge (raised before any resolution)
        Exception: whatever the extractor raises
    """
    _check_judge(options)
    now = options.clock()

    # 1) Resolve linked refs -> SourceDetails
    resolved = await _resolve(linked_sources, options)
    if not resolved:
        logger.info(f"[ClaimCardPipeline] '{item.title}': no sources resolved, nothing to build")
        return []

    # 2) Extract claims from a bounded corpus
    corpus = resolved[: max(0, options.max_sources_for_synthesis)]
    extracted = (await options.extractor.extract(item, corpus, options.max_claims))[: options.max_claims]
    logger.info(
        f"[ClaimCardPipeline] '{item.title}': {len(extracted)} claims from {len(corpus)} sources "
        f"(extractor={options.extractor.name})"
    )

    dataset = DatasetCounters(
        linked_count=len(linked_sources),
        resolved_count=len(resolved),
        used_for_synthesis_count=len(corpus),
    )

    # 3) Evidence mapping per claim over the full resolved set
    persist = options.storage is not None and item.id is not None
    cards: List[ClaimCard] = []
    for extracted_claim in extracted:
        card = await _build_card(item, extracted_claim, resolved, dataset, options, now)
        cards.append(card)
        logger.info(
            f"[ClaimCardPipeline] {card.id}: verdict={card.verdict} confidence={card.confidence:.3f} "
            f"evidence={len(card.evidence)}"
        )
        if persist:
            await options.storage.save_card(card, item.id)

    # 4) Bulk persistence
    if persist and cards:
        await options.storage.save_cards_for_item(cards, item.id)
        logger.info(f"[ClaimCardPipeline] Persisted {len(cards)} cards via '{options.storage.name}'")

    return cards


async def refresh_claim_card_for_item(
    item: ParentItemMeta,
    linked_sources: Sequence[LinkedSourceRef],
    card: ClaimCard,
    options: RefreshOptions,
) -> ClaimCard:
    """
    Re-resolve sources and re-grade evidence for an existing card's claim.

    Returns a new card; id, claim, scope, topic, created_at and queries are
    kept, evidence/verdict/confidence/updated_at and the provenance
    collaborator names and counters are replaced. The input card is not
    modified and shares no nested objects with the result. `updated_at` is
    always later than the input card's, even within one clock tick.
    """
    _check_judge(options)

    resolved = await _resolve(linked_sources, options)

    ranked = rank_sources(card.claim, resolved, top_k=options.evidence_top_k)
    evidence = await map_evidence(
        card.claim,
        ranked,
        judge=options.judge,
        use_judge=options.use_judge,
        concurrency=options.evidence_judge_concurrency,
    )
    result = aggregate_verdict(evidence)

    judge_name = _judge_name(options)
    provenance = card.provenance.model_copy(
        deep=True,
        update={
            "model": judge_name,
            "resolvers": [options.resolver.name],
            "judge": judge_name,
            "dataset": DatasetCounters(
                linked_count=len(linked_sources),
                resolved_count=len(resolved),
                used_for_synthesis_count=min(max(0, options.max_sources_for_synthesis), len(resolved)),
            ),
        }
    )
    refreshed = card.model_copy(
        deep=True,
        update={
            "verdict": result.verdict,
            "confidence": result.confidence,
            "evidence": evidence,
            "updated_at": timestamp_after(card.updated_at, options.clock()),
            "provenance": provenance,
        }
    )
    logger.info(
        f"[ClaimCardPipeline] Refreshed {card.id}: {card.verdict} -> {refreshed.verdict} "
        f"(confidence {card.confidence:.3f} -> {refreshed.confidence:.3f})"
    )

    if options.storage is not None and item.id is not None:
        await options.storage.save_card(refreshed, item.id)

    return refreshed


class ClaimCardPipeline:
    """
    Object wrapper around build/refresh for callers that keep one configuration.
    """

    def __init__(self, options: BuildOptions) -> None:
        _check_judge(options)
        self.options = options

    async def build(self, item: ParentItemMeta, linked_sources: Sequence[LinkedSourceRef]) -> List[ClaimCard]:
        return await build_claim_cards_from_item(item, linked_sources, self.options)

    async def refresh(
        self, item: ParentItemMeta, linked_sources: Sequence[LinkedSourceRef], card: ClaimCard
    ) -> ClaimCard:
        return await refresh_claim_card_for_item(item, linked_sources, card, self.options)


__all__ = [
    "BuildOptions",
    "ClaimCardPipeline",
    "RefreshOptions",
    "build_claim_cards_from_item",
    "refresh_claim_card_for_item",
]
