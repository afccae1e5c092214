"""
claimcards: turn a parent item and its linked sources into auditable, evidence-graded claim cards.
"""

from claimcards.core.schemas import (
    ClaimCard,
    ClaimScope,
    EvidenceItem,
    ExtractedClaim,
    JudgeResult,
    LinkedSourceRef,
    ParentItemMeta,
    SourceDetails,
)
from claimcards.services.claim_cards.pipeline import (
    BuildOptions,
    ClaimCardPipeline,
    RefreshOptions,
    build_claim_cards_from_item,
    refresh_claim_card_for_item,
)
from claimcards.services.common.ids import stable_claim_id
from claimcards.services.ranking.relevance import basic_relevance_score
from claimcards.services.verdict.aggregator import aggregate_verdict

__version__ = "0.1.0"

__all__ = [
    "BuildOptions",
    "ClaimCard",
    "ClaimCardPipeline",
    "ClaimScope",
    "EvidenceItem",
    "ExtractedClaim",
    "JudgeResult",
    "LinkedSourceRef",
    "ParentItemMeta",
    "RefreshOptions",
    "SourceDetails",
    "aggregate_verdict",
    "basic_relevance_score",
    "build_claim_cards_from_item",
    "refresh_claim_card_for_item",
    "stable_claim_id",
]
