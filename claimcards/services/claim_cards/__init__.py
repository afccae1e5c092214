"""
Claim-card synthesis: collaborator contracts, extraction helpers and the pipeline.
"""

from claimcards.services.claim_cards.extraction import (
    ExtractedClaimsPayload,
    StaticClaimExtractor,
    build_extraction_prompt,
    pack_sources_for_prompt,
    parse_extracted_claims,
)
from claimcards.services.claim_cards.interfaces import (
    Extractor,
    Judge,
    ReadableStorageAdapter,
    ResolveOptions,
    Resolver,
    StorageAdapter,
)
from claimcards.services.claim_cards.pipeline import (
    BuildOptions,
    ClaimCardPipeline,
    RefreshOptions,
    build_claim_cards_from_item,
    refresh_claim_card_for_item,
)

__all__ = [
    "BuildOptions",
    "ClaimCardPipeline",
    "ExtractedClaimsPayload",
    "Extractor",
    "Judge",
    "ReadableStorageAdapter",
    "RefreshOptions",
    "ResolveOptions",
    "Resolver",
    "StaticClaimExtractor",
    "StorageAdapter",
    "build_claim_cards_from_item",
    "build_extraction_prompt",
    "pack_sources_for_prompt",
    "parse_extracted_claims",
    "refresh_claim_card_for_item",
]
