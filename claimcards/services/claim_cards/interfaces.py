"""
Collaborator contracts consumed by the claim-card pipeline.

Any object with the right `name` attribute and async methods satisfies these
protocols; heuristic, rule-based and model-backed implementations are
interchangeable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from claimcards.core.schemas import (
    ClaimCard,
    ExtractedClaim,
    ItemId,
    JudgeResult,
    LinkedSourceRef,
    ParentItemMeta,
    SourceDetails,
)


@dataclass
class ResolveOptions:
    max_sources_to_resolve: Optional[int] = None
    concurrency: Optional[int] = None
    # pass-through hints, e.g. {"sources": ["semantic_scholar", "crossref"]}
    resolution_hints: Optional[Dict[str, Any]] = None


@runtime_checkable
class Resolver(Protocol):
    name: str

    async def resolve(self, ref: LinkedSourceRef, opts: Optional[ResolveOptions] = None) -> Optional[SourceDetails]:
        """Return canonical metadata, or None when the ref can't be resolved confidently."""
        ...


@runtime_checkable
class Extractor(Protocol):
    name: str

    async def extract(
        self, item: ParentItemMeta, sources: List[SourceDetails], max_claims: int
    ) -> List[ExtractedClaim]: ...


@runtime_checkable
class Judge(Protocol):
    name: str

    async def judge(self, claim: str, source: SourceDetails) -> JudgeResult: ...


@runtime_checkable
class StorageAdapter(Protocol):
    """Writes must be idempotent upserts: the pipeline saves each card twice."""

    name: str

    async def save_card(self, card: ClaimCard, item_id: Optional[ItemId] = None) -> None: ...

    async def save_cards_for_item(self, cards: List[ClaimCard], item_id: ItemId) -> None: ...


@runtime_checkable
class ReadableStorageAdapter(StorageAdapter, Protocol):
    async def get_card(self, card_id: str) -> Optional[ClaimCard]: ...

    async def get_cards_for_item(self, item_id: ItemId) -> List[ClaimCard]: ...

    async def delete_card(self, card_id: str) -> None: ...
