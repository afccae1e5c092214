"""
Claim extraction helpers: prompt packing, the LLM output schema, and a static extractor.

The pipeline never calls an LLM itself; these helpers keep any model-backed
Extractor generic.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field, field_validator

from claimcards.constants.config import (
    EXTRACTION_PROMPT_MAX_ABSTRACT_CHARS,
    EXTRACTION_MAX_ANCHORS,
    EXTRACTION_PROMPT_MAX_CHARS,
    EXTRACTION_SCHEMA_MAX_CLAIMS,
)
from claimcards.constants.llm_prompts import CLAIM_EXTRACTION_PROMPT
from claimcards.core.logger import get_logger
from claimcards.core.schemas import ClaimScope, ExtractedClaim, ParentItemMeta, SourceDetails
from claimcards.services.common.text_cleaner import normalize_text, truncate_with_ellipsis

logger = get_logger(__name__)


class ExtractedClaimPayload(BaseModel):
    claim: str = Field(
        min_length=8,
        description="Atomic, testable statement. Avoid vague language; prefer measurable outcomes.",
    )
    topic: Optional[str] = Field(default=None, description="Free-form topic label, e.g. 'policy', 'metrics'.")
    scope: Optional[ClaimScope] = None
    anchors: List[str] = Field(
        default_factory=list,
        description="0-5 source titles (or distinctive substrings) most directly related to this claim.",
    )

    @field_validator("anchors")
    @classmethod
    def _cap_anchors(cls, v: List[str]) -> List[str]:
        return v[:EXTRACTION_MAX_ANCHORS]


class ExtractedClaimsPayload(BaseModel):
    """JSON shape requested from an LLM extractor."""

    claims: List[ExtractedClaimPayload] = Field(min_length=1, max_length=EXTRACTION_SCHEMA_MAX_CLAIMS)

    def to_extracted_claims(self) -> List[ExtractedClaim]:
        return [
            ExtractedClaim(claim=c.claim.strip(), topic=c.topic, scope=c.scope, anchors=list(c.anchors))
            for c in self.claims
        ]


def parse_extracted_claims(payload: Dict[str, Any]) -> List[ExtractedClaim]:
    """
    Validate a raw extraction payload and convert it to ExtractedClaims.

    Anchors beyond the per-claim cap are dropped rather than rejected.

    Raises:
        pydantic.ValidationError: payload doesn't match ExtractedClaimsPayload
    """
    return ExtractedClaimsPayload.model_validate(payload).to_extracted_claims()


def pack_sources_for_prompt(
    sources: Sequence[SourceDetails],
    max_chars: int = 12000,
    max_abstract_chars: int = 500,
) -> str:
    """
    Render sources as title/authors/abstract blocks for a prompt.

    Stops before the block that would push the text past `max_chars`.
    """
    lines: List[str] = []
    used = 0

    for s in sources:
        year = f" ({s.year})" if s.year else ""
        abstract = truncate_with_ellipsis(normalize_text(s.abstract or ""), max_abstract_chars)

        line = (
            f"- Title: {s.title}{year}\n"
            f"  Authors: {', '.join(s.authors[:8])}\n"
            f"  Abstract: {abstract or 'N/A'}\n"
        )

        if used + len(line) > max_chars:
            break
        lines.append(line)
        used += len(line)

    return "\n".join(lines)


def build_extraction_prompt(item: ParentItemMeta, sources: Sequence[SourceDetails], max_claims: int) -> str:
    packed = pack_sources_for_prompt(
        sources,
        max_chars=EXTRACTION_PROMPT_MAX_CHARS,
        max_abstract_chars=EXTRACTION_PROMPT_MAX_ABSTRACT_CHARS,
    )
    return CLAIM_EXTRACTION_PROMPT.format(
        title=item.title,
        tags=", ".join(item.tags) or "N/A",
        summary=item.summary or "N/A",
        max_claims=max_claims,
        sources=packed,
    )


class StaticClaimExtractor:
    """
    Extractor over an explicit list of claims (strings or ExtractedClaims).

    Used when the caller already knows which claims to grade.
    """

    def __init__(self, claims: Sequence[Union[str, ExtractedClaim]], name: str = "static-extractor") -> None:
        self.name = name
        self._claims: List[ExtractedClaim] = []
        for c in claims:
            if isinstance(c, ExtractedClaim):
                self._claims.append(c)
            elif isinstance(c, str) and c.strip():
                self._claims.append(ExtractedClaim(claim=c.strip()))

    async def extract(
        self, item: ParentItemMeta, sources: List[SourceDetails], max_claims: int
    ) -> List[ExtractedClaim]:
        logger.info(f"[StaticClaimExtractor] Returning {min(len(self._claims), max_claims)} claims for '{item.title}'")
        return [c.model_copy(deep=True) for c in self._claims[:max_claims]]
