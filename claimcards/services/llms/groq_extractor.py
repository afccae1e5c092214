from typing import List, Optional

from claimcards.core.logger import get_logger
from claimcards.core.schemas import ExtractedClaim, ParentItemMeta, SourceDetails
from claimcards.services.claim_cards.extraction import ExtractedClaimsPayload, build_extraction_prompt
from claimcards.services.llms.groq_service import GroqService

logger = get_logger(__name__)


class GroqClaimExtractor:
    """
    LLM-backed Extractor: prompts Groq for atomic claims and validates the JSON reply.

    Failures propagate; a run without claims has no meaningful partial result.
    """

    def __init__(self, model: Optional[str] = None, service: Optional[GroqService] = None) -> None:
        self.groq_service = service or GroqService(model=model)
        self.name = f"groq-extractor:{self.groq_service.model}"

    async def extract(
        self, item: ParentItemMeta, sources: List[SourceDetails], max_claims: int
    ) -> List[ExtractedClaim]:
        if not sources:
            logger.info(f"[GroqClaimExtractor] No sources for '{item.title}', skipping extraction")
            return []

        prompt = build_extraction_prompt(item, sources, max_claims)
        try:
            payload = await self.groq_service.ainvoke_json(prompt, ExtractedClaimsPayload)
            claims = payload.to_extracted_claims()
        except Exception as e:
            logger.error(f"[GroqClaimExtractor] Extraction failed for '{item.title}': {e}")
            raise

        logger.info(f"[GroqClaimExtractor] Extracted {len(claims)} claims from {len(sources)} sources")
        return claims[:max_claims]
