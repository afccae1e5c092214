"""
Groq-backed collaborators for claim extraction and evidence judging.
"""

from typing import Optional, Tuple

from claimcards.services.llms.groq_extractor import GroqClaimExtractor
from claimcards.services.llms.groq_judge import GroqEvidenceJudge, JudgeReply
from claimcards.services.llms.groq_service import GroqService, LLMReplyError


def create_groq_adapters(model: Optional[str] = None) -> Tuple[GroqClaimExtractor, GroqEvidenceJudge]:
    """Extractor and judge sharing one Groq client."""
    service = GroqService(model=model)
    return GroqClaimExtractor(service=service), GroqEvidenceJudge(service=service)


__all__ = [
    "GroqClaimExtractor",
    "GroqEvidenceJudge",
    "GroqService",
    "JudgeReply",
    "LLMReplyError",
    "create_groq_adapters",
]
