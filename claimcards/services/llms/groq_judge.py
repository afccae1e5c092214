from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from claimcards.constants.llm_prompts import EVIDENCE_JUDGE_PROMPT
from claimcards.core.logger import get_logger
from claimcards.core.schemas import EvidencePolarity, JudgeResult, SourceDetails
from claimcards.services.llms.groq_service import GroqService

logger = get_logger(__name__)


class JudgeReply(BaseModel):
    """JSON shape requested from the judge model."""

    polarity: EvidencePolarity
    rationale: str = ""
    score: float = Field(ge=0.0, le=1.0)

    @field_validator("polarity", mode="before")
    @classmethod
    def _normalize_polarity(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("rationale", mode="before")
    @classmethod
    def _normalize_rationale(cls, v: Any) -> str:
        return str(v or "").strip()


class GroqEvidenceJudge:
    """
    LLM-backed Judge: classifies one (claim, source) pair.

    Any failure degrades to an `irrelevant` judgment with score 0 so the
    source carries no weight in the verdict.
    """

    def __init__(self, model: Optional[str] = None, service: Optional[GroqService] = None) -> None:
        self.groq_service = service or GroqService(model=model)
        self.name = f"groq-judge:{self.groq_service.model}"

    def build_prompt(self, claim: str, source: SourceDetails) -> str:
        return EVIDENCE_JUDGE_PROMPT.format(
            claim=claim,
            title=source.title,
            authors=", ".join(source.authors) or "N/A",
            year=source.year if source.year is not None else "N/A",
            abstract=source.abstract or "No abstract available",
        )

    async def judge(self, claim: str, source: SourceDetails) -> JudgeResult:
        try:
            reply = await self.groq_service.ainvoke_json(self.build_prompt(claim, source), JudgeReply)
        except Exception as e:
            logger.error(f"[GroqEvidenceJudge] Judge call failed for '{source.title}': {e}")
            return JudgeResult(polarity="irrelevant", rationale="Error during evaluation", score=0.0)
        return JudgeResult(polarity=reply.polarity, rationale=reply.rationale, score=reply.score)
