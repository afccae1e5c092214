"""
Data model for the claim-card pipeline.

Every record is a pydantic model so a ClaimCard round-trips through a plain
JSON-compatible dict (storage adapters persist nested fields as JSON blobs).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from claimcards.constants.config import EXTRACTION_MAX_ANCHORS

ClaimVerdict = Literal["unverified", "supported", "contradicted", "mixed", "insufficient"]
EvidencePolarity = Literal["supports", "contradicts", "mixed", "irrelevant"]

ItemId = Union[str, int]


def _format_iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    """UTC timestamp with millisecond precision, e.g. 2026-02-03T00:00:00.000Z"""
    return _format_iso(datetime.now(timezone.utc))


def timestamp_after(previous: str, candidate: str) -> str:
    """
    Return `candidate`, or `previous` + 1ms when `candidate` is not later.

    Clock values share one millisecond ISO format, so a refresh inside the
    same millisecond as the build would otherwise repeat the old timestamp.
    Values that are not ISO timestamps are returned unchanged.
    """
    try:
        prev_dt = datetime.fromisoformat(previous.replace("Z", "+00:00"))
        cand_dt = datetime.fromisoformat(candidate.replace("Z", "+00:00"))
    except ValueError:
        return candidate
    if prev_dt.tzinfo is None or cand_dt.tzinfo is None:
        return candidate
    if cand_dt > prev_dt:
        return candidate
    return _format_iso((prev_dt + timedelta(milliseconds=1)).astimezone(timezone.utc))


class ParentItemMeta(BaseModel):
    """The note, document or project being annotated."""

    id: Optional[ItemId] = None
    title: str
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    summary: Optional[str] = None


class LinkedSourceRef(BaseModel):
    """Unresolved evidence reference. Unknown keys are kept as extra fields."""

    model_config = ConfigDict(extra="allow")

    title: str
    year: Optional[int] = None
    authors: List[str] = Field(default_factory=list)
    url: Optional[str] = None

    doi: Optional[str] = None
    arxiv_id: Optional[str] = None
    openalex_id: Optional[str] = None
    semantic_scholar_id: Optional[str] = None
    pmid: Optional[str] = None
    isbn: Optional[str] = None


class SourceDetails(BaseModel):
    """Canonical resolved source. `abstract` is the text used for extraction and judging."""

    model_config = ConfigDict(extra="allow")

    title: str
    id: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    url: Optional[str] = None
    abstract: Optional[str] = None

    venue: Optional[str] = None
    doi: Optional[str] = None
    fields_of_study: List[str] = Field(default_factory=list)
    citations_count: Optional[int] = None

    provider: Optional[str] = None


class ClaimScope(BaseModel):
    population: Optional[str] = None
    intervention: Optional[str] = None
    comparator: Optional[str] = None
    outcome: Optional[str] = None
    timeframe: Optional[str] = None
    setting: Optional[str] = None


class ExtractedClaim(BaseModel):
    claim: str
    scope: Optional[ClaimScope] = None
    topic: Optional[str] = None
    anchors: List[str] = Field(default_factory=list)

    @field_validator("anchors")
    @classmethod
    def _cap_anchors(cls, v: List[str]) -> List[str]:
        return v[:EXTRACTION_MAX_ANCHORS]


class EvidenceLocator(BaseModel):
    section: Optional[str] = None
    page: Optional[int] = None
    url: Optional[str] = None


class EvidenceItem(BaseModel):
    source: SourceDetails
    polarity: EvidencePolarity
    excerpt: Optional[str] = None
    rationale: Optional[str] = None
    score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    locator: Optional[EvidenceLocator] = None


class JudgeResult(BaseModel):
    polarity: EvidencePolarity
    rationale: str
    score: float = Field(ge=0.0, le=1.0)


class ItemSnapshot(BaseModel):
    id: Optional[ItemId] = None
    title: str
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_item(cls, item: ParentItemMeta) -> "ItemSnapshot":
        return cls(id=item.id, title=item.title, tags=list(item.tags), created_at=item.created_at)


class DatasetCounters(BaseModel):
    linked_count: int = 0
    resolved_count: int = 0
    used_for_synthesis_count: int = 0


class Provenance(BaseModel):
    generated_by: str
    model: Optional[str] = None
    extractor: Optional[str] = None
    resolvers: List[str] = Field(default_factory=list)
    judge: Optional[str] = None
    item: ItemSnapshot
    dataset: DatasetCounters


class ClaimCard(BaseModel):
    id: str
    claim: str
    scope: Optional[ClaimScope] = None
    topic: Optional[str] = None

    verdict: ClaimVerdict = "unverified"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    evidence: List[EvidenceItem] = Field(default_factory=list)
    queries: List[str] = Field(default_factory=list)

    created_at: str
    updated_at: str

    provenance: Provenance
    notes: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ClaimCard":
        return cls.model_validate(record)
