from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from claimcards.constants.config import (
    CONFIDENCE_CAP,
    CONFIDENCE_IRRELEVANT_FLOOR,
    CONFIDENCE_QUANTITY_SATURATION,
    CONFIDENCE_WEIGHT_DECISIVENESS,
    CONFIDENCE_WEIGHT_QUANTITY,
    CONFIDENCE_WEIGHT_SCORE,
    VERDICT_CONTRADICTED_RATIO,
    VERDICT_INSUFFICIENT_SIGNAL,
    VERDICT_SUPPORTED_RATIO,
)
from claimcards.core.schemas import ClaimVerdict, EvidenceItem

_RELEVANT_POLARITIES = {"supports", "contradicts", "mixed"}
_EPSILON = 1e-9


@dataclass(frozen=True)
class VerdictThresholds:
    supported_ratio: float = VERDICT_SUPPORTED_RATIO
    contradicted_ratio: float = VERDICT_CONTRADICTED_RATIO
    insufficient_signal: float = VERDICT_INSUFFICIENT_SIGNAL
    weight_score: float = CONFIDENCE_WEIGHT_SCORE
    weight_quantity: float = CONFIDENCE_WEIGHT_QUANTITY
    weight_decisiveness: float = CONFIDENCE_WEIGHT_DECISIVENESS
    quantity_saturation: int = CONFIDENCE_QUANTITY_SATURATION
    confidence_cap: float = CONFIDENCE_CAP
    irrelevant_floor: float = CONFIDENCE_IRRELEVANT_FLOOR


DEFAULT_THRESHOLDS = VerdictThresholds()


@dataclass
class VerdictResult:
    verdict: ClaimVerdict
    confidence: float


def _score(item: EvidenceItem) -> float:
    return float(item.score or 0.0)


def aggregate_verdict(
    evidence: Sequence[EvidenceItem],
    thresholds: VerdictThresholds = DEFAULT_THRESHOLDS,
) -> VerdictResult:
    """
    Turn a score-weighted evidence set into a verdict and a confidence.

    Deterministic and pure. Between "mostly mixed" and "decisive" lies a dead
    zone reported as `mixed`.
    """
    if not evidence:
        return VerdictResult(verdict="insufficient", confidence=0.0)

    relevant = [e for e in evidence if e.polarity in _RELEVANT_POLARITIES]
    if not relevant:
        avg = sum(_score(e) for e in evidence) / len(evidence)
        return VerdictResult(verdict="insufficient", confidence=max(thresholds.irrelevant_floor, avg))

    s_w = sum(_score(e) for e in relevant if e.polarity == "supports")
    c_w = sum(_score(e) for e in relevant if e.polarity == "contradicts")
    m_w = sum(_score(e) for e in relevant if e.polarity == "mixed")

    total_w = (s_w + c_w + m_w) or _EPSILON
    support_ratio = s_w / total_w
    contradict_ratio = c_w / total_w

    verdict: ClaimVerdict
    if support_ratio > thresholds.supported_ratio:
        verdict = "supported"
    elif contradict_ratio > thresholds.contradicted_ratio:
        verdict = "contradicted"
    elif support_ratio + contradict_ratio < thresholds.insufficient_signal:
        verdict = "insufficient"
    else:
        verdict = "mixed"

    avg_score = sum(_score(e) for e in relevant) / len(relevant)
    quantity = min(1.0, len(relevant) / thresholds.quantity_saturation)
    decisiveness = max(support_ratio, contradict_ratio)

    confidence = min(
        thresholds.confidence_cap,
        avg_score * thresholds.weight_score
        + quantity * thresholds.weight_quantity
        + decisiveness * thresholds.weight_decisiveness,
    )
    return VerdictResult(verdict=verdict, confidence=confidence)
