"""
Verdict aggregation for claim cards.
"""

from claimcards.services.verdict.aggregator import (
    DEFAULT_THRESHOLDS,
    VerdictResult,
    VerdictThresholds,
    aggregate_verdict,
)

__all__ = ["DEFAULT_THRESHOLDS", "VerdictResult", "VerdictThresholds", "aggregate_verdict"]
