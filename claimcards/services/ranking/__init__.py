"""
Ranking services for selecting evidence candidates per claim.
"""

from claimcards.services.ranking.relevance import RankedSource, basic_relevance_score, rank_sources

__all__ = ["RankedSource", "basic_relevance_score", "rank_sources"]
