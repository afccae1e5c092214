"""
Tests for evidence mapping: heuristic mode, judge mode and judge failures.
"""

import pytest

from claimcards.core.schemas import JudgeResult, SourceDetails
from claimcards.services.claim_cards.pipeline.evidence_phase import heuristic_evidence_item, map_evidence
from claimcards.services.ranking.relevance import RankedSource, rank_sources

CLAIM = "Remote work from home increases employee productivity"


def _ranked(title, abstract=None, relevance=0.5, score=None, url=None):
    src = SourceDetails(title=title, abstract=abstract, url=url)
    return RankedSource(source=src, relevance=relevance, score=relevance if score is None else score)


class TestHeuristicEvidence:
    def test_heuristic_item_shape(self):
        item = heuristic_evidence_item(_ranked("T", abstract="  some abstract  ", relevance=0.375, url="https://x.org"))

        assert item.polarity == "mixed"
        assert item.score == pytest.approx(0.375)
        assert item.excerpt == "some abstract"
        assert item.rationale == "Auto-mapped from title/abstract match (heuristic)"
        assert item.locator.url == "https://x.org"

    def test_score_is_unboosted_relevance(self):
        item = heuristic_evidence_item(_ranked("T", relevance=0.25, score=0.37))
        assert item.score == pytest.approx(0.25)

    def test_excerpt_truncated_with_ellipsis(self):
        item = heuristic_evidence_item(_ranked("T", abstract="x" * 300))
        assert item.excerpt == "x" * 260 + "…"

    def test_no_abstract_no_excerpt(self):
        assert heuristic_evidence_item(_ranked("T")).excerpt is None
        assert heuristic_evidence_item(_ranked("T", abstract="   ")).excerpt is None

    @pytest.mark.asyncio
    async def test_map_evidence_without_judge_keeps_rank_order(self, remote_work_sources):
        ranked = rank_sources(CLAIM, remote_work_sources, top_k=3)

        evidence = await map_evidence(CLAIM, ranked)

        assert [e.source.title for e in evidence] == [r.source.title for r in ranked]
        assert all(e.polarity == "mixed" for e in evidence)


class TestJudgedEvidence:
    @pytest.mark.asyncio
    async def test_judge_results_copied_onto_items(self, stub_judge_factory):
        judge = stub_judge_factory(
            {
                "A": JudgeResult(polarity="supports", rationale="direct RCT evidence", score=0.9),
                "B": JudgeResult(polarity="contradicts", rationale="opposite finding", score=0.6),
            }
        )
        ranked = [_ranked("A", abstract="abs A", url="https://a"), _ranked("B")]

        evidence = await map_evidence(CLAIM, ranked, judge=judge, use_judge=True)

        assert [(e.source.title, e.polarity, e.score) for e in evidence] == [
            ("A", "supports", 0.9),
            ("B", "contradicts", 0.6),
        ]
        assert evidence[0].rationale == "direct RCT evidence"
        assert evidence[0].excerpt == "abs A"
        assert evidence[0].locator.url == "https://a"

    @pytest.mark.asyncio
    async def test_judge_failure_drops_only_that_source(self, stub_judge_factory):
        judge = stub_judge_factory(
            {},
            default=JudgeResult(polarity="supports", rationale="ok", score=0.8),
            failing=["B"],
        )
        ranked = [_ranked("A"), _ranked("B"), _ranked("C")]

        evidence = await map_evidence(CLAIM, ranked, judge=judge, use_judge=True, concurrency=2)

        assert [e.source.title for e in evidence] == ["A", "C"]
        assert sorted(judge.calls) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_use_judge_without_judge_raises(self):
        with pytest.raises(ValueError):
            await map_evidence(CLAIM, [_ranked("A")], use_judge=True)

    @pytest.mark.asyncio
    async def test_judge_ignored_when_use_judge_false(self, stub_judge_factory):
        judge = stub_judge_factory({})

        evidence = await map_evidence(CLAIM, [_ranked("A")], judge=judge, use_judge=False)

        assert judge.calls == []
        assert evidence[0].polarity == "mixed"
