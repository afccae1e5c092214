"""
Tests for refresh_claim_card_for_item: re-grade an existing card in place.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from claimcards import BuildOptions, ClaimCardPipeline, RefreshOptions, build_claim_cards_from_item
from claimcards.core.schemas import ClaimScope, ExtractedClaim, JudgeResult, LinkedSourceRef, SourceDetails
from claimcards.services.claim_cards.pipeline import refresh_claim_card_for_item
from claimcards.services.resolvers.static_resolver import StaticResolver

BUILT_AT = "2026-02-03T00:00:00.000Z"
REFRESHED_AT = "2026-03-01T12:00:00.000Z"


@pytest_asyncio.fixture
async def existing_card(remote_work_item, remote_work_refs, remote_work_sources):
    claim = ExtractedClaim(
        claim="Remote work from home increases employee productivity",
        topic="metrics",
        scope=ClaimScope(population="call-center employees"),
    )
    options = BuildOptions(
        resolver=StaticResolver(remote_work_sources),
        extractor=_static_extractor([claim]),
        clock=lambda: BUILT_AT,
    )
    cards = await build_claim_cards_from_item(remote_work_item, remote_work_refs, options)
    card = cards[0]
    return card.model_copy(update={"notes": "reviewed by editor"})


def _static_extractor(claims):
    extractor = MagicMock()
    extractor.name = "fixture-extractor"
    extractor.extract = AsyncMock(return_value=claims)
    return extractor


class TestRefresh:
    @pytest.mark.asyncio
    async def test_identity_fields_preserved(
        self, existing_card, remote_work_item, remote_work_refs, stub_judge_factory
    ):
        judge = stub_judge_factory({}, default=JudgeResult(polarity="supports", rationale="ok", score=0.8))
        extended = remote_work_refs + [
            # a fresh source appears after the card was built
            LinkedSourceRef(title="Remote work productivity meta-analysis"),
        ]
        resolver = StaticResolver(
            [
                SourceDetails(title=r.title, abstract="remote work increases employee productivity")
                for r in extended
            ],
            name="static-resolver@2",
        )
        options = RefreshOptions(resolver=resolver, use_judge=True, judge=judge, clock=lambda: REFRESHED_AT)

        refreshed = await refresh_claim_card_for_item(remote_work_item, extended, existing_card, options)

        assert refreshed.id == existing_card.id
        assert refreshed.claim == existing_card.claim
        assert refreshed.scope == existing_card.scope
        assert refreshed.topic == existing_card.topic
        assert refreshed.created_at == BUILT_AT
        assert refreshed.queries == existing_card.queries
        assert refreshed.notes == "reviewed by editor"

        assert refreshed.updated_at == REFRESHED_AT
        assert refreshed.verdict == "supported"
        assert len(refreshed.evidence) == 4

        prov = refreshed.provenance
        assert prov.judge == judge.name
        assert prov.model == judge.name
        assert prov.resolvers == ["static-resolver@2"]
        assert prov.extractor == "fixture-extractor"
        assert prov.item == existing_card.provenance.item
        assert prov.dataset.linked_count == 4
        assert prov.dataset.resolved_count == 4
        assert prov.dataset.used_for_synthesis_count == 4

    @pytest.mark.asyncio
    async def test_input_card_untouched(self, existing_card, remote_work_item, remote_work_refs):
        before = existing_card.to_record()
        options = RefreshOptions(resolver=StaticResolver([]), clock=lambda: REFRESHED_AT)

        refreshed = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, existing_card, options)

        assert existing_card.to_record() == before
        assert refreshed.evidence == []
        assert refreshed.verdict == "insufficient"
        assert refreshed.confidence == 0.0
        assert refreshed.provenance.dataset.resolved_count == 0

    @pytest.mark.asyncio
    async def test_synthesis_count_bounded(
        self, existing_card, remote_work_item, remote_work_refs, remote_work_sources
    ):
        options = RefreshOptions(resolver=StaticResolver(remote_work_sources), max_sources_for_synthesis=2)

        refreshed = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, existing_card, options)

        assert refreshed.provenance.dataset.used_for_synthesis_count == 2

    @pytest.mark.asyncio
    async def test_missing_judge_fails_before_resolution(
        self, existing_card, remote_work_item, remote_work_refs, stub_resolver_factory
    ):
        resolver = stub_resolver_factory({})

        with pytest.raises(ValueError):
            await refresh_claim_card_for_item(
                remote_work_item, remote_work_refs, existing_card, RefreshOptions(resolver=resolver, use_judge=True)
            )

        assert resolver.calls == []

    @pytest.mark.asyncio
    async def test_persists_refreshed_card(
        self, existing_card, remote_work_item, remote_work_refs, remote_work_sources
    ):
        storage = MagicMock()
        storage.name = "mock-storage"
        storage.save_card = AsyncMock()
        storage.save_cards_for_item = AsyncMock()
        options = RefreshOptions(resolver=StaticResolver(remote_work_sources), storage=storage)

        refreshed = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, existing_card, options)

        storage.save_card.assert_awaited_once_with(refreshed, 42)
        storage.save_cards_for_item.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pipeline_object_refresh(
        self, existing_card, remote_work_item, remote_work_refs, remote_work_sources
    ):
        pipeline = ClaimCardPipeline(
            BuildOptions(
                resolver=StaticResolver(remote_work_sources),
                extractor=_static_extractor([]),
                clock=lambda: REFRESHED_AT,
            )
        )

        refreshed = await pipeline.refresh(remote_work_item, remote_work_refs, existing_card)

        assert refreshed.id == existing_card.id
        assert refreshed.updated_at == REFRESHED_AT
        assert len(refreshed.evidence) == 3

    @pytest.mark.asyncio
    async def test_result_shares_no_nested_state(
        self, existing_card, remote_work_item, remote_work_refs, remote_work_sources
    ):
        before = existing_card.to_record()
        options = RefreshOptions(resolver=StaticResolver(remote_work_sources), clock=lambda: REFRESHED_AT)

        refreshed = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, existing_card, options)
        refreshed.scope.population = "warehouse staff"
        refreshed.provenance.item.tags.append("edited")
        refreshed.queries.append("extra query")

        assert refreshed.scope is not existing_card.scope
        assert refreshed.provenance.item is not existing_card.provenance.item
        assert existing_card.to_record() == before

    @pytest.mark.asyncio
    async def test_updated_at_moves_forward_within_one_tick(
        self, existing_card, remote_work_item, remote_work_refs, remote_work_sources
    ):
        options = RefreshOptions(resolver=StaticResolver(remote_work_sources), clock=lambda: BUILT_AT)

        first = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, existing_card, options)
        second = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, first, options)

        assert first.created_at == BUILT_AT
        assert first.updated_at == "2026-02-03T00:00:00.001Z"
        assert second.updated_at == "2026-02-03T00:00:00.002Z"

    @pytest.mark.asyncio
    async def test_clock_behind_card_still_moves_forward(self, existing_card, remote_work_item, remote_work_refs):
        options = RefreshOptions(resolver=StaticResolver([]), clock=lambda: "2026-01-01T00:00:00.000Z")

        refreshed = await refresh_claim_card_for_item(remote_work_item, remote_work_refs, existing_card, options)

        assert refreshed.updated_at == "2026-02-03T00:00:00.001Z"
