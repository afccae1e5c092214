"""
Pytest configuration and fixtures for test suite.

This module:
- Detects CI environment and skips tests requiring external services
- Provides stub collaborators (resolver, extractor, judge) and sample sources
"""

import asyncio
import os
from typing import Dict, List, Optional, Sequence

import pytest

from claimcards.core.schemas import ExtractedClaim, JudgeResult, LinkedSourceRef, ParentItemMeta, SourceDetails

# Detect CI environment
IS_CI = os.environ.get("CI") or os.environ.get("GITHUB_ACTIONS") or os.environ.get("GITLAB_CI")


def is_groq_available():
    """Check if Groq API key is configured."""
    return bool(os.environ.get("GROQ_API_KEY"))


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "groq_required: mark test as requiring Groq API")
    config.addinivalue_line("markers", "network_required: mark test as requiring Crossref/Semantic Scholar access")
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Automatically skip tests based on environment."""
    for item in items:
        if "groq_required" in item.keywords and not is_groq_available():
            item.add_marker(pytest.mark.skip(reason="Groq API key not configured"))

        if "network_required" in item.keywords and not os.environ.get("RUN_NETWORK_TESTS"):
            item.add_marker(pytest.mark.skip(reason="Network tests disabled (set RUN_NETWORK_TESTS=1)"))

        if IS_CI and "integration" in item.keywords and not os.environ.get("RUN_INTEGRATION_TESTS"):
            item.add_marker(pytest.mark.skip(reason="Integration tests skipped in CI by default"))


# ---------------------------------------------------------------------
# Stub collaborators
# ---------------------------------------------------------------------
class StubResolver:
    """Resolves refs by title from a dict; titles listed in `failing` raise."""

    def __init__(
        self,
        catalogue: Dict[str, SourceDetails],
        failing: Sequence[str] = (),
        delays: Optional[Dict[str, float]] = None,
        name: str = "stub-resolver",
    ):
        self.name = name
        self.catalogue = catalogue
        self.failing = set(failing)
        self.delays = delays or {}
        self.calls: List[str] = []
        self.opts_seen = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def resolve(self, ref, opts=None):
        self.calls.append(ref.title)
        self.opts_seen.append(opts)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(ref.title, 0))
            if ref.title in self.failing:
                raise RuntimeError(f"boom: {ref.title}")
            return self.catalogue.get(ref.title)
        finally:
            self.in_flight -= 1


class StubExtractor:
    def __init__(self, claims: Sequence[ExtractedClaim], name: str = "stub-extractor"):
        self.name = name
        self.claims = list(claims)
        self.calls = []

    async def extract(self, item, sources, max_claims):
        self.calls.append((item, list(sources), max_claims))
        return [c.model_copy(deep=True) for c in self.claims]


class StubJudge:
    """Returns a fixed result per source title; titles in `failing` raise."""

    def __init__(
        self,
        results: Dict[str, JudgeResult],
        default: Optional[JudgeResult] = None,
        failing: Sequence[str] = (),
        name: str = "stub-judge",
    ):
        self.name = name
        self.results = results
        self.default = default or JudgeResult(polarity="irrelevant", rationale="n/a", score=0.1)
        self.failing = set(failing)
        self.calls: List[str] = []

    async def judge(self, claim, source):
        self.calls.append(source.title)
        if source.title in self.failing:
            raise RuntimeError(f"judge down for {source.title}")
        return self.results.get(source.title, self.default)


# ---------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------
@pytest.fixture
def remote_work_sources() -> List[SourceDetails]:
    return [
        SourceDetails(
            title="Does Working from Home Work? Evidence from a Chinese Experiment",
            doi="10.1093/qje/qju032",
            year=2015,
            authors=["Nicholas Bloom", "James Liang", "John Roberts", "Zhichun Jenny Ying"],
            url="https://doi.org/10.1093/qje/qju032",
            abstract=(
                "A randomized experiment at a travel agency found that remote work from home "
                "increased employee productivity by 13 percent and reduced attrition."
            ),
            provider="stub",
        ),
        SourceDetails(
            title="Remote work and team communication",
            year=2021,
            authors=["Longqi Yang"],
            url="https://example.org/remote-communication",
            abstract=(
                "Firm-wide remote work caused collaboration networks to become more static and siloed, "
                "with fewer bridges between groups and lower productivity for some teams."
            ),
            provider="stub",
        ),
        SourceDetails(
            title="Hybrid schedules and employee retention",
            year=2024,
            authors=["Nicholas Bloom", "Ruobing Han", "James Liang"],
            url="https://example.org/hybrid-retention",
            abstract=(
                "Hybrid work from home two days a week reduced quit rates by one third "
                "with no effect on performance reviews or productivity."
            ),
            provider="stub",
        ),
    ]


@pytest.fixture
def remote_work_refs(remote_work_sources) -> List[LinkedSourceRef]:
    return [LinkedSourceRef(title=s.title) for s in remote_work_sources]


@pytest.fixture
def remote_work_item() -> ParentItemMeta:
    return ParentItemMeta(
        id=42, title="Remote work productivity", tags=["research"], created_at="2026-02-03T00:00:00.000Z"
    )


@pytest.fixture
def two_claims() -> List[ExtractedClaim]:
    return [
        ExtractedClaim(claim="Remote work from home increases employee productivity", topic="metrics"),
        ExtractedClaim(
            claim="Hybrid work reduces employee quit rates",
            topic="retention",
            anchors=["Hybrid schedules"],
        ),
    ]


@pytest.fixture
def stub_resolver_factory():
    return StubResolver


@pytest.fixture
def stub_extractor_factory():
    return StubExtractor


@pytest.fixture
def stub_judge_factory():
    return StubJudge
