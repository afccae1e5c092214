"""
Tests for the bounded worker-pool mapper.
"""

import asyncio

import pytest

from claimcards.services.common.concurrency import map_with_concurrency


class TestMapWithConcurrency:
    @pytest.mark.asyncio
    async def test_preserves_order_with_inverse_delays(self):
        """Later items finish first; results still come back in input order."""
        items = [0.05, 0.04, 0.03, 0.02, 0.01]
        finished = []

        async def fn(delay, idx):
            await asyncio.sleep(delay)
            finished.append(idx)
            return idx * 10

        results = await map_with_concurrency(items, 3, fn)

        assert results == [0, 10, 20, 30, 40]
        assert finished != sorted(finished)

    @pytest.mark.asyncio
    async def test_never_exceeds_concurrency(self):
        in_flight = 0
        peak = 0

        async def fn(item, idx):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return item

        results = await map_with_concurrency(list(range(10)), 3, fn)

        assert results == list(range(10))
        assert peak == 3

    @pytest.mark.asyncio
    async def test_each_item_called_once_with_its_index(self):
        calls = []

        async def fn(item, idx):
            calls.append((item, idx))
            return item.upper()

        results = await map_with_concurrency(["a", "b", "c"], 2, fn)

        assert results == ["A", "B", "C"]
        assert sorted(calls) == [("a", 0), ("b", 1), ("c", 2)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("concurrency", [0, -4])
    async def test_non_positive_concurrency_runs_serially(self, concurrency):
        in_flight = 0
        peak = 0

        async def fn(item, idx):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return item

        assert await map_with_concurrency([1, 2, 3], concurrency, fn) == [1, 2, 3]
        assert peak == 1

    @pytest.mark.asyncio
    async def test_empty_input(self):
        async def fn(item, idx):
            raise AssertionError("should not be called")

        assert await map_with_concurrency([], 4, fn) == []

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self):
        async def fn(item, idx):
            if item == 2:
                raise ValueError("bad item")
            return item

        with pytest.raises(ValueError, match="bad item"):
            await map_with_concurrency([1, 2, 3], 2, fn)
