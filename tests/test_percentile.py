"""Tests for percentile ranking."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from rcs.errors import PopulationUnavailable
from rcs.scoring.percentile import PercentileRanker, percentile_of


class TestPercentileOf:
    @pytest.mark.parametrize("score", [0, 50, 100])
    def test_empty_population_defaults_to_50(self, score):
        assert percentile_of(score, []) == 50

    def test_custom_default(self):
        assert percentile_of(80, [], default=0) == 0

    def test_strictly_below_counted(self):
        assert percentile_of(75, [50, 60, 70, 80]) == 75

    def test_ties_not_counted_as_below(self):
        assert percentile_of(70, [70, 70, 70, 70]) == 0
        assert percentile_of(70, [60, 70, 70, 80]) == 25

    def test_highest_score(self):
        assert percentile_of(99, [10, 20, 30]) == 100

    def test_unsorted_population(self):
        assert percentile_of(55, [90, 10, 70, 40, 50]) == 60

    def test_rounds_half_up(self):
        # 1/8 = 12.5 -> 13
        assert percentile_of(20, [10, 30, 40, 50, 60, 70, 80, 90]) == 13

    def test_rounds_down(self):
        # 1/3 = 33.3 -> 33
        assert percentile_of(20, [10, 30, 40]) == 33

    def test_none_entries_ignored(self):
        assert percentile_of(50, [None, 40, None, 60]) == 50

    def test_result_in_range(self):
        population = [float(i) for i in range(0, 101, 7)]
        for score in (-10, 0, 33.3, 100, 1000):
            assert 0 <= percentile_of(score, population) <= 100


class TestPercentileRanker:
    def test_uses_store_population(self):
        store = MagicMock()
        store.list_population_scores = AsyncMock(return_value=[10.0, 20.0, 30.0, 40.0])
        ranker = PercentileRanker(store)
        assert asyncio.run(ranker.rank(35.0)) == 75
        store.list_population_scores.assert_awaited_once_with(None)

    def test_empty_population_default(self):
        store = MagicMock()
        store.list_population_scores = AsyncMock(return_value=[])
        assert asyncio.run(PercentileRanker(store).rank(99.0)) == 50

    def test_store_error_falls_back(self, caplog):
        store = MagicMock()
        store.list_population_scores = AsyncMock(side_effect=PopulationUnavailable("db down"))
        ranker = PercentileRanker(store, default=50)
        with caplog.at_level("ERROR"):
            assert asyncio.run(ranker.rank(80.0)) == 50
        assert "population_unavailable" in caplog.text

    def test_unexpected_error_falls_back(self):
        store = MagicMock()
        store.list_population_scores = AsyncMock(side_effect=RuntimeError("boom"))
        assert asyncio.run(PercentileRanker(store, default=42).rank(80.0)) == 42
