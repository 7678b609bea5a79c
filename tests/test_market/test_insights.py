"""
Tests for agri_advisor/market/insights.py.

What we test
------------
unique_by_commodity():
  - Last report wins; the commodity keeps its first position.

simulate_price_history():
  - 31 daily points ending today; deterministic for a seed.
  - First step of the LCG walk matches a hand-computed value.
  - Never drops below 80% of the base price.

trailing_average():
  - Averages the 7 points before the last one.

build_insights() / sort_insights():
  - change_pct follows (modal - avg) / avg * 100.
  - Four sort orders; names compare case-insensitively.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from agri_advisor.market.insights import (
    HISTORY_DAYS,
    PricePoint,
    build_insights,
    history_seed,
    simulate_price_history,
    sort_insights,
    trailing_average,
    unique_by_commodity,
)
from tests.conftest import make_record

_TODAY = date(2026, 10, 19)


class TestUniqueByCommodity:
    def test_last_wins_first_position_kept(self):
        records = [
            make_record("Onion", "Lasalgaon", 2100),
            make_record("Tomato", "Pune", 1200),
            make_record("Onion", "Pimpalgaon", 2250),
        ]
        unique = unique_by_commodity(records)
        assert [(r.commodity, r.market) for r in unique] == [
            ("Onion", "Pimpalgaon"),
            ("Tomato", "Pune"),
        ]

    def test_empty(self):
        assert unique_by_commodity([]) == []


class TestSimulatePriceHistory:
    def test_length_and_dates(self):
        history = simulate_price_history(1000, seed=1, today=_TODAY)
        assert len(history) == HISTORY_DAYS + 1
        assert history[-1].date == _TODAY
        assert history[0].date == _TODAY - timedelta(days=HISTORY_DAYS)

    def test_first_step(self):
        # r = (1 * 9301 + 49297) % 233280 = 58598
        # 1000 + (58598 / 233280 - 0.5) * 100 = 975.12
        assert simulate_price_history(1000, seed=1, today=_TODAY)[0].price == 975

    def test_deterministic(self):
        a = simulate_price_history(2325, seed=11, today=_TODAY)
        b = simulate_price_history(2325, seed=11, today=_TODAY)
        assert a == b

    def test_seed_changes_walk(self):
        a = simulate_price_history(1000, seed=1, today=_TODAY)
        b = simulate_price_history(1000, seed=2, today=_TODAY)
        assert a[0].price == 975
        assert b[0].price == 979

    def test_floor_at_80_percent(self):
        for seed in range(1, 40):
            history = simulate_price_history(1000, seed=seed, today=_TODAY)
            assert min(p.price for p in history) >= 800

    def test_prices_are_ints(self):
        assert all(isinstance(p.price, int) for p in simulate_price_history(555, 3, _TODAY))

    def test_history_seed(self):
        assert history_seed(make_record("Wheat", "Khanna")) == len("WheatKhanna")


class TestTrailingAverage:
    def test_window_excludes_today(self):
        history = [PricePoint(_TODAY - timedelta(days=8 - i), i + 1) for i in range(9)]
        # prices 1..9; window is 2..8
        assert trailing_average(history) == pytest.approx(5.0)

    def test_short_history(self):
        history = [PricePoint(_TODAY - timedelta(days=1), 10), PricePoint(_TODAY, 99)]
        assert trailing_average(history) == 10.0

    def test_single_point_raises(self):
        with pytest.raises(ValueError):
            trailing_average([PricePoint(_TODAY, 10)])


class TestBuildInsights:
    def test_change_pct_formula(self):
        insights = build_insights([make_record("Wheat", "Khanna", 2325)], _TODAY)
        (insight,) = insights
        expected = (2325 - insight.avg_price) / insight.avg_price * 100
        assert insight.change_pct == pytest.approx(expected)
        history = simulate_price_history(2325, insight.history_seed, _TODAY)
        assert insight.avg_price == pytest.approx(trailing_average(history))

    def test_one_per_commodity(self):
        records = [make_record("Onion", "A", 100), make_record("Onion", "B", 200)]
        insights = build_insights(records, _TODAY)
        assert len(insights) == 1
        assert insights[0].market == "B"
        assert insights[0].modal_price == 200


class TestSortInsights:
    @pytest.fixture
    def insights(self):
        records = [
            make_record("banana", "M", 1500),
            make_record("Apple", "M", 4000),
            make_record("Cherry", "M", 900),
        ]
        return build_insights(records, _TODAY)

    def test_default_price_desc(self, insights):
        assert [i.commodity for i in sort_insights(insights)] == ["Apple", "banana", "Cherry"]

    def test_price_asc(self, insights):
        result = sort_insights(insights, "price_asc")
        assert [i.modal_price for i in result] == [900, 1500, 4000]

    def test_name_asc_case_insensitive(self, insights):
        assert [i.commodity for i in sort_insights(insights, "name_asc")] == [
            "Apple", "banana", "Cherry"
        ]

    def test_name_desc(self, insights):
        assert [i.commodity for i in sort_insights(insights, "name_desc")] == [
            "Cherry", "banana", "Apple"
        ]

    def test_unknown_order_falls_back(self, insights):
        assert sort_insights(insights, "bogus") == sort_insights(insights, "price_desc")
