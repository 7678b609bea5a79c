"""
Tests for agri_advisor/market/session.py.

What we test
------------
- select(): state change clears district and selected commodity; a change
  bumps the generation so older fetch tokens go stale.
- A selection change while a fetch is in flight clears the loading flag,
  and the stale completion leaves it cleared.
- complete_fetch() / fail_fetch(): stale tokens are ignored.
- refresh(): stub client populates records; a failing client sets the
  user-facing error and clears records.
- insights() / selected_history(): sorted per sort_order; history only for
  a selected commodity that is present.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

from agri_advisor.ingestion.market_client import (
    FETCH_ERROR_MESSAGE,
    MarketFeedError,
    MarketPriceClient,
)
from agri_advisor.market.session import MarketPanelState
from tests.conftest import make_record

_TODAY = date(2026, 10, 19)


class TestSelect:
    def test_state_change_clears_district(self):
        panel = MarketPanelState()
        panel.select(state="Punjab", district="Ludhiana")
        panel.select(state="Karnataka")
        assert panel.state == "Karnataka"
        assert panel.district == ""

    def test_change_clears_commodity(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        panel.select_commodity("Wheat")
        panel.select(district="Ludhiana")
        assert panel.selected_commodity is None

    def test_unchanged_keeps_commodity(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        panel.select_commodity("Wheat")
        panel.select(state="Punjab")
        assert panel.selected_commodity == "Wheat"

    def test_needs_fetch_requires_state(self):
        panel = MarketPanelState()
        assert not panel.needs_fetch
        panel.select(state="Punjab")
        assert panel.needs_fetch


class TestFetchLifecycle:
    def test_token_carries_selection(self):
        panel = MarketPanelState()
        panel.select(state="Punjab", district="Ludhiana")
        token = panel.begin_fetch()
        assert (token.state, token.district) == ("Punjab", "Ludhiana")
        assert panel.loading

    def test_empty_district_is_none_in_token(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        assert panel.begin_fetch().district is None

    def test_current_response_applied(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        token = panel.begin_fetch()
        assert panel.complete_fetch(token, [make_record()])
        assert len(panel.records) == 1
        assert not panel.loading

    def test_stale_response_ignored(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        stale = panel.begin_fetch()
        panel.select(state="Karnataka")
        fresh = panel.begin_fetch()

        assert panel.complete_fetch(fresh, [make_record("Ragi", "Mysuru", 3500)])
        assert not panel.complete_fetch(stale, [make_record("Wheat", "Khanna", 2325)])
        assert [r.commodity for r in panel.records] == ["Ragi"]

    def test_change_during_fetch_clears_loading(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        stale = panel.begin_fetch()
        assert panel.loading
        panel.select(state="Karnataka")
        assert not panel.loading
        assert not panel.complete_fetch(stale, [make_record("Wheat", "Khanna", 2325)])
        assert not panel.loading
        assert panel.records == []

    def test_unchanged_select_keeps_loading(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        token = panel.begin_fetch()
        panel.select(state="Punjab")
        assert panel.loading
        assert panel.is_current(token)

    def test_stale_error_ignored(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        stale = panel.begin_fetch()
        panel.select(district="Ludhiana")
        assert not panel.fail_fetch(stale, FETCH_ERROR_MESSAGE)
        assert panel.error is None

    def test_current_error_applied(self):
        panel = MarketPanelState()
        panel.select(state="Punjab")
        panel.complete_fetch(panel.begin_fetch(), [make_record()])
        assert panel.fail_fetch(panel.begin_fetch(), FETCH_ERROR_MESSAGE)
        assert panel.error == FETCH_ERROR_MESSAGE
        assert panel.records == []


class TestRefresh:
    def test_without_state_does_nothing(self):
        client = MagicMock()
        assert not MarketPanelState().refresh(client)
        client.get_prices.assert_not_called()

    def test_stub_client(self):
        panel = MarketPanelState()
        panel.select(state="Punjab", district="Ludhiana")
        assert panel.refresh(MarketPriceClient())
        assert len(panel.records) == 6
        assert panel.error is None

    def test_failing_client(self):
        client = MagicMock()
        client.get_prices.side_effect = MarketFeedError()
        panel = MarketPanelState()
        panel.select(state="Punjab")
        assert panel.refresh(client)
        assert panel.error == FETCH_ERROR_MESSAGE
        assert panel.records == []
        client.get_prices.assert_called_once_with("Punjab", None)


class TestDerivedViews:
    def _loaded(self, sort_order: str = "price_desc") -> MarketPanelState:
        panel = MarketPanelState(sort_order=sort_order)
        panel.select(state="Punjab", district="Ludhiana")
        panel.refresh(MarketPriceClient())
        return panel

    def test_insights_sorted_by_price(self):
        prices = [i.modal_price for i in self._loaded().insights(_TODAY)]
        assert prices == sorted(prices, reverse=True)
        assert prices[0] == 2325

    def test_insights_sorted_by_name(self):
        names = [i.commodity for i in self._loaded("name_asc").insights(_TODAY)]
        assert names == sorted(names, key=str.casefold)

    def test_no_records_no_insights(self):
        assert MarketPanelState().insights(_TODAY) == []

    def test_history_requires_selection(self):
        assert self._loaded().selected_history(_TODAY) == []

    def test_history_for_selected_commodity(self):
        panel = self._loaded()
        panel.select_commodity("Potato")
        history = panel.selected_history(_TODAY)
        assert len(history) == 31
        assert history[-1].date == _TODAY

    def test_history_for_absent_commodity(self):
        panel = self._loaded()
        panel.select_commodity("Saffron")
        assert panel.selected_history(_TODAY) == []
