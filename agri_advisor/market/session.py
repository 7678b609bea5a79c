"""
Market panel state with stale-response protection.

Each fetch is tagged with a token issued by ``begin_fetch()``. Changing the
state or district issues nothing by itself but bumps the generation, so a
response that arrives for an earlier selection is ignored instead of
overwriting the current view.

    panel = MarketPanelState()
    panel.select(state="Punjab")
    token = panel.begin_fetch()
    ...                                   # user switches to "Haryana"
    panel.complete_fetch(token, records)  # returns False, ignored
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from agri_advisor.ingestion.market_client import MarketFeedError, MarketPriceClient
from agri_advisor.market.insights import (
    CommodityInsight,
    PricePoint,
    build_insights,
    simulate_price_history,
    sort_insights,
)
from agri_advisor.models.market import MarketRecord
from agri_advisor.taxonomy.selection_taxonomy import PriceSortOrder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchToken:
    """Identifies one in-flight request and the selection it was made for."""

    generation: int
    state:      str
    district:   Optional[str]


class MarketPanelState:
    """Selection, loaded records, and display state for the market panel."""

    def __init__(self, sort_order: str = PriceSortOrder.PRICE_DESC) -> None:
        self.state: str = ""
        self.district: str = ""
        self.sort_order: str = sort_order
        self.records: list[MarketRecord] = []
        self.error: Optional[str] = None
        self.loading: bool = False
        self.selected_commodity: Optional[str] = None
        self._generation = 0

    # ── Selection ──────────────────────────────────────────────────────────────

    def select(self, state: Optional[str] = None, district: Optional[str] = None) -> None:
        """Change state and/or district; invalidates any in-flight request.

        A new state clears the district. Either change clears the selected
        commodity and the loading flag.
        """
        changed = False
        if state is not None and state != self.state:
            self.state = state
            self.district = ""
            changed = True
        if district is not None and district != self.district:
            self.district = district
            changed = True
        if changed:
            self._generation += 1
            self.selected_commodity = None
            self.loading = False

    def select_commodity(self, commodity: Optional[str]) -> None:
        self.selected_commodity = commodity

    # ── Fetch lifecycle ────────────────────────────────────────────────────────

    @property
    def needs_fetch(self) -> bool:
        return bool(self.state)

    def begin_fetch(self) -> FetchToken:
        """Mark a request as started for the current selection."""
        self.loading = True
        self.error = None
        return FetchToken(self._generation, self.state, self.district or None)

    def is_current(self, token: FetchToken) -> bool:
        return token.generation == self._generation

    def complete_fetch(self, token: FetchToken, records: list[MarketRecord]) -> bool:
        """Store ``records`` if ``token`` is still current. Returns whether it was."""
        if not self.is_current(token):
            logger.debug("Ignoring stale market response for %s/%s", token.state, token.district)
            return False
        self.records = list(records)
        self.loading = False
        return True

    def fail_fetch(self, token: FetchToken, message: str) -> bool:
        """Store an error message if ``token`` is still current."""
        if not self.is_current(token):
            logger.debug("Ignoring stale market error for %s/%s", token.state, token.district)
            return False
        self.records = []
        self.error = message
        self.loading = False
        return True

    def refresh(self, client: MarketPriceClient) -> bool:
        """Synchronously fetch for the current selection via ``client``.

        Returns ``True`` when the panel was updated (with data or an error).
        """
        if not self.needs_fetch:
            return False
        token = self.begin_fetch()
        try:
            response = client.get_prices(token.state, token.district)
        except MarketFeedError as exc:
            return self.fail_fetch(token, exc.user_message)
        return self.complete_fetch(token, response.records)

    # ── Derived views ──────────────────────────────────────────────────────────

    def insights(self, today: Optional[date] = None) -> list[CommodityInsight]:
        if not self.records:
            return []
        return sort_insights(build_insights(self.records, today), self.sort_order)

    def selected_history(self, today: Optional[date] = None) -> list[PricePoint]:
        """Simulated trend for the selected commodity; empty when none is selected."""
        if self.selected_commodity is None:
            return []
        for insight in self.insights(today):
            if insight.commodity == self.selected_commodity:
                return simulate_price_history(
                    insight.modal_price, insight.history_seed, today
                )
        return []
