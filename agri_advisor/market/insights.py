"""
Market insights: per-commodity price summary for the market panel.

Pipeline
--------
1. unique_by_commodity(records)
   One record per commodity. When a commodity is reported by several
   markets the *last* report wins, but the commodity keeps the position of
   its *first* appearance.

2. build_insights(records, today)
   For each unique record, a simulated 30-day history is generated and the
   modal price is compared with the mean of the 7 days before today:
       change_pct = (modal_price - avg_price) / avg_price * 100

3. sort_insights(insights, order)
   price_desc (default) | price_asc | name_asc | name_desc

Simulated history
-----------------
The feed only carries today's price, so the trend chart is a cosmetic
seeded random walk; it is not used for any decision. Seed = length of
``commodity + market``; generator = LCG
``r = (r * 9301 + 49297) % 233280``; each step moves the price by
``(r / 233280 - 0.5) * base * 0.1``, never below ``base * 0.8``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from agri_advisor.models.market import MarketRecord
from agri_advisor.taxonomy.selection_taxonomy import PriceSortOrder

HISTORY_DAYS = 30
AVERAGE_WINDOW_DAYS = 7

_LCG_MULTIPLIER = 9301
_LCG_INCREMENT = 49297
_LCG_MODULUS = 233280


@dataclass(frozen=True)
class PricePoint:
    """One day of the simulated price trend."""

    date:  date
    price: int


@dataclass(frozen=True)
class CommodityInsight:
    """A commodity's current price compared with its simulated 7-day average.

    Attributes:
        record:     The market record kept for this commodity.
        avg_price:  Mean simulated price of the 7 days before today.
        change_pct: Percentage change of modal price vs ``avg_price``.
    """

    record:     MarketRecord
    avg_price:  float
    change_pct: float

    @property
    def commodity(self) -> str:
        return self.record.commodity

    @property
    def market(self) -> str:
        return self.record.market

    @property
    def modal_price(self) -> int:
        return self.record.modal_price

    @property
    def history_seed(self) -> int:
        return history_seed(self.record)


def unique_by_commodity(records: Iterable[MarketRecord]) -> list[MarketRecord]:
    """Deduplicate by commodity name; last record wins, first position kept."""
    by_commodity: dict[str, MarketRecord] = {}
    for record in records:
        by_commodity[record.commodity] = record
    return list(by_commodity.values())


def history_seed(record: MarketRecord) -> int:
    """Seed for a record's simulated history."""
    return len(record.commodity + record.market)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def simulate_price_history(
    base_price: float,
    seed: int = 1,
    today: Optional[date] = None,
    days: int = HISTORY_DAYS,
) -> list[PricePoint]:
    """Seeded random walk of ``days + 1`` daily prices ending on ``today``."""
    if today is None:
        today = date.today()

    points: list[PricePoint] = []
    price = float(base_price)
    state = seed
    floor_price = base_price * 0.8

    for offset in range(days, -1, -1):
        state = (state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _LCG_MODULUS
        fluctuation = (state / _LCG_MODULUS - 0.5) * (base_price * 0.1)
        price = max(floor_price, price + fluctuation)
        points.append(
            PricePoint(date=today - timedelta(days=offset), price=_round_half_up(price))
        )
    return points


def trailing_average(history: list[PricePoint], window: int = AVERAGE_WINDOW_DAYS) -> float:
    """Mean price of the ``window`` points before the last (today's) point."""
    previous = history[-(window + 1):-1]
    if not previous:
        raise ValueError("History must contain at least two points.")
    return sum(p.price for p in previous) / len(previous)


def build_insights(
    records: Iterable[MarketRecord],
    today: Optional[date] = None,
) -> list[CommodityInsight]:
    """One ``CommodityInsight`` per commodity, in first-appearance order."""
    insights: list[CommodityInsight] = []
    for record in unique_by_commodity(records):
        history = simulate_price_history(record.modal_price, history_seed(record), today)
        avg_price = trailing_average(history)
        change_pct = (record.modal_price - avg_price) / avg_price * 100.0
        insights.append(
            CommodityInsight(record=record, avg_price=avg_price, change_pct=change_pct)
        )
    return insights


def sort_insights(
    insights: Iterable[CommodityInsight],
    order: str = PriceSortOrder.PRICE_DESC,
) -> list[CommodityInsight]:
    """Sort for display. Unknown orders fall back to price descending."""
    items = list(insights)
    if order == PriceSortOrder.PRICE_ASC:
        return sorted(items, key=lambda i: i.modal_price)
    if order == PriceSortOrder.NAME_ASC:
        return sorted(items, key=lambda i: i.commodity.casefold())
    if order == PriceSortOrder.NAME_DESC:
        return sorted(items, key=lambda i: i.commodity.casefold(), reverse=True)
    return sorted(items, key=lambda i: -i.modal_price)
