"""
Market price models.

``MarketRecord`` is one row of the data.gov.in daily mandi price feed after
parsing. Only records with a positive integer ``modal_price`` are ever
constructed; raw rows that fail to parse are dropped by the client.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class MarketRecord(BaseModel):
    """A single commodity price report from one market.

    Attributes:
        commodity: Commodity name as reported, e.g. ``"Onion"``.
        market: Market (mandi) name.
        modal_price: Most common traded price, INR per quintal (> 0).
        state: Reporting state.
        district: Reporting district.
        variety: Commodity variety, if reported.
        arrival_date: Report date as given by the feed (``dd/mm/yyyy``).
        min_price: Raw minimum price string, if reported.
        max_price: Raw maximum price string, if reported.
    """

    model_config = ConfigDict(frozen=True)

    commodity: str
    market: str
    modal_price: int
    state: str = ""
    district: str = ""
    variety: Optional[str] = None
    arrival_date: Optional[str] = None
    min_price: Optional[str] = None
    max_price: Optional[str] = None

    @field_validator("modal_price")
    @classmethod
    def validate_modal_price(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"modal_price must be positive, got {v}.")
        return v
