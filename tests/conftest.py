"""
Shared pytest fixtures for the Agri Advisor test suite.

Provides:
  - ``reference_data``: A small in-memory ``ReferenceData`` bundle whose
    catalog ranges are chosen so filtering does not depend on the hash
    values of any particular selection (ranges are either the full [0, 1]
    interval or one no derived index can reach).
  - ``complete_selection``: A selection inside that bundle.
  - Market record factories.
"""

from __future__ import annotations

from types import MappingProxyType

import pytest

from agri_advisor.models.crop import CropCatalogEntry, CropDetailRecord
from agri_advisor.models.market import MarketRecord
from agri_advisor.models.scheme import Scheme
from agri_advisor.models.selection import Selection
from agri_advisor.reference.loader import ReferenceData

# Always contains the derived index.
FULL = (0.0, 1.0)
# Never contains it: vdli >= 0.10, smi >= 0.25 and mhi >= 0.40 after adjustment.
NEVER = (0.0, 0.05)


def make_entry(name: str, vdli=FULL, smi=FULL, mhi=FULL) -> CropCatalogEntry:
    return CropCatalogEntry(name=name, vdli=vdli, smi=smi, mhi=mhi)


def make_details(profit: float, investment: float = 10_000.0, **kwargs) -> CropDetailRecord:
    return CropDetailRecord(
        soil=kwargs.pop("soil", ["Loamy"]),
        water=kwargs.pop("water", "Moderate"),
        avg_yield_kg_per_acre=kwargs.pop("avg_yield_kg_per_acre", 1_500.0),
        investment_per_acre=investment,
        avg_profit_per_acre=profit,
        **kwargs,
    )


def make_record(
    commodity: str = "Wheat",
    market: str = "Khanna",
    modal_price: int = 2_325,
) -> MarketRecord:
    return MarketRecord(commodity=commodity, market=market, modal_price=modal_price)


# ── Reference data fixture ────────────────────────────────────────────────────

@pytest.fixture
def reference_data() -> ReferenceData:
    """Ludhiana grows Rice / Wheat / Groundnut / Cotton / Mango.

    Expected ranking for any complete Ludhiana selection:
      1. Wheat     (25 000, 2 of 3 ranges)
      2. Mango     (25 000, tie keeps catalog order)
      3. Paddy     (22 000, eligible through the "Rice" alias)
      4. Groundnut (no detail record, profit 0)
    Cotton matches one range only; Maize is not grown in Ludhiana.
    """
    catalog = (
        make_entry("Paddy"),
        make_entry("Wheat", mhi=NEVER),
        make_entry("Groundnut"),
        make_entry("Cotton", smi=NEVER, mhi=NEVER),
        make_entry("Maize"),
        make_entry("Mango"),
    )
    details = {
        "paddy": make_details(22_000, fertilizers={"Basal": ["DAP", "MOP"]}),
        "wheat": make_details(25_000, pests=["Aphids"], tips="Sow by mid-November."),
        "cotton": make_details(40_000),
        "maize": make_details(30_000),
        "mango": make_details(25_000),
    }
    schemes = (
        Scheme(category="Income", name="PM-Kisan", desc="Income support.",
               link="https://pmkisan.gov.in/", tags=("income",)),
        Scheme(category="Insurance", name="PMFBY", desc="Crop insurance.",
               link="https://pmfby.gov.in/", tags=("insurance", "risk")),
        Scheme(category="Income", name="KCC", desc="Low-interest credit.",
               link="https://www.nabard.org/", tags=("credit", "loan")),
    )
    return ReferenceData(
        region_districts=MappingProxyType({
            "Punjab": ("Amritsar", "Ludhiana"),
            "Karnataka": ("Mysuru",),
        }),
        district_crops=MappingProxyType({
            "Ludhiana": ("Rice", "wheat", "Groundnut", "Cotton", " MANGO "),
            "Amritsar": (),
            "Mysuru": ("Maize",),
        }),
        crop_catalog=catalog,
        crop_details=MappingProxyType(details),
        schemes=schemes,
    )


@pytest.fixture
def complete_selection() -> Selection:
    return Selection(state="Punjab", district="Ludhiana", season="Rabi", water_source="Canal")
