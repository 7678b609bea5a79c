"""
Tests for the pydantic models under agri_advisor/models/.

What we test
------------
Selection:
  - Defaults to empty (not complete); seed joins the fields with "-".
  - Rejects unknown seasons / water sources, accepts "".
  - Frozen.

CropCatalogEntry / CropDetailRecord:
  - Range min <= max; blank names rejected.
  - camelCase aliases and snake_case names both accepted.
  - cost_share bounded to [0, 1].

MarketRecord / Scheme:
  - modal_price must be positive.
  - Scheme accepts "desc" or "description".
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from agri_advisor.models.crop import CropCatalogEntry, CropDetailRecord
from agri_advisor.models.market import MarketRecord
from agri_advisor.models.scheme import Scheme
from agri_advisor.models.selection import Selection
from agri_advisor.taxonomy.selection_taxonomy import Season, WaterSource


class TestSelection:
    def test_empty_default(self):
        s = Selection()
        assert not s.is_complete
        assert s.seed == "---"

    def test_complete(self, complete_selection):
        assert complete_selection.is_complete

    @pytest.mark.parametrize("field", ["state", "district", "season", "water_source"])
    def test_any_empty_field_incomplete(self, complete_selection, field):
        assert not complete_selection.model_copy(update={field: ""}).is_complete

    def test_enum_values_accepted(self):
        s = Selection(season=Season.ZAID, water_source=WaterSource.TANK)
        assert s.season == "Zaid"
        assert s.water_source == "Tank"

    def test_unknown_season(self):
        with pytest.raises(ValidationError):
            Selection(season="Monsoon")

    def test_unknown_water_source(self):
        with pytest.raises(ValidationError):
            Selection(water_source="River")

    def test_frozen(self, complete_selection):
        with pytest.raises(ValidationError):
            complete_selection.state = "Karnataka"  # type: ignore[misc]


class TestCropCatalogEntry:
    def test_valid(self):
        e = CropCatalogEntry(name="Wheat", vdli=[0.2, 0.6], smi=(0.4, 0.9), mhi=(0.5, 0.5))
        assert e.vdli == (0.2, 0.6)

    def test_inverted_range(self):
        with pytest.raises(ValidationError):
            CropCatalogEntry(name="Wheat", vdli=(0.6, 0.2), smi=(0, 1), mhi=(0, 1))

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            CropCatalogEntry(name="  ", vdli=(0, 1), smi=(0, 1), mhi=(0, 1))


class TestCropDetailRecord:
    def test_camel_case_alias(self):
        d = CropDetailRecord.model_validate(
            {"avgYieldKgPerAcre": 2000, "investmentPerAcre": 30000, "avgProfitPerAcre": 10000}
        )
        assert d.avg_yield_kg_per_acre == 2000
        assert d.cost_share == pytest.approx(0.75)

    def test_snake_case_name(self):
        d = CropDetailRecord(avg_profit_per_acre=5000)
        assert d.avg_profit_per_acre == 5000

    def test_cost_share_zero_total(self):
        assert CropDetailRecord().cost_share == 0.0

    def test_cost_share_capped(self):
        assert CropDetailRecord(investment_per_acre=100, avg_profit_per_acre=-50).cost_share == 1.0


class TestMarketRecord:
    def test_positive_price(self):
        assert MarketRecord(commodity="Onion", market="Pune", modal_price=1).modal_price == 1

    @pytest.mark.parametrize("price", [0, -10])
    def test_non_positive_rejected(self, price):
        with pytest.raises(ValidationError):
            MarketRecord(commodity="Onion", market="Pune", modal_price=price)


class TestScheme:
    def test_desc_or_description(self):
        a = Scheme(category="C", name="N", desc="D", link="L")
        b = Scheme(category="C", name="N", description="D", link="L")
        assert a == b
        assert a.tags == ()
