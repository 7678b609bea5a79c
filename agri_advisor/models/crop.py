"""
Crop reference models.

``CropCatalogEntry`` carries the index ranges a crop tolerates; the catalog
is keyed by free-form crop name. ``CropDetailRecord`` carries the agronomic
and economic attributes shown on a recommendation card; the detail table is
keyed by canonical crop key (see ``agri_advisor.reference.aliases``).

Both models are frozen and parsed straight from the reference JSON files,
so ``CropDetailRecord`` accepts the camelCase keys those files use.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

IndexRange = tuple[float, float]


class CropCatalogEntry(BaseModel):
    """A crop with its inclusive vdli / smi / mhi tolerance ranges."""

    model_config = ConfigDict(frozen=True)

    name: str
    vdli: IndexRange
    smi: IndexRange
    mhi: IndexRange

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Crop name must not be blank.")
        return v

    @field_validator("vdli", "smi", "mhi")
    @classmethod
    def validate_range(cls, v: IndexRange) -> IndexRange:
        lo, hi = v
        if lo > hi:
            raise ValueError(f"Range minimum {lo} is greater than maximum {hi}.")
        return v


class CropDetailRecord(BaseModel):
    """Agronomic detail for one canonical crop.

    Attributes:
        soil: Suitable soil types.
        water: Water requirement description.
        avg_yield_kg_per_acre: Typical yield.
        investment_per_acre: Typical cultivation cost (INR).
        avg_profit_per_acre: Typical net profit (INR); drives ranking.
        fertilizers: Free text, or growth stage → product(s).
        pests: Common pests (list or free text).
        tips: Cultivation tips (list or free text).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    soil: list[str] = []
    water: str = ""
    avg_yield_kg_per_acre: float = Field(0.0, alias="avgYieldKgPerAcre")
    investment_per_acre: float = Field(0.0, alias="investmentPerAcre")
    avg_profit_per_acre: float = Field(0.0, alias="avgProfitPerAcre")
    fertilizers: Optional[Union[str, dict[str, Union[list[str], str]]]] = None
    pests: Optional[Union[list[str], str]] = None
    tips: Optional[Union[list[str], str]] = None

    @property
    def cost_share(self) -> float:
        """Investment as a fraction of investment + profit (0 when both are 0)."""
        total = self.investment_per_acre + self.avg_profit_per_acre
        if total <= 0:
            return 0.0
        return min(1.0, self.investment_per_acre / total)
