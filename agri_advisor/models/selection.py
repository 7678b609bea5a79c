"""
Farmer selection model for the crop recommendation panel.

``Selection`` is the four-way categorical input (state, district, season,
water source). An empty string in any field means "not selected yet"; such a
selection is *not ready* and yields no recommendations. It is not an error.

The model is frozen: changing any field produces a new ``Selection`` and
invalidates every result derived from the previous one.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from agri_advisor.taxonomy.selection_taxonomy import Season, WaterSource

_VALID_SEASONS: frozenset[str] = frozenset(s.value for s in Season)
_VALID_WATER_SOURCES: frozenset[str] = frozenset(w.value for w in WaterSource)


class Selection(BaseModel):
    """Current selector values.

    Attributes:
        state: Region (Indian state) name, e.g. ``"Punjab"``.
        district: Subregion name within ``state``, e.g. ``"Ludhiana"``.
        season: One of ``Season`` values, or ``""``.
        water_source: One of ``WaterSource`` values, or ``""``.
    """

    model_config = ConfigDict(frozen=True)

    state: str = ""
    district: str = ""
    season: str = ""
    water_source: str = ""

    @field_validator("season")
    @classmethod
    def validate_season(cls, v: str) -> str:
        if v and v not in _VALID_SEASONS:
            raise ValueError(
                f"Unknown season '{v}'. Must be one of {sorted(_VALID_SEASONS)}."
            )
        return v

    @field_validator("water_source")
    @classmethod
    def validate_water_source(cls, v: str) -> str:
        if v and v not in _VALID_WATER_SOURCES:
            raise ValueError(
                f"Unknown water source '{v}'. "
                f"Must be one of {sorted(_VALID_WATER_SOURCES)}."
            )
        return v

    @property
    def is_complete(self) -> bool:
        """``True`` when all four fields are non-empty."""
        return bool(self.state and self.district and self.season and self.water_source)

    @property
    def seed(self) -> str:
        """Base seed string shared by the three index derivations."""
        return f"{self.state}-{self.district}-{self.season}-{self.water_source}"
