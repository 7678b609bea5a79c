"""
Categorical vocabularies used by the recommendation and market panels.

  - ``Season``       — cropping season selected by the farmer.
  - ``WaterSource``  — irrigation source selected by the farmer.
  - ``PriceSortOrder`` — ordering options for the market insights list.

Values are the exact display strings the selectors emit; they also feed the
recommendation seed, so renaming a value changes every derived index.

This module has NO imports from any other ``agri_advisor`` package.
"""

from enum import StrEnum


class Season(StrEnum):
    """Indian cropping season."""

    KHARIF = "Kharif"
    """Monsoon crop, sown June–July."""

    RABI = "Rabi"
    """Winter crop, sown October–November."""

    ZAID = "Zaid"
    """Short summer crop between Rabi harvest and Kharif sowing."""


class WaterSource(StrEnum):
    """Primary irrigation source for the plot."""

    CANAL = "Canal"
    BOREWELL = "Borewell"
    RAINFED = "Rainfed"
    TANK = "Tank"


class PriceSortOrder(StrEnum):
    """Sort options for the market insights list."""

    PRICE_DESC = "price_desc"
    PRICE_ASC = "price_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
