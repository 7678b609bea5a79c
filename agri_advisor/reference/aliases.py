"""
Crop name normalisation.

The eligibility, catalog and detail datasets spell crops differently
("Rice", "paddy", "Bajra", "pearl millet", ...). Every lookup across them
goes through ``canonical_crop_key()``:

  1. lower-case the name,
  2. remove all whitespace,
  3. map through ``CROP_ALIASES``; names with no alias map to themselves.

So ``"Rice"``, ``"rice"`` and ``"RICE "`` all resolve to ``"paddy"``.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, TypeVar

T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")

# spelling (normalised) → canonical key
CROP_ALIASES: Mapping[str, str] = {
    "paddy": "paddy", "rice": "paddy",
    "jowar": "sorghum", "sorghum": "sorghum",
    "bajra": "pearl_millet", "millet": "pearl_millet", "millets": "pearl_millet",
    "ragi": "ragi", "maize": "maize", "corn": "maize",
    "wheat": "wheat",
    "gram": "chickpea", "chana": "chickpea", "chickpea": "chickpea",
    "tur": "pigeonpea", "arhar": "pigeonpea", "pigeonpea": "pigeonpea",
    "moong": "moong", "urad": "urad", "masoor": "lentil",
    "potato": "potato", "onion": "onion", "garlic": "garlic", "tomato": "tomato",
    "brinjal": "brinjal", "eggplant": "brinjal",
    "ladyfinger": "okra", "okra": "okra", "bhindi": "okra",
    "chilli": "chillies", "chillies": "chillies",
    "cabbage": "cabbage", "cauliflower": "cauliflower",
    "spinach": "spinach", "coriander": "coriander",
    "fenugreek": "fenugreek", "methi": "fenugreek",
    "carrot": "carrot", "beetroot": "beetroot", "radish": "radish",
    "capsicum": "capsicum", "bellpepper": "capsicum",
    "pumpkin": "pumpkin", "bittergourd": "bitter_gourd",
    "ridgegourd": "ridge_gourd", "snakegourd": "snake_gourd",
    "banana": "banana", "mango": "mango", "guava": "guava",
    "papaya": "papaya", "grapes": "grapes", "apple": "apple",
    "orange": "citrus", "lemon": "citrus", "citrus": "citrus",
    "watermelon": "watermelon", "muskmelon": "muskmelon",
    "turmeric": "turmeric", "ginger": "ginger",
    "cotton": "cotton", "sugarcane": "sugarcane",
}


def canonical_crop_key(name: Optional[str]) -> Optional[str]:
    """Return the canonical key for a crop spelling, or ``None`` for empty input."""
    if not name:
        return None
    normalized = _WHITESPACE.sub("", name.lower())
    if not normalized:
        return None
    return CROP_ALIASES.get(normalized, normalized)


def lookup_by_crop_name(name: Optional[str], table: Mapping[str, T]) -> Optional[T]:
    """Look up ``table`` (keyed by canonical key) using any crop spelling."""
    key = canonical_crop_key(name)
    if key is None:
        return None
    return table.get(key)
