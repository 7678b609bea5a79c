"""
Recommendation ranker: filters the crop catalog for a selection and ranks
the survivors by profitability.

Usage flow
----------
1. derive_indices(selection)                         (scorer)
   -> IndexTriple

2. filter_candidates(catalog, indices, eligible_names)
   -> list[CropCatalogEntry]  (district eligible AND >= 2 range hits)

3. rank_by_profit(candidates, crop_details)
   -> list[CropCatalogEntry]  (profit descending, stable on ties)

``recommend()`` runs all three; ``recommend_with_details()`` additionally
pairs each entry with its detail record for rendering.

Entries without a detail record
-------------------------------
A catalog entry whose canonical key has no detail record is kept through
filtering and ranking with profit 0, so it sorts after every profitable
crop. Renderers skip it (``RankedCrop.is_renderable`` is False).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from agri_advisor.models.crop import CropCatalogEntry, CropDetailRecord, IndexRange
from agri_advisor.models.selection import Selection
from agri_advisor.recommendations.scorer import IndexTriple, derive_indices
from agri_advisor.reference.aliases import canonical_crop_key, lookup_by_crop_name
from agri_advisor.reference.loader import ReferenceData

logger = logging.getLogger(__name__)

MIN_RANGE_MATCHES = 2


@dataclass(frozen=True)
class RankedCrop:
    """A recommended catalog entry with the data a card needs.

    Attributes:
        entry:   The catalog entry that passed filtering.
        details: Detail record looked up through the alias table, or ``None``.
        rank:    1-based position in the ranked list.
        matches: How many of the three index ranges contained the index.
    """

    entry:   CropCatalogEntry
    details: Optional[CropDetailRecord]
    rank:    int
    matches: int

    @property
    def profit(self) -> float:
        return self.details.avg_profit_per_acre if self.details else 0.0

    @property
    def is_renderable(self) -> bool:
        return self.details is not None


def in_range(value: float, bounds: IndexRange) -> bool:
    """Inclusive range membership."""
    lo, hi = bounds
    return lo <= value <= hi


def count_range_matches(entry: CropCatalogEntry, indices: IndexTriple) -> int:
    """Number of the entry's three ranges that contain the derived index."""
    return (
        int(in_range(indices.vdli, entry.vdli))
        + int(in_range(indices.smi, entry.smi))
        + int(in_range(indices.mhi, entry.mhi))
    )


def is_district_eligible(entry: CropCatalogEntry, eligible_names: Iterable[str]) -> bool:
    """True if any eligible name normalises to the entry's canonical key."""
    key = canonical_crop_key(entry.name)
    if key is None:
        return False
    return any(canonical_crop_key(name) == key for name in eligible_names)


def filter_candidates(
    catalog:        Sequence[CropCatalogEntry],
    indices:        IndexTriple,
    eligible_names: Iterable[str],
) -> list[CropCatalogEntry]:
    """Keep district-eligible entries with at least two range hits, in catalog order."""
    eligible_keys = {
        key for key in (canonical_crop_key(n) for n in eligible_names) if key
    }
    return [
        entry
        for entry in catalog
        if canonical_crop_key(entry.name) in eligible_keys
        and count_range_matches(entry, indices) >= MIN_RANGE_MATCHES
    ]


def profit_for(entry: CropCatalogEntry, crop_details: Mapping[str, CropDetailRecord]) -> float:
    """``avg_profit_per_acre`` of the entry's detail record, 0 when there is none."""
    details = lookup_by_crop_name(entry.name, crop_details)
    return details.avg_profit_per_acre if details else 0.0


def rank_by_profit(
    candidates:   Sequence[CropCatalogEntry],
    crop_details: Mapping[str, CropDetailRecord],
) -> list[CropCatalogEntry]:
    """Sort by profit descending. Ties keep catalog order (stable sort)."""
    return sorted(candidates, key=lambda e: -profit_for(e, crop_details))


def recommend(
    selection: Selection,
    data:      ReferenceData,
    indices:   Optional[IndexTriple] = None,
) -> list[CropCatalogEntry]:
    """Return the ranked crop recommendations for ``selection``.

    Returns an empty list, without computing anything, when any selection
    field is empty. Unknown districts and unknown crop names simply yield
    fewer (or no) results.

    ``indices`` may be passed by a caller that already derived them for
    this selection; otherwise they are derived here.
    """
    if not selection.is_complete:
        return []

    if indices is None:
        indices = derive_indices(selection)
    candidates = filter_candidates(
        data.crop_catalog, indices, data.eligible_crops_for(selection.district)
    )
    ranked = rank_by_profit(candidates, data.crop_details)
    logger.debug(
        "recommend(%s): indices=%s candidates=%d",
        selection.seed, indices.as_dict(), len(ranked),
    )
    return ranked


def recommend_with_details(
    selection: Selection,
    data:      ReferenceData,
    indices:   Optional[IndexTriple] = None,
) -> list[RankedCrop]:
    """Same sequence as ``recommend()``, each entry paired with its detail record."""
    if not selection.is_complete:
        return []

    if indices is None:
        indices = derive_indices(selection)
    return [
        RankedCrop(
            entry=entry,
            details=lookup_by_crop_name(entry.name, data.crop_details),
            rank=rank,
            matches=count_range_matches(entry, indices),
        )
        for rank, entry in enumerate(recommend(selection, data, indices), start=1)
    ]
