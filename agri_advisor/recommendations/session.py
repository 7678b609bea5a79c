"""
Recommendation panel state: the current selection plus its derived results.

``RecommendationSession`` is the explicit replacement for UI-framework state
hooks. It owns one ``Selection``; every change goes through ``select()``,
which builds a new selection, recomputes indices and results, and notifies
listeners. There is no other mutable state.

    session = RecommendationSession(data)
    session.subscribe(lambda s: print(len(s.results)))
    session.select(state="Punjab")          # district cleared, results []
    session.select(district="Ludhiana", season="Rabi", water_source="Canal")
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from agri_advisor.models.selection import Selection
from agri_advisor.recommendations.ranker import RankedCrop, recommend_with_details
from agri_advisor.recommendations.scorer import IndexTriple, derive_indices
from agri_advisor.reference.loader import ReferenceData

logger = logging.getLogger(__name__)

Listener = Callable[["RecommendationSession"], None]

_FIELDS = ("state", "district", "season", "water_source")


class RecommendationSession:
    """Holds the current selection and recomputes results on every change."""

    def __init__(self, data: ReferenceData, selection: Optional[Selection] = None) -> None:
        self._data = data
        self._listeners: list[Listener] = []
        self._selection = selection or Selection()
        self._indices: Optional[IndexTriple] = None
        self._results: list[RankedCrop] = []
        self._recompute()

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def indices(self) -> Optional[IndexTriple]:
        """Derived indices, or ``None`` while the selection is incomplete."""
        return self._indices

    @property
    def results(self) -> list[RankedCrop]:
        return list(self._results)

    @property
    def renderable_results(self) -> list[RankedCrop]:
        """Results that have a detail record and can be shown as cards."""
        return [r for r in self._results if r.is_renderable]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def select(self, **changes: str) -> Selection:
        """Apply field changes and recompute.

        Changing ``state`` clears ``district`` unless a district is passed in
        the same call. Passing unchanged values does not notify listeners.

        Raises:
            TypeError: On an unknown field name.
            pydantic.ValidationError: On an invalid season or water source.
        """
        unknown = set(changes) - set(_FIELDS)
        if unknown:
            raise TypeError(f"Unknown selection field(s): {sorted(unknown)}")

        values = self._selection.model_dump()
        if "state" in changes and changes["state"] != values["state"]:
            values["district"] = ""
        values.update(changes)

        new_selection = Selection(**values)
        if new_selection == self._selection:
            return self._selection

        self._selection = new_selection
        self._recompute()
        for listener in list(self._listeners):
            listener(self)
        return self._selection

    def reset(self) -> None:
        """Clear every field."""
        self.select(state="", district="", season="", water_source="")

    def _recompute(self) -> None:
        if self._selection.is_complete:
            self._indices = derive_indices(self._selection)
        else:
            self._indices = None
        self._results = recommend_with_details(self._selection, self._data, self._indices)
        logger.debug(
            "Selection %s -> %d result(s)", self._selection.seed, len(self._results)
        )
