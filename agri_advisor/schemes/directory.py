"""
Government schemes directory: keyword search and category grouping.

Search is a case-insensitive substring match against the scheme name, its
description, or any of its tags. An empty query matches every scheme.
Grouping preserves the order in which categories first appear.
"""

from __future__ import annotations

from typing import Iterable

from agri_advisor.models.scheme import Scheme


def matches_query(scheme: Scheme, query: str) -> bool:
    needle = query.lower()
    return (
        needle in scheme.name.lower()
        or needle in scheme.description.lower()
        or any(needle in tag.lower() for tag in scheme.tags)
    )


def search_schemes(schemes: Iterable[Scheme], query: str = "") -> list[Scheme]:
    """Schemes whose name, description or a tag contains ``query``."""
    return [s for s in schemes if matches_query(s, query)]


def group_by_category(schemes: Iterable[Scheme]) -> dict[str, list[Scheme]]:
    """category → schemes, categories in first-appearance order."""
    groups: dict[str, list[Scheme]] = {}
    for scheme in schemes:
        groups.setdefault(scheme.category, []).append(scheme)
    return groups
