"""
Static reference data loader: JSON → frozen typed mappings.

Files (all under ``[data] data_dir``, names configurable)
---------------------------------------------------------
india_districts.json   {"<state>": ["<district>", ...], ...}
district_crops.json    {"<district>": ["<crop name, any spelling>", ...], ...}
crop_library.json      {"crop_library": [{"name", "vdli", "smi", "mhi"}, ...]}
crop_master.json       {"<canonical crop key>": {<CropDetailRecord fields>}, ...}
schemes.json           [{"category", "name", "desc", "link", "tags"}, ...]

The datasets are loaded wholesale at start-up and never mutated.

Validation rules
----------------
- Every top-level container must have the documented shape.
- Catalog ranges must satisfy ``min <= max``.
- Duplicate scheme names are rejected.

Any violation raises ``ValueError`` naming the offending entry.

Tolerated with a WARNING
------------------------
- Catalog entries sharing a canonical key ("Rice" and "Paddy"). Both are
  kept and both go through filtering and ranking.
- Detail keys that are not canonical (``canonical_crop_key(k) != k``). The
  record is kept under its raw key, so canonical lookups will not find it.

Usage
-----
    from agri_advisor.reference.loader import load_reference_data

    data = load_reference_data(config)
    data.district_crops["Ludhiana"]
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

from pydantic import ValidationError

from agri_advisor.models.crop import CropCatalogEntry, CropDetailRecord
from agri_advisor.models.scheme import Scheme
from agri_advisor.reference.aliases import canonical_crop_key

if TYPE_CHECKING:
    from agri_advisor.config import AppConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceData:
    """All static inputs needed by the three panels.

    Attributes:
        region_districts: state → ordered district names.
        district_crops:   district → crop names grown locally (any spelling).
        crop_catalog:     catalog entries in file order.
        crop_details:     canonical crop key → detail record.
        schemes:          scheme directory in file order.
    """

    region_districts: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    district_crops: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    crop_catalog: tuple[CropCatalogEntry, ...] = ()
    crop_details: Mapping[str, CropDetailRecord] = field(
        default_factory=lambda: MappingProxyType({})
    )
    schemes: tuple[Scheme, ...] = ()

    def districts_for(self, state: str) -> tuple[str, ...]:
        """Districts of ``state``; empty when the state is unknown."""
        return self.region_districts.get(state, ())

    def eligible_crops_for(self, district: str) -> tuple[str, ...]:
        """Crop names grown in ``district``; empty when the district is unknown."""
        return self.district_crops.get(district, ())


# ── File helpers ──────────────────────────────────────────────────────────────

def _read_json(path: Path) -> Any:
    """Read and parse a JSON file, raising FileNotFoundError when absent."""
    if not path.exists():
        raise FileNotFoundError(f"Reference data file not found: {path}")
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _string_list_mapping(raw: Any, label: str) -> Mapping[str, tuple[str, ...]]:
    """Validate a ``{str: [str, ...]}`` mapping and freeze it."""
    if not isinstance(raw, dict):
        raise ValueError(f"{label}: expected a JSON object at the top level.")
    out: dict[str, tuple[str, ...]] = {}
    for key, values in raw.items():
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ValueError(f"{label}: entry '{key}' must be a list of strings.")
        out[key] = tuple(values)
    return MappingProxyType(out)


# ── Parsers (pure, also used by tests) ────────────────────────────────────────

def parse_region_districts(raw: Any) -> Mapping[str, tuple[str, ...]]:
    return _string_list_mapping(raw, "region districts")


def parse_district_crops(raw: Any) -> Mapping[str, tuple[str, ...]]:
    return _string_list_mapping(raw, "district crops")


def parse_crop_catalog(raw: Any) -> tuple[CropCatalogEntry, ...]:
    """Validate the crop catalog and return its entries in file order."""
    if isinstance(raw, dict):
        raw = raw.get("crop_library")
    if not isinstance(raw, list):
        raise ValueError("crop catalog: expected a 'crop_library' list.")

    entries: list[CropCatalogEntry] = []
    seen: dict[str, str] = {}
    for i, rec in enumerate(raw):
        try:
            entry = CropCatalogEntry.model_validate(rec)
        except ValidationError as exc:
            raise ValueError(f"crop catalog: invalid entry at index {i}: {exc}") from exc
        key = canonical_crop_key(entry.name)
        if key in seen:
            log.warning(
                "crop catalog: '%s' at index %d shares canonical key '%s' with '%s'",
                entry.name, i, key, seen[key],
            )
        else:
            seen[key] = entry.name
        entries.append(entry)
    return tuple(entries)


def parse_crop_details(raw: Any) -> Mapping[str, CropDetailRecord]:
    """Validate the detail table, keyed by canonical crop key."""
    if not isinstance(raw, dict):
        raise ValueError("crop details: expected a JSON object at the top level.")
    out: dict[str, CropDetailRecord] = {}
    for key, rec in raw.items():
        if canonical_crop_key(key) != key:
            log.warning(
                "crop details: key '%s' is not canonical (expected '%s'); "
                "it will not match any crop name",
                key, canonical_crop_key(key),
            )
        try:
            out[key] = CropDetailRecord.model_validate(rec)
        except ValidationError as exc:
            raise ValueError(f"crop details: invalid record '{key}': {exc}") from exc
    return MappingProxyType(out)


def parse_schemes(raw: Any) -> tuple[Scheme, ...]:
    """Validate the scheme directory and return schemes in file order."""
    if not isinstance(raw, list):
        raise ValueError("schemes: expected a JSON list at the top level.")
    schemes: list[Scheme] = []
    seen: set[str] = set()
    for i, rec in enumerate(raw):
        try:
            scheme = Scheme.model_validate(rec)
        except ValidationError as exc:
            raise ValueError(f"schemes: invalid entry at index {i}: {exc}") from exc
        if scheme.name in seen:
            raise ValueError(f"schemes: duplicate scheme '{scheme.name}' at index {i}.")
        seen.add(scheme.name)
        schemes.append(scheme)
    return tuple(schemes)


# ── Loaders ───────────────────────────────────────────────────────────────────

def load_region_districts(path: Path) -> Mapping[str, tuple[str, ...]]:
    return parse_region_districts(_read_json(path))


def load_district_crops(path: Path) -> Mapping[str, tuple[str, ...]]:
    return parse_district_crops(_read_json(path))


def load_crop_catalog(path: Path) -> tuple[CropCatalogEntry, ...]:
    return parse_crop_catalog(_read_json(path))


def load_crop_details(path: Path) -> Mapping[str, CropDetailRecord]:
    return parse_crop_details(_read_json(path))


def load_schemes(path: Path) -> tuple[Scheme, ...]:
    return parse_schemes(_read_json(path))


def load_reference_data(
    config: "AppConfig",
    root: Optional[Path] = None,
) -> ReferenceData:
    """Load every reference dataset named in ``config.data``.

    Args:
        config: Application config.
        root:   Base directory for a relative ``data_dir``. Defaults to the
                project root.

    Returns:
        Frozen ``ReferenceData`` bundle.

    Raises:
        FileNotFoundError: If any configured file is missing.
        ValueError: If any file fails validation.
    """
    if root is None:
        from agri_advisor.config import find_project_root

        root = find_project_root()

    data_cfg = config.data
    data = ReferenceData(
        region_districts=load_region_districts(
            data_cfg.path_for(data_cfg.region_districts_file, root)
        ),
        district_crops=load_district_crops(
            data_cfg.path_for(data_cfg.district_crops_file, root)
        ),
        crop_catalog=load_crop_catalog(
            data_cfg.path_for(data_cfg.crop_catalog_file, root)
        ),
        crop_details=load_crop_details(
            data_cfg.path_for(data_cfg.crop_details_file, root)
        ),
        schemes=load_schemes(data_cfg.path_for(data_cfg.schemes_file, root)),
    )
    log.info(
        "Loaded reference data: %d states, %d districts, %d catalog crops, "
        "%d detail records, %d schemes",
        len(data.region_districts),
        len(data.district_crops),
        len(data.crop_catalog),
        len(data.crop_details),
        len(data.schemes),
    )
    return data
