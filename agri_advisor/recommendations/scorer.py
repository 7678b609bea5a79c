"""
Deterministic index derivation: Selection → IndexTriple.

The three indices are a reproducible fingerprint of the selection, not a
measurement. They must be bit-for-bit identical on every platform and in
every independent implementation, so no language PRNG is involved.

Derivation
----------
1. Seed = ``"{state}-{district}-{season}-{water_source}"`` + per-index suffix:
       vdli → "vldi",  smi → "smi",  mhi → "mhi"
   ("vldi" is the historical suffix; changing it changes every vdli value.)

2. ``rolling_hash32(seed)``:
       h = 0
       for each UTF-16 code unit c:  h = (31 * h + c) mod 2**32
   i.e. the signed 32-bit multiply-add hash read back as unsigned.

3. ``seeded_value(seed, lo, hi)``:
       round_half_up(hash / 4294967295 * (hi - lo) + lo, 2)
   Nominal ranges:
       vdli  [0.10, 1.00]
       smi   [0.35, 1.00]
       mhi   [0.40, 1.00]

4. Season adjustments (additive):
       Kharif → vdli +0.05, smi +0.10
       Rabi   → mhi  +0.05
       Zaid   → vdli +0.10, smi −0.05

5. Water-source adjustments (additive):
       Canal    → smi +0.10
       Borewell → smi +0.05
       Rainfed  → smi −0.05
       Tank     → none

6. Clamp each index to [0, 1].
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from agri_advisor.models.selection import Selection

_UINT32_MASK = 0xFFFFFFFF
_UINT32_MAX = 4294967295
_HASH_MULTIPLIER = 31

# index → (seed suffix, nominal lo, nominal hi)
INDEX_SEED_PARAMS: dict[str, tuple[str, float, float]] = {
    "vdli": ("vldi", 0.1, 1.0),
    "smi":  ("smi",  0.35, 1.0),
    "mhi":  ("mhi",  0.4, 1.0),
}

# Season → (vdli, smi, mhi) deltas
_SEASON_ADJUSTMENTS: dict[str, tuple[float, float, float]] = {
    "Kharif": (0.05, 0.1,  0.0),
    "Rabi":   (0.0,  0.0,  0.05),
    "Zaid":   (0.1, -0.05, 0.0),
}

# Water source → smi delta
_WATER_SMI_ADJUSTMENTS: dict[str, float] = {
    "Canal":     0.1,
    "Borewell":  0.05,
    "Rainfed":  -0.05,
    "Tank":      0.0,
}


@dataclass(frozen=True)
class IndexTriple:
    """Derived vdli / smi / mhi values, each in [0, 1]."""

    vdli: float
    smi:  float
    mhi:  float

    def as_dict(self) -> dict[str, float]:
        return {"vdli": self.vdli, "smi": self.smi, "mhi": self.mhi}


def rolling_hash32(text: str) -> int:
    """Multiply-add string hash over UTF-16 code units, as an unsigned 32-bit int.

    Equivalent to ``h = h * 31 + c`` with signed 32-bit wraparound, with the
    final bit pattern read as unsigned. Characters outside the BMP contribute
    their two surrogate code units.
    """
    h = 0
    encoded = text.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * _HASH_MULTIPLIER + code_unit) & _UINT32_MASK
    return h


def round_half_up(value: float, places: int = 2) -> float:
    """Round on the exact binary value, ties away from zero for positives."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def seeded_value(seed: str, lo: float, hi: float) -> float:
    """Map ``seed`` to a 2-decimal value in ``[lo, hi]`` via ``rolling_hash32``."""
    unit = rolling_hash32(seed) / _UINT32_MAX
    return round_half_up(unit * (hi - lo) + lo, 2)


def base_indices(seed: str) -> IndexTriple:
    """Unadjusted indices for a base seed (before season / water adjustments)."""
    values = {
        name: seeded_value(seed + suffix, lo, hi)
        for name, (suffix, lo, hi) in INDEX_SEED_PARAMS.items()
    }
    return IndexTriple(**values)


def adjust_indices(base: IndexTriple, season: str, water_source: str) -> IndexTriple:
    """Apply season then water-source deltas, then clamp to [0, 1].

    Unknown season or water source values contribute no adjustment.
    """
    v, s, m = base.vdli, base.smi, base.mhi

    dv, ds, dm = _SEASON_ADJUSTMENTS.get(season, (0.0, 0.0, 0.0))
    v += dv
    s += ds
    m += dm

    s += _WATER_SMI_ADJUSTMENTS.get(water_source, 0.0)

    return IndexTriple(
        vdli=_clamp(v, 0.0, 1.0),
        smi=_clamp(s, 0.0, 1.0),
        mhi=_clamp(m, 0.0, 1.0),
    )


def derive_indices(selection: Selection) -> IndexTriple:
    """Derive the clamped IndexTriple for a selection.

    Callers should check ``selection.is_complete`` first; an incomplete
    selection still hashes, but its indices have no meaning.
    """
    base = base_indices(selection.seed)
    return adjust_indices(base, selection.season, selection.water_source)


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
