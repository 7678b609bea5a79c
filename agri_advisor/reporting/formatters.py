"""
ASCII terminal formatters for CLI commands.

All formatters accept already-computed panel data and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from agri_advisor.market.insights import CommodityInsight, PricePoint
from agri_advisor.models.crop import CropDetailRecord
from agri_advisor.models.scheme import Scheme
from agri_advisor.models.selection import Selection
from agri_advisor.recommendations.ranker import RankedCrop
from agri_advisor.recommendations.scorer import IndexTriple

_RULE = "-" * 72


# ── Recommendation panel ─────────────────────────────────────────────────────


def format_indices(selection: Selection, indices: IndexTriple) -> str:
    """One block showing the seed and the three derived indices."""
    return "\n".join([
        f"  Seed: {selection.seed}",
        f"  VDLI: {indices.vdli:.4f}   SMI: {indices.smi:.4f}   MHI: {indices.mhi:.4f}",
    ])


def _join_listish(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _format_fertilizers(fertilizers) -> list[str]:
    if not fertilizers:
        return []
    if isinstance(fertilizers, Mapping):
        lines = ["      Fertilizers:"]
        for stage, products in fertilizers.items():
            lines.append(f"        {stage}: {_join_listish(products)}")
        return lines
    return [f"      Fertilizers: {fertilizers}"]


def format_crop_card(ranked: RankedCrop, show_details: bool = False) -> str:
    """A single recommendation card. ``ranked.details`` must not be ``None``."""
    d: CropDetailRecord = ranked.details  # type: ignore[assignment]
    lines = [
        f"  {ranked.rank:>2}. {ranked.entry.name}  ({ranked.matches}/3 index matches)",
        f"      Soil:   {_join_listish(d.soil)}",
        f"      Water:  {d.water}",
        f"      Yield:  {d.avg_yield_kg_per_acre:,.0f} kg/acre",
        f"      Cost:   Rs {d.investment_per_acre:,.0f} /acre",
        f"      Profit: Rs {d.avg_profit_per_acre:,.0f} /acre",
        f"      [{_cost_profit_bar(d.cost_share)}] cost | profit",
    ]
    if show_details:
        lines.extend(_format_fertilizers(d.fertilizers))
        if d.pests:
            lines.append(f"      Common pests: {_join_listish(d.pests)}")
        if d.tips:
            lines.append(f"      Tips: {_join_listish(d.tips)}")
    return "\n".join(lines)


def _cost_profit_bar(cost_share: float, width: int = 30) -> str:
    cost_cells = round(cost_share * width)
    return "#" * cost_cells + "=" * (width - cost_cells)


def format_recommendations(
    selection:    Selection,
    ranked:       Sequence[RankedCrop],
    indices:      Optional[IndexTriple] = None,
    show_details: bool = False,
) -> str:
    """Full recommendation report. Entries without detail records are skipped."""
    header = (
        f"Crop recommendations | {selection.state} / {selection.district} | "
        f"{selection.season} | {selection.water_source}"
    )
    lines = [header, _RULE]
    if indices is not None:
        lines.append(format_indices(selection, indices))
        lines.append(_RULE)

    cards = [r for r in ranked if r.is_renderable]
    if not cards:
        lines.append("  No suitable crops found for this combination.")
        return "\n".join(lines)

    for r in cards:
        lines.append(format_crop_card(r, show_details=show_details))
    return "\n".join(lines)


# ── Schemes panel ────────────────────────────────────────────────────────────


def format_schemes(grouped: Mapping[str, Sequence[Scheme]], query: str = "") -> str:
    """Schemes grouped by category, in the given category order."""
    title = "Government schemes"
    if query:
        title += f" matching '{query}'"
    lines = [title, _RULE]
    if not grouped:
        lines.append("  No schemes found. Try another keyword.")
        return "\n".join(lines)

    for category, schemes in grouped.items():
        lines.append(f"[{category}]")
        for s in schemes:
            lines.append(f"  - {s.name}")
            lines.append(f"      {s.description}")
            lines.append(f"      {s.link}")
        lines.append("")
    return "\n".join(lines).rstrip()


# ── Market panel ─────────────────────────────────────────────────────────────


def format_change(change_pct: float) -> str:
    arrow = "+" if change_pct >= 0 else "-"
    return f"{arrow}{abs(change_pct):.1f}% vs 7d avg"


def format_market_table(
    insights: Sequence[CommodityInsight],
    state:    str,
    district: Optional[str] = None,
    is_fixture: bool = False,
) -> str:
    """ASCII table of commodity prices."""
    where = f"{district}, {state}" if district else state
    lines = [f"Market insights | {where}"]
    if is_fixture:
        lines.append("  [FIXTURE] No API key configured; showing sample data.")
    lines.append(_RULE)

    if not insights:
        lines.append(f"  No data available for {district or 'selected district'}, {state}.")
        return "\n".join(lines)

    lines.append(f"  {'Commodity':<28} {'Market':<18} {'Price (Rs/q)':>12}  Change")
    for i in insights:
        lines.append(
            f"  {i.commodity[:28]:<28} {i.market[:18]:<18} "
            f"{i.modal_price:>12,}  {format_change(i.change_pct)}"
        )
    return "\n".join(lines)


def format_price_history(commodity: str, market: str, history: Sequence[PricePoint]) -> str:
    """Simulated trend as date / price rows."""
    lines = [f"Price trend (simulated, 30 days): {commodity} @ {market}", _RULE]
    for p in history:
        lines.append(f"  {p.date.isoformat()}  Rs {p.price:,}")
    return "\n".join(lines)
