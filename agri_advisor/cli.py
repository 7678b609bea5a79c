"""
Agri Advisor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (derive indices, rank crops, fetch prices, ...).
  5. Report result to stdout.

Install and run::

    pip install -e .
    agri-advisor --help
    agri-advisor validate-config
    agri-advisor districts --state Punjab
    agri-advisor indices --state Punjab --district Ludhiana --season Rabi --water Canal
    agri-advisor recommend --state Punjab --district Ludhiana --season Rabi --water Canal
    agri-advisor schemes --search insurance
    agri-advisor market --state Punjab --district Ludhiana --sort name_asc
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="agri-advisor",
    help="Agri Advisor — crop recommendations, government schemes and market prices.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from agri_advisor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from agri_advisor.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_reference_or_exit(config):
    """Load reference datasets, exiting with code 1 on missing or invalid files."""
    from agri_advisor.reference.loader import load_reference_data

    try:
        return load_reference_data(config)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Reference data: {exc}", err=True)
        raise typer.Exit(code=1)


def _build_selection_or_exit(data, state: str, district: str, season: str, water: str):
    """Validate selector values against reference data and build a Selection."""
    from pydantic import ValidationError

    from agri_advisor.models.selection import Selection

    if state not in data.region_districts:
        typer.echo(f"[ERROR] Unknown state '{state}'.", err=True)
        raise typer.Exit(code=1)
    if district not in data.districts_for(state):
        typer.echo(
            f"[ERROR] District '{district}' is not listed for {state}. "
            f"Run 'agri-advisor districts --state \"{state}\"'.",
            err=True,
        )
        raise typer.Exit(code=1)
    try:
        return Selection(state=state, district=district, season=season, water_source=water)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid selection: {exc.errors()[0]['msg']}", err=True)
        raise typer.Exit(code=1)


_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and the reference data it points to.

    Exits with code 1 if either fails validation.
    """
    config = _load_config_or_exit(config_path)
    data = _load_reference_or_exit(config)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Data directory:   {config.data.data_dir}")
    typer.echo(f"  States:           {len(data.region_districts)}")
    typer.echo(f"  Catalog crops:    {len(data.crop_catalog)}")
    typer.echo(f"  Detail records:   {len(data.crop_details)}")
    typer.echo(f"  Schemes:          {len(data.schemes)}")
    typer.echo(f"  Market feed:      {'live' if config.market.api_key else 'fixture (no API key)'}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        cfg = config.model_dump()
        if cfg["market"]["api_key"]:
            cfg["market"]["api_key"] = "***"
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(cfg, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("districts")
def districts(
    state: Optional[str] = typer.Option(
        None, "--state", help="List districts of this state. Omit to list states."
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List states, or the districts of one state."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_reference_or_exit(config)

    if state is None:
        for name in data.region_districts:
            typer.echo(name)
        return

    if state not in data.region_districts:
        typer.echo(f"[ERROR] Unknown state '{state}'.", err=True)
        raise typer.Exit(code=1)
    for name in data.districts_for(state):
        typer.echo(name)


@app.command("indices")
def indices(
    state: str = typer.Option(..., "--state", help="State name."),
    district: str = typer.Option(..., "--district", help="District name."),
    season: str = typer.Option(..., "--season", help="Kharif | Rabi | Zaid."),
    water: str = typer.Option(..., "--water", help="Canal | Borewell | Rainfed | Tank."),
    as_json: bool = typer.Option(False, "--json", help="Print indices as JSON."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print the derived VDLI / SMI / MHI indices for a selection."""
    from agri_advisor.recommendations.scorer import derive_indices
    from agri_advisor.reporting.formatters import format_indices

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_reference_or_exit(config)
    selection = _build_selection_or_exit(data, state, district, season, water)

    triple = derive_indices(selection)
    if as_json:
        typer.echo(json.dumps({"seed": selection.seed, **triple.as_dict()}))
    else:
        typer.echo(format_indices(selection, triple))


@app.command("recommend")
def recommend(
    state: str = typer.Option(..., "--state", help="State name."),
    district: str = typer.Option(..., "--district", help="District name."),
    season: str = typer.Option(..., "--season", help="Kharif | Rabi | Zaid."),
    water: str = typer.Option(..., "--water", help="Canal | Borewell | Rainfed | Tank."),
    details: bool = typer.Option(
        False, "--details", help="Include fertilizers, pests and tips."
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rank locally grown crops for a selection by profit per acre."""
    from agri_advisor.recommendations.ranker import recommend_with_details
    from agri_advisor.recommendations.scorer import derive_indices
    from agri_advisor.reporting.formatters import format_recommendations

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_reference_or_exit(config)
    selection = _build_selection_or_exit(data, state, district, season, water)

    triple = derive_indices(selection)
    ranked = recommend_with_details(selection, data, triple)
    typer.echo(
        format_recommendations(selection, ranked, indices=triple, show_details=details)
    )


@app.command("schemes")
def schemes(
    search: str = typer.Option("", "--search", "-s", help="Keyword (name, description or tag)."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List government schemes grouped by category, optionally filtered."""
    from agri_advisor.reporting.formatters import format_schemes
    from agri_advisor.schemes.directory import group_by_category, search_schemes

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_reference_or_exit(config)

    grouped = group_by_category(search_schemes(data.schemes, search))
    typer.echo(format_schemes(grouped, search))


@app.command("market")
def market(
    state: str = typer.Option(..., "--state", help="State name."),
    district: Optional[str] = typer.Option(None, "--district", help="District name."),
    sort: Optional[str] = typer.Option(
        None,
        "--sort",
        help="price_desc | price_asc | name_asc | name_desc (default from config).",
    ),
    trend: Optional[str] = typer.Option(
        None, "--trend", help="Also print the simulated 30-day trend for this commodity."
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show current mandi prices for a state or district."""
    from agri_advisor.ingestion.market_client import MarketPriceClient
    from agri_advisor.market.session import MarketPanelState
    from agri_advisor.reporting.formatters import format_market_table, format_price_history
    from agri_advisor.taxonomy.selection_taxonomy import PriceSortOrder

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    sort_order = sort or config.market.default_sort
    if sort_order not in {o.value for o in PriceSortOrder}:
        typer.echo(f"[ERROR] Unknown sort order '{sort_order}'.", err=True)
        raise typer.Exit(code=1)

    client = MarketPriceClient.from_config(config.market)
    panel = MarketPanelState(sort_order=sort_order)
    panel.select(state=state, district=district)
    panel.refresh(client)

    if panel.error:
        typer.echo(f"[ERROR] {panel.error}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        format_market_table(panel.insights(), state, district, is_fixture=client.is_stub)
    )

    if trend:
        panel.select_commodity(trend)
        history = panel.selected_history()
        if not history:
            typer.echo(f"[ERROR] No price data for commodity '{trend}'.", err=True)
            raise typer.Exit(code=1)
        market_name = next(i.market for i in panel.insights() if i.commodity == trend)
        typer.echo("")
        typer.echo(format_price_history(trend, market_name, history))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
