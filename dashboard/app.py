"""
Agri Advisor — Streamlit Dashboard
==================================

Farmer-facing panels over the ``agri_advisor`` library.

App structure (3 tabs)
----------------------
  1. Crop Recommendation — state / district / season / water source
                           selectors; ranked crop cards with an
                           expandable detail section.
  2. Government Schemes  — keyword search, results grouped by category.
  3. Market Insights     — live (or fixture) mandi prices with a
                           simulated 30-day trend for the selected crop.

Usage
-----
    pip install -e ".[dashboard]"
    streamlit run dashboard/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# ── Ensure project root is importable ────────────────────────────────────────
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

# ── Must be the first Streamlit call ─────────────────────────────────────────
st.set_page_config(
    page_title="Agri Advisor",
    page_icon=":seedling:",
    layout="wide",
    initial_sidebar_state="expanded",
)

import pandas as pd

from agri_advisor.market.session import MarketPanelState
from agri_advisor.recommendations.session import RecommendationSession
from agri_advisor.reporting.formatters import format_change
from agri_advisor.schemes.directory import group_by_category, search_schemes
from agri_advisor.taxonomy.selection_taxonomy import PriceSortOrder, Season, WaterSource
from dashboard.data_loader import fetch_market_prices, get_config, get_reference_data

_SORT_LABELS = {
    PriceSortOrder.PRICE_DESC: "Price High-Low",
    PriceSortOrder.PRICE_ASC:  "Price Low-High",
    PriceSortOrder.NAME_ASC:   "Name A-Z",
    PriceSortOrder.NAME_DESC:  "Name Z-A",
}

try:
    config = get_config()
    data = get_reference_data()
except (FileNotFoundError, ValueError) as exc:
    st.error(f"Could not load configuration or reference data: {exc}")
    st.stop()


# ── Sidebar ───────────────────────────────────────────────────────────────────

with st.sidebar:
    st.title("Agri Advisor")
    st.caption("Crop recommendations, schemes and market prices")
    st.divider()
    if config.market.api_key:
        st.success("Market feed: live (data.gov.in)")
    else:
        st.warning("Market feed: fixture data (no API key configured)")

    if st.button("Clear cache", help="Force re-fetch market prices."):
        st.cache_data.clear()
        st.rerun()


# ── Session state ─────────────────────────────────────────────────────────────

if "rec_session" not in st.session_state:
    st.session_state.rec_session = RecommendationSession(data)
if "market_panel" not in st.session_state:
    st.session_state.market_panel = MarketPanelState(sort_order=config.market.default_sort)

rec_session: RecommendationSession = st.session_state.rec_session
market_panel: MarketPanelState = st.session_state.market_panel

_BLANK = ""


def _options(values) -> list[str]:
    return [_BLANK, *values]


def _index_of(options: list[str], value: str) -> int:
    return options.index(value) if value in options else 0


tab_rec, tab_schemes, tab_market = st.tabs(
    ["Crop Recommendation", "Government Schemes", "Market Insights"]
)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 1 — Crop Recommendation
# ══════════════════════════════════════════════════════════════════════════════

with tab_rec:
    st.header("Crop Recommendation")

    sel = rec_session.selection
    col1, col2 = st.columns(2)
    with col1:
        state_opts = _options(data.region_districts.keys())
        state = st.selectbox(
            "State", state_opts, index=_index_of(state_opts, sel.state),
            format_func=lambda s: s or "-- Select State --", key="rec_state",
        )
        rec_session.select(state=state)

        season_opts = _options(s.value for s in Season)
        season = st.selectbox(
            "Season", season_opts, index=_index_of(season_opts, sel.season),
            format_func=lambda s: s or "-- Select Season --", key="rec_season",
        )
    with col2:
        district_opts = _options(data.districts_for(rec_session.selection.state))
        district = st.selectbox(
            "District", district_opts,
            index=_index_of(district_opts, rec_session.selection.district),
            format_func=lambda d: d or "-- Select District --",
            disabled=not rec_session.selection.state, key="rec_district",
        )

        water_opts = _options(w.value for w in WaterSource)
        water = st.selectbox(
            "Water Source", water_opts, index=_index_of(water_opts, sel.water_source),
            format_func=lambda w: w or "-- Select Water Source --", key="rec_water",
        )

    rec_session.select(district=district, season=season, water_source=water)

    if rec_session.selection.is_complete:
        indices = rec_session.indices
        m1, m2, m3 = st.columns(3)
        m1.metric("VDLI", f"{indices.vdli:.2f}")
        m2.metric("SMI", f"{indices.smi:.2f}")
        m3.metric("MHI", f"{indices.mhi:.2f}")

        st.subheader("Recommended Crops")
        cards = rec_session.renderable_results
        if not cards:
            st.info("No suitable crops found for this combination.")
        else:
            grid = st.columns(2)
            for i, ranked in enumerate(cards):
                d = ranked.details
                with grid[i % 2].container(border=True):
                    st.markdown(f"**{ranked.rank}. {ranked.entry.name}**")
                    st.markdown(
                        f"**Soil:** {', '.join(d.soil)}  \n"
                        f"**Water:** {d.water}  \n"
                        f"**Yield:** {d.avg_yield_kg_per_acre:,.0f} kg/acre  \n"
                        f"**Cost:** Rs {d.investment_per_acre:,.0f} /acre  \n"
                        f"**Profit:** Rs {d.avg_profit_per_acre:,.0f} /acre"
                    )
                    st.progress(d.cost_share, text="Cost share of cost + profit")
                    with st.expander("Show more"):
                        if d.fertilizers:
                            st.markdown("**Fertilizers:**")
                            if isinstance(d.fertilizers, dict):
                                for stage, products in d.fertilizers.items():
                                    joined = (
                                        ", ".join(products)
                                        if isinstance(products, list) else products
                                    )
                                    st.markdown(f"- **{stage}:** {joined}")
                            else:
                                st.write(d.fertilizers)
                        if d.pests:
                            st.markdown("**Common Pests:**")
                            pests = d.pests if isinstance(d.pests, list) else [d.pests]
                            st.markdown("\n".join(f"- {p}" for p in pests))
                        if d.tips:
                            st.markdown("**Tips:**")
                            tips = d.tips if isinstance(d.tips, list) else [d.tips]
                            st.markdown("\n".join(f"- {t}" for t in tips))


# ══════════════════════════════════════════════════════════════════════════════
# Tab 2 — Government Schemes
# ══════════════════════════════════════════════════════════════════════════════

with tab_schemes:
    st.header("Government Schemes")
    query = st.text_input(
        "Search schemes",
        placeholder="e.g. insurance, credit, skill",
        key="scheme_query",
    )
    grouped = group_by_category(search_schemes(data.schemes, query))
    if not grouped:
        st.info("No schemes found. Try another keyword.")
    for category, schemes in grouped.items():
        st.subheader(category)
        grid = st.columns(3)
        for i, scheme in enumerate(schemes):
            with grid[i % 3].container(border=True):
                st.markdown(f"**{scheme.name}**")
                st.caption(scheme.description)
                st.link_button("Visit Website", scheme.link)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 3 — Market Insights
# ══════════════════════════════════════════════════════════════════════════════

with tab_market:
    st.header("Market Insights (India)")

    col1, col2, col3 = st.columns(3)
    with col1:
        m_state_opts = _options(data.region_districts.keys())
        m_state = st.selectbox(
            "State", m_state_opts, index=_index_of(m_state_opts, market_panel.state),
            format_func=lambda s: s or "Select State", key="mkt_state",
        )
        market_panel.select(state=m_state)
    with col2:
        m_district_opts = _options(data.districts_for(market_panel.state))
        m_district = st.selectbox(
            "District", m_district_opts,
            index=_index_of(m_district_opts, market_panel.district),
            format_func=lambda d: d or "Select District",
            disabled=not market_panel.state, key="mkt_district",
        )
        market_panel.select(district=m_district)
    with col3:
        sort_opts = list(_SORT_LABELS)
        market_panel.sort_order = st.selectbox(
            "Sort", sort_opts,
            index=_index_of(sort_opts, market_panel.sort_order),
            format_func=lambda o: _SORT_LABELS[o], key="mkt_sort",
        )

    if market_panel.needs_fetch:
        token = market_panel.begin_fetch()
        response, error = fetch_market_prices(token.state, token.district)
        if error is not None:
            market_panel.fail_fetch(token, error)
        else:
            market_panel.complete_fetch(token, response.records)

        if market_panel.error:
            st.error(market_panel.error)
        else:
            insights = market_panel.insights()
            left, right = st.columns([1, 2])
            with left:
                if not insights:
                    st.info(
                        f"No data available for "
                        f"{market_panel.district or 'selected district'}, {market_panel.state}."
                    )
                for insight in insights:
                    with st.container(border=True):
                        st.markdown(f"**{insight.commodity}**  \n{insight.market}")
                        st.metric(
                            "Modal price",
                            f"Rs {insight.modal_price:,}",
                            delta=format_change(insight.change_pct),
                        )
                        if st.button("View trend", key=f"trend-{insight.market}-{insight.commodity}"):
                            market_panel.select_commodity(insight.commodity)
            with right:
                history = market_panel.selected_history()
                if history:
                    st.subheader(f"Price Trend: {market_panel.selected_commodity}")
                    st.caption("Simulated 30-day price history")
                    df = pd.DataFrame(
                        {"date": [p.date for p in history], "price": [p.price for p in history]}
                    ).set_index("date")
                    st.line_chart(df["price"])
                else:
                    st.info(
                        "Choose a state and district, then select a crop "
                        "to view its price trend."
                    )
    else:
        st.info("Select a state to load market prices.")
